from storefront.api.errors import register_error_handlers
from storefront.api.routes import cart_router, catalogue_router, customer_router, order_router

__all__ = ["cart_router", "order_router", "customer_router", "catalogue_router", "register_error_handlers"]

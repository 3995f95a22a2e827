"""Map checkout-core error kinds to HTTP responses."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from storefront.errors import (
    CustomerNotFound,
    EmptyCart,
    InsufficientStock,
    InvalidTransition,
    ItemNotFound,
    OrderNotFound,
    PartialCancellationFailure,
    PersistenceFailure,
    ProductNotFound,
    StorefrontError,
)

ERROR_STATUS_CODES = {
    ProductNotFound: 404,
    ItemNotFound: 404,
    OrderNotFound: 404,
    CustomerNotFound: 404,
    InsufficientStock: 409,
    InvalidTransition: 409,
    PartialCancellationFailure: 409,
    EmptyCart: 422,
    PersistenceFailure: 503,
}


async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    """Map StorefrontError subclasses to appropriate HTTP responses."""
    status_code = ERROR_STATUS_CODES.get(type(exc), 500)
    return JSONResponse(
        status_code=status_code,
        content={"error": str(exc), "error_type": exc.kind},
    )


def register_error_handlers(app: FastAPI) -> None:
    """Install Protean's validation handlers and the checkout error mapping."""
    register_exception_handlers(app)
    app.add_exception_handler(StorefrontError, storefront_error_handler)

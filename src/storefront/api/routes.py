"""FastAPI routes for the Storefront domain — cart, checkout, orders and catalogue."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.api.identity import Principal, current_principal, require_owner_or_staff, require_staff
from storefront.api.schemas import (
    AddToCartRequest,
    CartResponse,
    ContactSchema,
    CustomerIdResponse,
    ItemIdResponse,
    LineItemSchema,
    OrderResponse,
    ProductResponse,
    RegisterCustomerRequest,
    RegisterProductRequest,
    ReplenishStockRequest,
    RepriceProductRequest,
    StatusResponse,
)
from storefront.cart.items import AddToCart, RemoveFromCart, cart_items
from storefront.checkout.coordinator import CheckoutCoordinator
from storefront.customer.registration import RegisterCustomer
from storefront.inventory.ledger import get_ledger
from storefront.order.lifecycle import OrderLifecycleManager
from storefront.utils.money import from_cents


def _order_response(order) -> OrderResponse:
    contact = order.contact
    return OrderResponse(
        order_id=str(order.id),
        customer_id=str(order.customer_id),
        status=order.status,
        total=order.total,
        contact=(
            ContactSchema(name=contact.name, email=contact.email, phone=contact.phone, address=contact.address)
            if contact
            else None
        ),
        items=[
            LineItemSchema(
                line_item_id=str(line.line_item_id),
                product_id=str(line.product_id),
                name=line.name,
                unit_price=line.unit_price,
                quantity=line.quantity,
            )
            for line in order.lines()
        ],
        cancelled_by=order.cancelled_by,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def _product_response(stock) -> ProductResponse:
    return ProductResponse(
        product_id=str(stock.id),
        name=stock.name,
        unit_price=stock.unit_price,
        available=stock.available,
    )


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def get_cart(principal: Principal = Depends(current_principal)) -> CartResponse:
    lines = cart_items(principal.customer_id)
    return CartResponse(
        customer_id=principal.customer_id,
        items=[
            LineItemSchema(
                line_item_id=line.line_item_id,
                product_id=line.product_id,
                name=line.name,
                unit_price=from_cents(line.unit_price_cents),
                quantity=line.quantity,
            )
            for line in lines
        ],
        subtotal=from_cents(sum(line.subtotal_cents for line in lines)),
    )


@cart_router.post("/items", status_code=201, response_model=ItemIdResponse)
async def add_cart_item(body: AddToCartRequest, principal: Principal = Depends(current_principal)) -> ItemIdResponse:
    command = AddToCart(
        customer_id=principal.customer_id,
        product_id=body.product_id,
        quantity=body.quantity,
    )
    item_id = current_domain.process(command, asynchronous=False)
    return ItemIdResponse(item_id=item_id)


@cart_router.delete("/items/{item_id}", response_model=StatusResponse)
async def remove_cart_item(item_id: str, principal: Principal = Depends(current_principal)) -> StatusResponse:
    command = RemoveFromCart(
        customer_id=principal.customer_id,
        item_id=item_id,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Checkout & Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(tags=["orders"])


@order_router.post("/checkout", status_code=201, response_model=OrderResponse)
async def checkout(principal: Principal = Depends(current_principal)) -> OrderResponse:
    """Convert the caller's cart into an order.

    Stock is reserved for every line; on any failure the reservations are
    released and the specific error kind is returned.
    """
    order = CheckoutCoordinator().checkout(principal.customer_id)
    return _order_response(order)


@order_router.get("/orders/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, principal: Principal = Depends(current_principal)) -> OrderResponse:
    order = OrderLifecycleManager().get(order_id)
    require_owner_or_staff(principal, order.customer_id)
    return _order_response(order)


@order_router.post("/orders/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(order_id: str, principal: Principal = Depends(current_principal)) -> OrderResponse:
    manager = OrderLifecycleManager()
    require_owner_or_staff(principal, manager.get(order_id).customer_id)
    order = manager.cancel(order_id, requesting_customer_id=principal.customer_id)
    return _order_response(order)


@order_router.post("/orders/{order_id}/finish", response_model=OrderResponse)
async def finish_order(order_id: str, principal: Principal = Depends(current_principal)) -> OrderResponse:
    require_staff(principal)
    order = OrderLifecycleManager().finish(order_id)
    return _order_response(order)


# ---------------------------------------------------------------------------
# Customer Router
# ---------------------------------------------------------------------------
customer_router = APIRouter(prefix="/customers", tags=["customers"])


@customer_router.put("/me", response_model=CustomerIdResponse)
async def register_customer(
    body: RegisterCustomerRequest, principal: Principal = Depends(current_principal)
) -> CustomerIdResponse:
    command = RegisterCustomer(
        customer_id=principal.customer_id,
        name=body.name,
        email=body.email,
        phone=body.phone,
        address=body.address,
    )
    result = current_domain.process(command, asynchronous=False)
    return CustomerIdResponse(customer_id=result)


# ---------------------------------------------------------------------------
# Catalogue Router (staff only)
# ---------------------------------------------------------------------------
catalogue_router = APIRouter(prefix="/products", tags=["catalogue"])


@catalogue_router.post("", status_code=201, response_model=ProductResponse)
async def register_product(
    body: RegisterProductRequest, principal: Principal = Depends(current_principal)
) -> ProductResponse:
    require_staff(principal)
    stock = get_ledger().register(
        product_id=body.product_id,
        name=body.name,
        unit_price=body.unit_price,
        available=body.available,
    )
    return _product_response(stock)


@catalogue_router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str, principal: Principal = Depends(current_principal)) -> ProductResponse:
    require_staff(principal)
    return _product_response(get_ledger().product(product_id))


@catalogue_router.put("/{product_id}/price", response_model=ProductResponse)
async def reprice_product(
    product_id: str, body: RepriceProductRequest, principal: Principal = Depends(current_principal)
) -> ProductResponse:
    require_staff(principal)
    return _product_response(get_ledger().reprice(product_id, body.unit_price))


@catalogue_router.post("/{product_id}/stock", response_model=ProductResponse)
async def replenish_stock(
    product_id: str, body: ReplenishStockRequest, principal: Principal = Depends(current_principal)
) -> ProductResponse:
    require_staff(principal)
    ledger = get_ledger()
    ledger.replenish(product_id, body.quantity)
    return _product_response(ledger.product(product_id))


@catalogue_router.delete("/{product_id}", response_model=StatusResponse)
async def discontinue_product(product_id: str, principal: Principal = Depends(current_principal)) -> StatusResponse:
    require_staff(principal)
    get_ledger().discontinue(product_id)
    return StatusResponse()

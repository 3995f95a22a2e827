"""Pydantic request/response schemas for the Storefront API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands and aggregates.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class ContactSchema(BaseModel):
    name: str
    email: str
    phone: str | None = None
    address: str | None = None


class LineItemSchema(BaseModel):
    line_item_id: str
    product_id: str
    name: str
    unit_price: Decimal
    quantity: int


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "prod-001",
                    "quantity": 2,
                }
            ]
        }
    }


class ItemIdResponse(BaseModel):
    item_id: str


class CartResponse(BaseModel):
    customer_id: str
    items: list[LineItemSchema]
    subtotal: Decimal


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class OrderResponse(BaseModel):
    order_id: str
    customer_id: str
    status: str
    total: Decimal
    contact: ContactSchema | None = None
    items: list[LineItemSchema]
    cancelled_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


# ---------------------------------------------------------------------------
# Customers
# ---------------------------------------------------------------------------
class RegisterCustomerRequest(ContactSchema):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Ada Lovelace",
                    "email": "ada@example.com",
                    "phone": "+44 20 7946 0000",
                    "address": "12 St James's Square, London",
                }
            ]
        }
    }


class CustomerIdResponse(BaseModel):
    customer_id: str


# ---------------------------------------------------------------------------
# Catalogue maintenance
# ---------------------------------------------------------------------------
class RegisterProductRequest(BaseModel):
    product_id: str
    name: str
    unit_price: Decimal = Field(ge=0, decimal_places=2)
    available: int = Field(ge=0, default=0)


class RepriceProductRequest(BaseModel):
    unit_price: Decimal = Field(ge=0, decimal_places=2)


class ReplenishStockRequest(BaseModel):
    quantity: int = Field(ge=1)


class ProductResponse(BaseModel):
    product_id: str
    name: str
    unit_price: Decimal
    available: int


class StatusResponse(BaseModel):
    status: str = "ok"

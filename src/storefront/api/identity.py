"""Caller identity and capability checks.

The upstream identity provider verifies credentials and forwards the
customer id and role as headers; they are trusted as-is here. Who may act on
an order is decided here, before any core operation is called.
"""

from enum import Enum

from fastapi import Header, HTTPException
from pydantic import BaseModel


class Role(Enum):
    CUSTOMER = "customer"
    STAFF = "staff"


class Principal(BaseModel):
    customer_id: str
    role: Role = Role.CUSTOMER

    @property
    def is_staff(self) -> bool:
        return self.role == Role.STAFF


def current_principal(
    x_customer_id: str = Header(default=""),
    x_customer_role: str = Header(default=Role.CUSTOMER.value),
) -> Principal:
    if not x_customer_id:
        raise HTTPException(status_code=401, detail="Missing customer identity")
    try:
        role = Role(x_customer_role.lower())
    except ValueError:
        raise HTTPException(status_code=403, detail=f"Unknown role: {x_customer_role}") from None
    return Principal(customer_id=x_customer_id, role=role)


def require_staff(principal: Principal) -> None:
    if not principal.is_staff:
        raise HTTPException(status_code=403, detail="Staff role required")


def require_owner_or_staff(principal: Principal, owner_id) -> None:
    if principal.is_staff or principal.customer_id == str(owner_id):
        return
    raise HTTPException(status_code=403, detail="Only the order's customer or staff may do this")

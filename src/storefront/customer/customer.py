"""Customer aggregate — the buyer contact details checkout copies onto orders.

The identity provider owns authentication; this aggregate only keeps the
contact information for a verified customer id. Orders take a snapshot of
it, so later profile edits never rewrite an existing order.
"""

from datetime import UTC, datetime

from protean.fields import DateTime, Identifier, String

from storefront.customer.events import CustomerRegistered
from storefront.domain import storefront


@storefront.aggregate
class Customer:
    customer_id = Identifier(required=True)
    name = String(required=True, max_length=200)
    email = String(required=True, max_length=254)
    phone = String(max_length=30)
    address = String(max_length=500)
    updated_at = DateTime()

    @classmethod
    def register(cls, customer_id, name, email, phone=None, address=None):
        customer = cls(
            id=str(customer_id),
            customer_id=str(customer_id),
            name=name,
            email=email,
            phone=phone,
            address=address,
            updated_at=datetime.now(UTC),
        )
        customer._announce()
        return customer

    def update_contact(self, name, email, phone=None, address=None):
        self.name = name
        self.email = email
        self.phone = phone
        self.address = address
        self.updated_at = datetime.now(UTC)
        self._announce()

    def contact_details(self):
        """Plain dict of the contact fields, used for the order snapshot."""
        return {
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
        }

    def _announce(self):
        self.raise_(
            CustomerRegistered(
                customer_id=str(self.customer_id),
                name=self.name,
                email=self.email,
            )
        )

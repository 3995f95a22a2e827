"""Customer contact registration — command and handler."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.customer.customer import Customer
from storefront.domain import storefront


@storefront.command(part_of="Customer")
class RegisterCustomer:
    """Create or replace the contact profile of a verified customer."""

    customer_id = Identifier(required=True)
    name = String(required=True, max_length=200)
    email = String(required=True, max_length=254)
    phone = String(max_length=30)
    address = String(max_length=500)


@storefront.command_handler(part_of=Customer)
class RegisterCustomerHandler:
    @handle(RegisterCustomer)
    def register_customer(self, command):
        repo = current_domain.repository_for(Customer)
        try:
            customer = repo.get(command.customer_id)
        except ObjectNotFoundError:
            customer = Customer.register(
                customer_id=command.customer_id,
                name=command.name,
                email=command.email,
                phone=command.phone,
                address=command.address,
            )
        else:
            customer.update_contact(
                name=command.name,
                email=command.email,
                phone=command.phone,
                address=command.address,
            )
        repo.add(customer)
        return str(customer.id)

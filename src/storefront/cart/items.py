"""Cart item management — commands and handler."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.domain import storefront
from storefront.errors import ItemNotFound
from storefront.inventory.ledger import get_ledger


@storefront.command(part_of="Cart")
class AddToCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="Cart")
class RemoveFromCart:
    customer_id = Identifier(required=True)
    item_id = Identifier(required=True)


def cart_for(customer_id):
    """Load the customer's cart, or ``None`` if nothing was ever added."""
    try:
        return current_domain.repository_for(Cart).get(str(customer_id))
    except ObjectNotFoundError:
        return None


def cart_items(customer_id):
    """Line items of the customer's cart in insertion order. Empty if there is no cart."""
    cart = cart_for(customer_id)
    return cart.line_items() if cart is not None else []


@storefront.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        # Raises ProductNotFound before the cart is touched
        product = get_ledger().product(command.product_id)

        repo = current_domain.repository_for(Cart)
        cart = cart_for(command.customer_id) or Cart.create(command.customer_id)
        item_id = cart.add_item(
            product_id=command.product_id,
            name=product.name,
            unit_price_cents=product.unit_price_cents,
            quantity=command.quantity,
        )
        repo.add(cart)
        return item_id

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        cart = cart_for(command.customer_id)
        if cart is None:
            raise ItemNotFound(command.item_id)
        cart.remove_item(item_id=command.item_id)
        current_domain.repository_for(Cart).add(cart)

"""Cart item management: commands and handler.

Stock is only checked here, never reserved. Reservation happens at checkout.
"""

from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.catalogue.product import Product
from storefront.checkout.validator import ensure_purchasable
from storefront.domain import storefront
from storefront.errors import CartItemNotFound, InsufficientStock, InvalidQuantity, Unauthorized


@storefront.command(part_of="Cart")
class AddCartLine:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)


@storefront.command(part_of="Cart")
class UpdateCartLineQuantity:
    user_id = Identifier(required=True)
    line_id = Identifier(required=True)
    quantity = Integer(required=True)


@storefront.command(part_of="Cart")
class RemoveCartLine:
    user_id = Identifier(required=True)
    line_id = Identifier(required=True)


def owned_line(cart, line_id, user_id):
    """Return the line from the caller's cart, telling foreign lines from missing ones."""
    repo = current_domain.repository_for(Cart)
    line = cart.find_line(line_id) if cart else None
    if line is not None:
        return line
    if repo.line_exists(line_id):
        raise Unauthorized("Cart item belongs to another user", line_id=str(line_id), user_id=str(user_id))
    raise CartItemNotFound(line_id)


@storefront.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddCartLine)
    def add_line(self, command):
        if command.quantity is None or command.quantity <= 0:
            raise InvalidQuantity(command.quantity)

        repo = current_domain.repository_for(Cart)
        cart = repo.find_by_user(command.user_id) or Cart.create(command.user_id)

        product = current_domain.repository_for(Product).get_product(command.product_id)
        existing = cart.line_for_product(product.id)
        ensure_purchasable(product, command.quantity + (existing.quantity if existing else 0))

        line = cart.add_line(product_id=product.id, unit_price=product.price, quantity=command.quantity)
        repo.add(cart)
        return str(line.id)

    @handle(UpdateCartLineQuantity)
    def update_quantity(self, command):
        if command.quantity is None or command.quantity <= 0:
            raise InvalidQuantity(command.quantity)

        repo = current_domain.repository_for(Cart)
        cart = repo.find_by_user(command.user_id)
        line = owned_line(cart, command.line_id, command.user_id)

        product = current_domain.repository_for(Product).get_product(line.product_id)
        if not product.has_stock_for(command.quantity):
            raise InsufficientStock(product.id, command.quantity, product.stock_quantity, name=product.name)

        cart.update_line_quantity(line.id, command.quantity, unit_price=product.price)
        repo.add(cart)

    @handle(RemoveCartLine)
    def remove_line(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.find_by_user(command.user_id)
        line = owned_line(cart, command.line_id, command.user_id)

        cart.remove_line(line.id)
        repo.add(cart)

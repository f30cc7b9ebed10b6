"""Cart management: commands and handler.

Handles lazy cart creation, clearing, and merging a guest's lines into the
signed-in user's cart.
"""

import json

import structlog
from protean import handle
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.catalogue.product import Product
from storefront.checkout.validator import ensure_purchasable
from storefront.domain import storefront
from storefront.errors import CartEmpty, InvalidQuantity

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Cart")
class CreateCart:
    """Return the user's cart, creating it on first access."""

    user_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class ClearCart:
    user_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class MergeGuestItems:
    """Fold the lines a shopper collected before signing in into their cart."""

    user_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {product_id, quantity}


@storefront.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(CreateCart)
    def create_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.find_by_user(command.user_id)
        if cart is None:
            cart = Cart.create(command.user_id)
            repo.add(cart)
            logger.info("cart_created", user_id=str(command.user_id), cart_id=str(cart.id))
        return str(cart.id)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.find_by_user(command.user_id)
        if cart is None:
            raise CartEmpty(command.user_id)

        cart.clear()
        repo.add(cart)

    @handle(MergeGuestItems)
    def merge_guest_items(self, command):
        items = json.loads(command.items) if isinstance(command.items, str) else command.items

        repo = current_domain.repository_for(Cart)
        products = current_domain.repository_for(Product)
        cart = repo.find_by_user(command.user_id) or Cart.create(command.user_id)

        merged = 0
        for item in items:
            quantity = item.get("quantity")
            if not isinstance(quantity, int) or quantity <= 0:
                raise InvalidQuantity(quantity)

            product = products.get_product(item["product_id"])
            existing = cart.line_for_product(product.id)
            ensure_purchasable(product, quantity + (existing.quantity if existing else 0))
            cart.add_line(product_id=product.id, unit_price=product.price, quantity=quantity)
            merged += 1

        repo.add(cart)
        return merged

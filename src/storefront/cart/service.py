"""Cart Service: the entry point for every cart operation.

Each mutating call takes the user's lock and the locks of the products it
touches, then dispatches a command whose handler runs in its own unit of
work. Reads go straight to the repository.
"""

import json

import structlog
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.cart.items import AddCartLine, RemoveCartLine, UpdateCartLineQuantity
from storefront.cart.management import ClearCart, CreateCart, MergeGuestItems
from storefront.checkout.validator import CheckoutValidator
from storefront.errors import InvalidQuantity, guarded
from storefront.utils.locks import serialized, user_locks

logger = structlog.get_logger(__name__)


def _positive(quantity):
    if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
        raise InvalidQuantity(quantity)
    return quantity


class CartService:
    def _repo(self):
        return current_domain.repository_for(Cart)

    @guarded
    def get_or_create(self, user_id) -> Cart:
        """Idempotent: the second call returns the cart the first one created."""
        with serialized(user_id=user_id):
            current_domain.process(CreateCart(user_id=user_id), asynchronous=False)
            return self._repo().get_for_user(user_id)

    def get(self, user_id) -> Cart:
        """The user's cart. Raises ``CartNotFound`` when none was created yet."""
        return self._repo().get_for_user(user_id)

    def exists(self, user_id) -> bool:
        return self._repo().find_by_user(user_id) is not None

    @guarded
    def add_item(self, user_id, product_id, quantity: int) -> Cart:
        _positive(quantity)
        with serialized(user_id=user_id, product_ids=[product_id]):
            line_id = current_domain.process(
                AddCartLine(user_id=user_id, product_id=product_id, quantity=quantity),
                asynchronous=False,
            )
            cart = self._repo().get_for_user(user_id)

        logger.info("cart_item_added", user_id=str(user_id), product_id=str(product_id), quantity=quantity, line_id=line_id)
        return cart

    @guarded
    def update_quantity(self, user_id, line_id, quantity: int) -> Cart:
        _positive(quantity)
        with user_locks.hold(user_id):
            product_ids = self._line_product(user_id, line_id)
            with serialized(product_ids=product_ids):
                current_domain.process(
                    UpdateCartLineQuantity(user_id=user_id, line_id=line_id, quantity=quantity),
                    asynchronous=False,
                )
            cart = self._repo().get_for_user(user_id)

        logger.info("cart_item_updated", user_id=str(user_id), line_id=str(line_id), quantity=quantity)
        return cart

    @guarded
    def remove_item(self, user_id, line_id) -> Cart:
        with serialized(user_id=user_id):
            current_domain.process(RemoveCartLine(user_id=user_id, line_id=line_id), asynchronous=False)
            cart = self._repo().get_for_user(user_id)

        logger.info("cart_item_removed", user_id=str(user_id), line_id=str(line_id))
        return cart

    @guarded
    def clear(self, user_id) -> Cart:
        with serialized(user_id=user_id):
            current_domain.process(ClearCart(user_id=user_id), asynchronous=False)
            cart = self._repo().get_for_user(user_id)

        logger.info("cart_cleared", user_id=str(user_id))
        return cart

    @guarded
    def merge_guest_items(self, user_id, items: list[dict]) -> Cart:
        """Add each guest line with the same checks as ``add_item``. All or nothing."""
        for item in items:
            _positive(item.get("quantity"))

        product_ids = [item["product_id"] for item in items]
        with serialized(user_id=user_id, product_ids=product_ids):
            merged = current_domain.process(
                MergeGuestItems(user_id=user_id, items=json.dumps(items)),
                asynchronous=False,
            )
            cart = self._repo().get_for_user(user_id)

        logger.info("guest_items_merged", user_id=str(user_id), lines=merged)
        return cart

    def item_count(self, user_id) -> int:
        cart = self._repo().find_by_user(user_id)
        return cart.total_items if cart else 0

    def total(self, user_id) -> float:
        cart = self._repo().find_by_user(user_id)
        return cart.total_amount if cart else 0.0

    @guarded
    def validate_for_checkout(self, user_id) -> None:
        """Read-only preview of the checks checkout will run."""
        CheckoutValidator().validate(self._repo().find_by_user(user_id), user_id=user_id)

    def _line_product(self, user_id, line_id) -> list:
        cart = self._repo().find_by_user(user_id)
        line = cart.find_line(line_id) if cart else None
        return [line.product_id] if line else []

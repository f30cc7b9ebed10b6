"""Order Service: checkout and the order lifecycle.

Checkout locks the user first, reads the cart to learn which products it
needs, then locks those products before dispatching ``PlaceOrder``. Locks are
held until the handler's unit of work has committed.
"""

import json

import structlog
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.errors import guarded
from storefront.order.cancellation import CancelOrder
from storefront.order.fulfillment import MarkProcessing, RecordDelivery, RecordShipment
from storefront.order.order import Order
from storefront.order.placement import PlaceOrder
from storefront.utils.locks import serialized, user_locks

logger = structlog.get_logger(__name__)


class OrderService:
    def _repo(self):
        return current_domain.repository_for(Order)

    @guarded
    def create_from_cart(self, user_id, shipping_address: dict, payment_method=None, notes=None) -> Order:
        with user_locks.hold(user_id):
            cart = current_domain.repository_for(Cart).find_by_user(user_id)
            product_ids = [line.product_id for line in cart.lines] if cart else []

            with serialized(product_ids=product_ids):
                order_id = current_domain.process(
                    PlaceOrder(
                        user_id=user_id,
                        shipping_address=json.dumps(shipping_address),
                        payment_method=payment_method,
                        notes=notes,
                    ),
                    asynchronous=False,
                )

        return self.get(order_id)

    @guarded
    def cancel(self, order_id, reason=None, user_id=None) -> Order:
        order = self.get(order_id)
        with serialized(product_ids=[line.product_id for line in order.lines]):
            current_domain.process(
                CancelOrder(order_id=order_id, reason=reason, requested_by=user_id),
                asynchronous=False,
            )

        logger.info("order_cancelled", order_id=str(order_id), reason=reason)
        return self.get(order_id)

    @guarded
    def mark_processing(self, order_id) -> Order:
        with serialized():
            current_domain.process(MarkProcessing(order_id=order_id), asynchronous=False)
        return self.get(order_id)

    @guarded
    def mark_shipped(self, order_id, tracking_number) -> Order:
        with serialized():
            current_domain.process(
                RecordShipment(order_id=order_id, tracking_number=tracking_number),
                asynchronous=False,
            )

        logger.info("order_shipped", order_id=str(order_id), tracking_number=tracking_number)
        return self.get(order_id)

    @guarded
    def mark_delivered(self, order_id) -> Order:
        with serialized():
            current_domain.process(RecordDelivery(order_id=order_id), asynchronous=False)

        logger.info("order_delivered", order_id=str(order_id))
        return self.get(order_id)

    def get(self, order_id) -> Order:
        return self._repo().get_order(order_id)

    def find_by_order_number(self, order_number) -> Order | None:
        return self._repo().find_by_order_number(order_number)

    def find_by_tracking_number(self, tracking_number) -> Order | None:
        return self._repo().find_by_tracking_number(tracking_number)

    def list_for_user(self, user_id) -> list[Order]:
        return self._repo().for_user(user_id)

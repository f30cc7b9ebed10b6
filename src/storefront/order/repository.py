"""Repository for the Order aggregate."""

from protean.exceptions import ObjectNotFoundError

from storefront.domain import storefront
from storefront.errors import OrderNotFound
from storefront.order.order import Order


@storefront.repository(part_of=Order)
class OrderRepository:
    def get_order(self, order_id) -> Order:
        try:
            return self.get(str(order_id))
        except ObjectNotFoundError:
            raise OrderNotFound(order_id) from None

    def find_by_order_number(self, order_number: str) -> Order | None:
        results = self._dao.query.filter(order_number=order_number).all().items
        return results[0] if results else None

    def find_by_tracking_number(self, tracking_number: str) -> Order | None:
        results = self._dao.query.filter(tracking_number=tracking_number).all().items
        return results[0] if results else None

    def for_user(self, user_id) -> list[Order]:
        """A user's orders, newest first."""
        results = self._dao.query.filter(user_id=str(user_id)).all().items
        return sorted(results, key=lambda order: order.order_date, reverse=True)

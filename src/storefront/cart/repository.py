"""Repository for the Cart aggregate."""

from protean.utils.globals import current_domain

from storefront.cart.cart import Cart, CartLine
from storefront.domain import storefront
from storefront.errors import CartNotFound


@storefront.repository(part_of=Cart)
class CartRepository:
    def find_by_user(self, user_id) -> Cart | None:
        results = self._dao.query.filter(user_id=str(user_id)).all().items
        return results[0] if results else None

    def get_for_user(self, user_id) -> Cart:
        cart = self.find_by_user(user_id)
        if cart is None:
            raise CartNotFound(user_id)
        return cart

    def line_exists(self, line_id) -> bool:
        """True when a cart line with this id exists in any user's cart."""
        lines = current_domain.repository_for(CartLine)._dao.query.filter(id=str(line_id)).all()
        return bool(lines.items)

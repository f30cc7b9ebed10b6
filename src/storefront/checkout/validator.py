"""Checkout Validator: confirms a cart can be turned into an order right now.

Runs inside the order placement unit of work, after the caller already holds
the product locks, so the stock it sees cannot change before reservation.
The same checks back ``CartService.validate_for_checkout``, which runs them
read-only.
"""

from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.errors import CartEmpty, InsufficientStock, ProductUnavailable


def ensure_purchasable(product: Product, quantity: int) -> None:
    """Raise unless ``quantity`` units of ``product`` can be sold."""
    if not product.active:
        raise ProductUnavailable(product.id, name=product.name)
    if not product.has_stock_for(quantity):
        raise InsufficientStock(product.id, quantity, product.stock_quantity, name=product.name)


class CheckoutValidator:
    def validate(self, cart, user_id=None) -> list[tuple]:
        """Return ``(line, product)`` pairs for every line of ``cart``.

        Raises ``CartEmpty`` when there is nothing to buy, then the first
        ``ProductNotFound``, ``ProductUnavailable`` or ``InsufficientStock``
        found, in line order.
        """
        if cart is None or cart.is_empty:
            raise CartEmpty(user_id or (cart.user_id if cart else None))

        products = current_domain.repository_for(Product)
        checked = []
        for line in cart.lines:
            product = products.get_product(line.product_id)
            ensure_purchasable(product, line.quantity)
            checked.append((line, product))
        return checked

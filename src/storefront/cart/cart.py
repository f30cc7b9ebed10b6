"""Cart aggregate (CQRS): one per user, created lazily, never deleted.

An empty cart is a valid persisted cart. Totals are recomputed from the
lines and checked at the end of every mutation, so a cart is never saved
with totals that disagree with its lines. The aggregate has no stock side
effects; availability checks live in the command handlers.

Lines changed in place are handed back through ``add_lines`` so the
repository records them as updated. Otherwise adding a new line in the same
unit of work reloads the lines and drops the in-place change.
"""

from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer

from storefront.cart.events import CartCleared, CartLineAdded, CartLineQuantityUpdated, CartLineRemoved
from storefront.domain import storefront
from storefront.errors import CartEmpty, CartItemNotFound, InvalidQuantity


def _money(amount) -> float:
    return round(amount or 0.0, 2)


@storefront.entity(part_of="Cart")
class CartLine:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)  # Captured at add or last quantity update
    subtotal = Float(default=0.0)
    added_at = DateTime()


@storefront.aggregate
class Cart:
    user_id = Identifier(required=True, unique=True)
    lines = HasMany(CartLine)
    total_items = Integer(default=0)
    total_amount = Float(default=0.0)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def one_line_per_product(self):
        product_ids = [str(line.product_id) for line in self.lines]
        if len(product_ids) != len(set(product_ids)):
            raise ValidationError({"lines": ["A product can appear only once in a cart"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id):
        now = datetime.now(UTC)
        return cls(user_id=user_id, total_items=0, total_amount=0.0, created_at=now, updated_at=now)

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def line_for_product(self, product_id):
        return next((line for line in self.lines if str(line.product_id) == str(product_id)), None)

    def find_line(self, line_id):
        return next((line for line in self.lines if str(line.id) == str(line_id)), None)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    # -------------------------------------------------------------------
    # Mutators
    # -------------------------------------------------------------------
    def add_line(self, product_id, unit_price, quantity):
        """Add ``quantity`` of a product, merging into its existing line if there is one."""
        if quantity is None or quantity <= 0:
            raise InvalidQuantity(quantity)

        now = datetime.now(UTC)
        existing = self.line_for_product(product_id)

        with atomic_change(self):
            if existing:
                existing.quantity += quantity
                existing.unit_price = unit_price
                existing.subtotal = _money(existing.quantity * unit_price)
                self.add_lines(existing)
                line = existing
            else:
                line = CartLine(
                    product_id=product_id,
                    quantity=quantity,
                    unit_price=unit_price,
                    subtotal=_money(quantity * unit_price),
                    added_at=now,
                )
                self.add_lines(line)
            self._recalculate_totals()

        self.updated_at = now

        self.raise_(
            CartLineAdded(
                cart_id=str(self.id),
                user_id=str(self.user_id),
                line_id=str(line.id),
                product_id=str(product_id),
                quantity=quantity,
                line_quantity=line.quantity,
                unit_price=unit_price,
            )
        )
        return line

    def update_line_quantity(self, line_id, quantity, unit_price=None):
        """Set a line's quantity. The unit price is refreshed when one is given."""
        if quantity is None or quantity <= 0:
            raise InvalidQuantity(quantity)

        line = self.find_line(line_id)
        if line is None:
            raise CartItemNotFound(line_id)

        previous_quantity = line.quantity
        with atomic_change(self):
            line.quantity = quantity
            if unit_price is not None:
                line.unit_price = unit_price
            line.subtotal = _money(quantity * line.unit_price)
            self.add_lines(line)
            self._recalculate_totals()

        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartLineQuantityUpdated(
                cart_id=str(self.id),
                line_id=str(line.id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )
        return line

    def remove_line(self, line_id):
        line = self.find_line(line_id)
        if line is None:
            raise CartItemNotFound(line_id)

        product_id = str(line.product_id)
        with atomic_change(self):
            self.remove_lines(line)
            self._recalculate_totals()

        self.updated_at = datetime.now(UTC)

        self.raise_(CartLineRemoved(cart_id=str(self.id), line_id=str(line_id), product_id=product_id))

    def clear(self):
        """Remove every line. Clearing an already empty cart is an error."""
        if self.is_empty:
            raise CartEmpty(self.user_id)

        removed = len(self.lines)
        with atomic_change(self):
            for line in list(self.lines):
                self.remove_lines(line)
            self._recalculate_totals()

        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            CartCleared(
                cart_id=str(self.id),
                user_id=str(self.user_id),
                lines_removed=removed,
                cleared_at=now,
            )
        )

    def _recalculate_totals(self):
        self.total_items = sum(line.quantity for line in self.lines)
        self.total_amount = _money(sum(line.subtotal or 0.0 for line in self.lines))
        self.check_totals()

    def check_totals(self):
        """Raise if any line's subtotal or the cart's totals disagree with the lines."""
        for line in self.lines:
            if abs(_money(line.subtotal) - _money(line.quantity * line.unit_price)) > 0.005:
                raise ValidationError({"totals": [f"Line {line.id} subtotal does not match its quantity"]})

        items = sum(line.quantity for line in self.lines)
        amount = _money(sum(line.subtotal or 0.0 for line in self.lines))
        if (self.total_items or 0) != items or abs(_money(self.total_amount) - amount) > 0.005:
            raise ValidationError({"totals": ["Cart totals do not match its lines"]})

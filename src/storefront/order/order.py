"""Order aggregate (CQRS): an immutable record of what was bought.

Orders are built once, from a validated cart, and their lines are frozen at
that moment: later catalogue changes never reach an existing order. After
placement only the lifecycle moves.

State Machine:
    PENDING → PROCESSING → SHIPPED → DELIVERED
    CANCELLED (from PENDING or PROCESSING)
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from storefront.domain import storefront
from storefront.errors import InvalidOrderState
from storefront.order.events import (
    OrderCancelled,
    OrderDelivered,
    OrderPlaced,
    OrderProcessing,
    OrderShipped,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

_CANCELLABLE_STATES = {OrderStatus.PENDING, OrderStatus.PROCESSING}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class ShippingAddress:
    """Where the order goes, captured at checkout and never updated afterwards."""

    line1 = String(required=True, max_length=255)
    line2 = String(max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)

    @property
    def full_address(self) -> str:
        parts = [self.line1, self.line2, self.city, self.state, self.postal_code, self.country]
        return ", ".join(part for part in parts if part)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderLine:
    """What was bought, as it was described and priced at purchase time."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=200)
    sku = String(required=True, max_length=50)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    subtotal = Float(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    order_number = String(required=True, max_length=20, unique=True)
    user_id = Identifier(required=True)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    lines = HasMany(OrderLine)
    total_items = Integer(default=0)
    total_amount = Float(default=0.0)
    shipping_address = ValueObject(ShippingAddress)
    payment_method = String(max_length=50)
    notes = Text()
    tracking_number = String(max_length=100)
    cancellation_reason = String(max_length=500)
    order_date = DateTime()
    shipped_at = DateTime()
    delivered_at = DateTime()
    cancelled_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, order_number, user_id, checked_lines, shipping_address, payment_method=None, notes=None):
        """Build a PENDING order from ``(cart_line, product)`` pairs.

        Quantity and unit price come from the cart line, name and SKU from
        the product as it is at this moment.
        """
        now = datetime.now(UTC)
        order = cls(
            order_number=order_number,
            user_id=user_id,
            status=OrderStatus.PENDING.value,
            shipping_address=shipping_address,
            payment_method=payment_method,
            notes=notes,
            order_date=now,
            updated_at=now,
        )

        with atomic_change(order):
            for cart_line, product in checked_lines:
                order.add_lines(
                    OrderLine(
                        product_id=cart_line.product_id,
                        name=product.name,
                        sku=product.sku,
                        unit_price=cart_line.unit_price,
                        quantity=cart_line.quantity,
                        subtotal=round(cart_line.quantity * cart_line.unit_price, 2),
                    )
                )
            order.total_items = sum(line.quantity for line in order.lines)
            order.total_amount = round(sum(line.subtotal for line in order.lines), 2)
        order.check_totals()

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order.order_number,
                user_id=str(user_id),
                lines=json.dumps(
                    [
                        {
                            "product_id": str(line.product_id),
                            "sku": line.sku,
                            "unit_price": line.unit_price,
                            "quantity": line.quantity,
                        }
                        for line in order.lines
                    ]
                ),
                total_items=order.total_items,
                total_amount=order.total_amount,
                placed_at=now,
            )
        )
        return order

    def check_totals(self):
        items = sum(line.quantity for line in self.lines)
        amount = round(sum(line.subtotal for line in self.lines), 2)
        if (self.total_items or 0) != items or abs((self.total_amount or 0.0) - amount) > 0.005:
            raise ValidationError({"totals": ["Order totals do not match its lines"]})

    # -------------------------------------------------------------------
    # State transition helper
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidOrderState(current.value, target_status.value)

    @property
    def can_be_cancelled(self) -> bool:
        return OrderStatus(self.status) in _CANCELLABLE_STATES

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def mark_processing(self):
        self._assert_can_transition(OrderStatus.PROCESSING)

        now = datetime.now(UTC)
        self.status = OrderStatus.PROCESSING.value
        self.updated_at = now
        self.raise_(OrderProcessing(order_id=str(self.id), started_at=now))

    def mark_shipped(self, tracking_number):
        self._assert_can_transition(OrderStatus.SHIPPED)
        if not tracking_number:
            raise ValidationError({"tracking_number": ["A tracking number is required to ship an order"]})

        now = datetime.now(UTC)
        self.status = OrderStatus.SHIPPED.value
        self.tracking_number = tracking_number
        self.shipped_at = now
        self.updated_at = now
        self.raise_(OrderShipped(order_id=str(self.id), tracking_number=tracking_number, shipped_at=now))

    def mark_delivered(self):
        self._assert_can_transition(OrderStatus.DELIVERED)

        now = datetime.now(UTC)
        self.status = OrderStatus.DELIVERED.value
        self.delivered_at = now
        self.updated_at = now
        self.raise_(OrderDelivered(order_id=str(self.id), delivered_at=now))

    def cancel(self, reason=None):
        """Cancel the order. Stock is returned by the caller, through the ledger."""
        self._assert_can_transition(OrderStatus.CANCELLED)

        previous = self.status
        now = datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        self.cancellation_reason = reason
        self.cancelled_at = now
        self.updated_at = now
        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                previous_status=previous,
                reason=reason,
                cancelled_at=now,
            )
        )

"""Order placement: turns the user's cart into an order in one unit of work.

Validation, stock reservation, order creation and clearing the cart all
happen inside the handler's unit of work, so checkout either commits as a
whole or leaves cart, stock and orders exactly as they were.
"""

import json

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.checkout.validator import CheckoutValidator
from storefront.domain import storefront
from storefront.errors import InsufficientStock
from storefront.inventory.ledger import stock_ledger
from storefront.order.numbers import allocate_order_number
from storefront.order.order import Order, ShippingAddress

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    user_id = Identifier(required=True)
    shipping_address = Text(required=True)  # JSON: line1, line2, city, state, postal_code, country
    payment_method = String(max_length=50)
    notes = Text()


def reserve_lines(checked_lines) -> None:
    """Reserve stock for every line, or for none of them."""
    reserved = []
    try:
        for line, product in checked_lines:
            if not stock_ledger.reserve(line.product_id, line.quantity):
                raise InsufficientStock(
                    line.product_id,
                    line.quantity,
                    stock_ledger.available(line.product_id),
                    name=product.name,
                )
            reserved.append(line)
    except InsufficientStock:
        for line in reversed(reserved):
            stock_ledger.release(line.product_id, line.quantity, reason="checkout_rollback")
        raise


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        address = (
            json.loads(command.shipping_address)
            if isinstance(command.shipping_address, str)
            else command.shipping_address
        )

        carts = current_domain.repository_for(Cart)
        cart = carts.find_by_user(command.user_id)

        checked = CheckoutValidator().validate(cart, user_id=command.user_id)
        reserve_lines(checked)

        order = Order.place(
            order_number=allocate_order_number(),
            user_id=command.user_id,
            checked_lines=checked,
            shipping_address=ShippingAddress(**address),
            payment_method=command.payment_method,
            notes=command.notes,
        )
        current_domain.repository_for(Order).add(order)

        cart.clear()
        carts.add(cart)

        logger.info(
            "order_placed",
            order_id=str(order.id),
            order_number=order.order_number,
            user_id=str(command.user_id),
            total_amount=order.total_amount,
        )
        return str(order.id)

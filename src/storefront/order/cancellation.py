"""Order cancellation: command and handler.

Cancelling hands every line's quantity back to the stock ledger in the same
unit of work as the status change. The user's cart is not touched.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.errors import Unauthorized
from storefront.inventory.ledger import stock_ledger
from storefront.order.order import Order


@storefront.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    reason = String(max_length=500)
    requested_by = Identifier()  # When set, the order must belong to this user


@storefront.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get_order(command.order_id)

        if command.requested_by and str(order.user_id) != str(command.requested_by):
            raise Unauthorized("Order belongs to another user", order_id=str(order.id))

        order.cancel(reason=command.reason)
        for line in order.lines:
            stock_ledger.release(line.product_id, line.quantity, reason="order_cancelled")

        repo.add(order)

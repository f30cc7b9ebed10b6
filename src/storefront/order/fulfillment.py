"""Order fulfillment: processing, shipment and delivery commands."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order


@storefront.command(part_of="Order")
class MarkProcessing:
    order_id = Identifier(required=True)


@storefront.command(part_of="Order")
class RecordShipment:
    order_id = Identifier(required=True)
    tracking_number = String(required=True, max_length=100)


@storefront.command(part_of="Order")
class RecordDelivery:
    order_id = Identifier(required=True)


@storefront.command_handler(part_of=Order)
class FulfillmentHandler:
    @handle(MarkProcessing)
    def mark_processing(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get_order(command.order_id)
        order.mark_processing()
        repo.add(order)

    @handle(RecordShipment)
    def record_shipment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get_order(command.order_id)
        order.mark_shipped(command.tracking_number)
        repo.add(order)

    @handle(RecordDelivery)
    def record_delivery(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get_order(command.order_id)
        order.mark_delivered()
        repo.add(order)

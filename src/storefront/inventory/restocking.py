"""Restocking: command and handler. Goes through the ledger's release path."""

from protean import handle
from protean.fields import Identifier, Integer, String

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.inventory.ledger import stock_ledger


@storefront.command(part_of="Product")
class RestockProduct:
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    reference = String(max_length=100)  # Supplier delivery or adjustment note


@storefront.command_handler(part_of=Product)
class RestockHandler:
    @handle(RestockProduct)
    def restock(self, command):
        return stock_ledger.release(command.product_id, command.quantity, reason="restock")

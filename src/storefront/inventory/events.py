"""Stock movement events, raised by the Product aggregate on behalf of the ledger."""

from protean.fields import DateTime, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class StockReserved:
    """Units were taken out of the shared stock counter."""

    __version__ = "v1"

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    remaining = Integer(required=True)
    reserved_at = DateTime(required=True)


@storefront.event(part_of="Product")
class StockReleased:
    """Units were put back into the shared stock counter (cancellation or restock)."""

    __version__ = "v1"

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    remaining = Integer(required=True)
    reason = String(max_length=50)
    released_at = DateTime(required=True)

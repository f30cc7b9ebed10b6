"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductAdded:
    """A product was added to the catalogue."""

    __version__ = "v1"

    product_id = Identifier(required=True)
    name = String(required=True, max_length=200)
    sku = String(required=True, max_length=50)
    price = Float(required=True)
    stock_quantity = Integer(required=True)
    added_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductPriceChanged:
    __version__ = "v1"

    product_id = Identifier(required=True)
    previous_price = Float(required=True)
    new_price = Float(required=True)


@storefront.event(part_of="Product")
class ProductDeactivated:
    """The product was withdrawn from sale. Existing orders are unaffected."""

    __version__ = "v1"

    product_id = Identifier(required=True)
    deactivated_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductReactivated:
    __version__ = "v1"

    product_id = Identifier(required=True)
    reactivated_at = DateTime(required=True)

"""Catalogue management: commands and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product, generate_sku
from storefront.domain import storefront

_SKU_ATTEMPTS = 10


@storefront.command(part_of="Product")
class AddProduct:
    name = String(required=True, max_length=200)
    price = Float(required=True)
    stock_quantity = Integer(default=0)
    sku = String(max_length=50)  # Generated from the name when omitted
    description = Text()
    category = String(max_length=100)


@storefront.command(part_of="Product")
class ChangeProductPrice:
    product_id = Identifier(required=True)
    price = Float(required=True)


@storefront.command(part_of="Product")
class DeactivateProduct:
    product_id = Identifier(required=True)


@storefront.command(part_of="Product")
class ReactivateProduct:
    product_id = Identifier(required=True)


@storefront.command_handler(part_of=Product)
class ManageCatalogueHandler:
    @handle(AddProduct)
    def add_product(self, command):
        repo = current_domain.repository_for(Product)

        if command.sku:
            if repo.find_by_sku(command.sku):
                raise ValidationError({"sku": [f"SKU {command.sku} is already in use"]})
            sku = command.sku
        else:
            sku = next(
                (
                    candidate
                    for candidate in (generate_sku(command.name, offset) for offset in range(_SKU_ATTEMPTS))
                    if repo.find_by_sku(candidate) is None
                ),
                None,
            )
            if sku is None:
                raise ValidationError({"sku": ["Could not generate a unique SKU"]})

        product = Product.add(
            name=command.name,
            price=command.price,
            stock_quantity=command.stock_quantity or 0,
            sku=sku,
            description=command.description,
            category=command.category,
        )
        repo.add(product)
        return str(product.id)

    @handle(ChangeProductPrice)
    def change_price(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get_product(command.product_id)
        product.change_price(command.price)
        repo.add(product)

    @handle(DeactivateProduct)
    def deactivate(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get_product(command.product_id)
        product.deactivate()
        repo.add(product)

    @handle(ReactivateProduct)
    def reactivate(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get_product(command.product_id)
        product.reactivate()
        repo.add(product)

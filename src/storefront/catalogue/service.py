"""Catalogue facade used by the API: serializes writes and dispatches commands."""

import structlog
from protean.utils.globals import current_domain

from storefront.catalogue.management import (
    AddProduct,
    ChangeProductPrice,
    DeactivateProduct,
    ReactivateProduct,
)
from storefront.catalogue.product import Product
from storefront.errors import guarded
from storefront.inventory.restocking import RestockProduct
from storefront.utils.config import setting
from storefront.utils.locks import serialized

logger = structlog.get_logger(__name__)


class CatalogueService:
    @guarded
    def add_product(self, name, price, stock_quantity=0, sku=None, description=None, category=None) -> Product:
        with serialized():
            product_id = current_domain.process(
                AddProduct(
                    name=name,
                    price=price,
                    stock_quantity=stock_quantity,
                    sku=sku,
                    description=description,
                    category=category,
                ),
                asynchronous=False,
            )
        logger.info("product_added", product_id=product_id, name=name)
        return self.get(product_id)

    @guarded
    def change_price(self, product_id, price) -> Product:
        with serialized(product_ids=[product_id]):
            current_domain.process(ChangeProductPrice(product_id=product_id, price=price), asynchronous=False)
        return self.get(product_id)

    @guarded
    def deactivate(self, product_id) -> Product:
        with serialized(product_ids=[product_id]):
            current_domain.process(DeactivateProduct(product_id=product_id), asynchronous=False)
        logger.info("product_deactivated", product_id=str(product_id))
        return self.get(product_id)

    @guarded
    def reactivate(self, product_id) -> Product:
        with serialized(product_ids=[product_id]):
            current_domain.process(ReactivateProduct(product_id=product_id), asynchronous=False)
        return self.get(product_id)

    @guarded
    def restock(self, product_id, quantity: int) -> int:
        with serialized(product_ids=[product_id]):
            return current_domain.process(RestockProduct(product_id=product_id, quantity=quantity), asynchronous=False)

    def get(self, product_id) -> Product:
        return current_domain.repository_for(Product).get_product(product_id)

    def find_by_sku(self, sku) -> Product | None:
        return current_domain.repository_for(Product).find_by_sku(sku)

    def low_stock(self, threshold: int | None = None) -> list[Product]:
        limit = setting("LOW_STOCK_THRESHOLD") if threshold is None else threshold
        return current_domain.repository_for(Product).low_stock(limit)

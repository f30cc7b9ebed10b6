"""Repository for the Product aggregate."""

from protean.exceptions import ObjectNotFoundError

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.errors import ProductNotFound


@storefront.repository(part_of=Product)
class ProductRepository:
    def get_product(self, product_id) -> Product:
        """Fetch a product or raise ``ProductNotFound``."""
        try:
            return self.get(str(product_id))
        except ObjectNotFoundError:
            raise ProductNotFound(product_id) from None

    def find_by_sku(self, sku: str) -> Product | None:
        results = self._dao.query.filter(sku=sku).all().items
        return results[0] if results else None

    def low_stock(self, threshold: int) -> list[Product]:
        """Active products whose stock is at or below ``threshold``, lowest first."""
        results = self._dao.query.filter(active=True, stock_quantity__lte=threshold).all().items
        return sorted(results, key=lambda product: (product.stock_quantity, product.name))

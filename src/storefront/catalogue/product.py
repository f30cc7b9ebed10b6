"""Product aggregate: catalogue entry that also owns the product's stock counter.

There is exactly one stock counter per product. Only the stock ledger
(``storefront.inventory.ledger``) is expected to call ``take_stock`` and
``return_stock``; everything else treats ``stock_quantity`` as read-only.
"""

import re
import time
from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String, Text

from storefront.catalogue.events import (
    ProductAdded,
    ProductDeactivated,
    ProductPriceChanged,
    ProductReactivated,
)
from storefront.domain import storefront
from storefront.errors import InsufficientStock, InvalidQuantity
from storefront.inventory.events import StockReleased, StockReserved


def generate_sku(name: str, offset: int = 0) -> str:
    """Build a SKU from the product name: three letters, a dash and five digits."""
    letters = re.sub(r"[^A-Za-z]", "", name or "").upper()[:3].ljust(3, "X")
    millis = int(time.time() * 1000)
    return f"{letters}-{(millis + offset) % 100000:05d}"


@storefront.aggregate
class Product:
    name = String(required=True, max_length=200)
    sku = String(required=True, max_length=50, unique=True)
    description = Text()
    category = String(max_length=100)
    price = Float(required=True, min_value=0.01)
    stock_quantity = Integer(default=0, min_value=0)
    active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def stock_is_never_negative(self):
        if self.stock_quantity is not None and self.stock_quantity < 0:
            raise ValidationError({"stock_quantity": ["Stock cannot be negative"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def add(cls, name, price, stock_quantity=0, sku=None, description=None, category=None):
        now = datetime.now(UTC)
        product = cls(
            name=name,
            sku=sku or generate_sku(name),
            description=description,
            category=category,
            price=price,
            stock_quantity=stock_quantity,
            active=True,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductAdded(
                product_id=str(product.id),
                name=product.name,
                sku=product.sku,
                price=product.price,
                stock_quantity=product.stock_quantity,
                added_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Catalogue management
    # -------------------------------------------------------------------
    def change_price(self, new_price):
        if new_price is None or new_price <= 0:
            raise ValidationError({"price": ["Price must be greater than zero"]})

        previous = self.price
        self.price = new_price
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ProductPriceChanged(
                product_id=str(self.id),
                previous_price=previous,
                new_price=new_price,
            )
        )

    def deactivate(self):
        """Soft delete: the product stays referenced by carts and orders."""
        if not self.active:
            raise ValidationError({"active": ["Product is already inactive"]})

        now = datetime.now(UTC)
        self.active = False
        self.updated_at = now
        self.raise_(ProductDeactivated(product_id=str(self.id), deactivated_at=now))

    def reactivate(self):
        if self.active:
            raise ValidationError({"active": ["Product is already active"]})

        now = datetime.now(UTC)
        self.active = True
        self.updated_at = now
        self.raise_(ProductReactivated(product_id=str(self.id), reactivated_at=now))

    # -------------------------------------------------------------------
    # Stock counter
    # -------------------------------------------------------------------
    def has_stock_for(self, quantity) -> bool:
        return (self.stock_quantity or 0) >= quantity

    def take_stock(self, quantity):
        if quantity is None or quantity <= 0:
            raise InvalidQuantity(quantity)
        if not self.has_stock_for(quantity):
            raise InsufficientStock(self.id, quantity, self.stock_quantity, name=self.name)

        now = datetime.now(UTC)
        self.stock_quantity -= quantity
        self.updated_at = now
        self.raise_(
            StockReserved(
                product_id=str(self.id),
                quantity=quantity,
                remaining=self.stock_quantity,
                reserved_at=now,
            )
        )

    def return_stock(self, quantity, reason="release"):
        if quantity is None or quantity <= 0:
            raise InvalidQuantity(quantity)

        now = datetime.now(UTC)
        self.stock_quantity += quantity
        self.updated_at = now
        self.raise_(
            StockReleased(
                product_id=str(self.id),
                quantity=quantity,
                remaining=self.stock_quantity,
                reason=reason,
                released_at=now,
            )
        )

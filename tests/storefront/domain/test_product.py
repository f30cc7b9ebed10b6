"""Tests for the Product aggregate and its stock counter."""

import re

import pytest
from protean.exceptions import ValidationError
from storefront.catalogue.events import ProductAdded, ProductDeactivated, ProductPriceChanged
from storefront.catalogue.product import Product, generate_sku
from storefront.errors import InsufficientStock, InvalidQuantity
from storefront.inventory.events import StockReleased, StockReserved


@pytest.fixture()
def product():
    return Product.add(name="Espresso Cup", price=4.5, stock_quantity=5, sku="ESP-00001")


class TestSkuGeneration:
    def test_format(self):
        assert re.fullmatch(r"ESP-\d{5}", generate_sku("Espresso Cup"))

    def test_short_or_symbolic_names_are_padded(self):
        assert generate_sku("A1").startswith("AXX-")

    def test_generated_when_missing(self):
        product = Product.add(name="Teapot", price=20.0)
        assert product.sku.startswith("TEA-")


class TestProductCreation:
    def test_add_raises_event(self, product):
        assert product.active is True
        assert isinstance(product._events[-1], ProductAdded)

    def test_price_must_be_positive(self):
        with pytest.raises(ValidationError):
            Product.add(name="Free thing", price=0.0)

    def test_stock_cannot_start_negative(self):
        with pytest.raises(ValidationError):
            Product.add(name="Ghost", price=1.0, stock_quantity=-1)


class TestCatalogueChanges:
    def test_change_price(self, product):
        product.change_price(5.0)

        assert product.price == 5.0
        event = product._events[-1]
        assert isinstance(event, ProductPriceChanged)
        assert event.previous_price == 4.5

    def test_change_price_rejects_non_positive(self, product):
        with pytest.raises(ValidationError):
            product.change_price(0)

    def test_deactivate_and_reactivate(self, product):
        product.deactivate()
        assert product.active is False
        assert isinstance(product._events[-1], ProductDeactivated)

        product.reactivate()
        assert product.active is True

    def test_deactivate_twice_fails(self, product):
        product.deactivate()
        with pytest.raises(ValidationError):
            product.deactivate()


class TestStockCounter:
    def test_take_stock(self, product):
        product.take_stock(3)

        assert product.stock_quantity == 2
        event = product._events[-1]
        assert isinstance(event, StockReserved)
        assert event.remaining == 2

    def test_take_more_than_available(self, product):
        with pytest.raises(InsufficientStock) as exc_info:
            product.take_stock(6)

        assert exc_info.value.requested == 6
        assert exc_info.value.available == 5
        assert product.stock_quantity == 5

    def test_take_invalid_quantity(self, product):
        with pytest.raises(InvalidQuantity):
            product.take_stock(0)

    def test_return_stock(self, product):
        product.return_stock(4, reason="restock")

        assert product.stock_quantity == 9
        event = product._events[-1]
        assert isinstance(event, StockReleased)
        assert event.reason == "restock"

"""Shared fixtures for storefront tests."""

import pytest
from storefront.cart.service import CartService
from storefront.catalogue.service import CatalogueService
from storefront.order.service import OrderService

ADDRESS = {
    "line1": "12 Harbour Road",
    "line2": "Flat 3",
    "city": "Portsmouth",
    "state": "Hampshire",
    "postal_code": "PO1 3AX",
    "country": "GB",
}


@pytest.fixture()
def catalogue():
    return CatalogueService()


@pytest.fixture()
def carts():
    return CartService()


@pytest.fixture()
def orders():
    return OrderService()


@pytest.fixture()
def address():
    return dict(ADDRESS)


@pytest.fixture()
def make_product(catalogue):
    """Factory: add a product to the catalogue and return it."""

    def _make(name="Widget", price=10.0, stock=10, **kwargs):
        return catalogue.add_product(name=name, price=price, stock_quantity=stock, **kwargs)

    return _make

"""Application tests for the stock ledger."""

from concurrent.futures import ThreadPoolExecutor

import pytest
from protean import UnitOfWork, current_domain
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.errors import InvalidQuantity, ProductNotFound
from storefront.inventory.ledger import stock_ledger


def _stock(product_id):
    return current_domain.repository_for(Product).get(product_id).stock_quantity


class TestReserve:
    def test_reserve_decrements_stock(self, make_product):
        product = make_product(stock=5)

        assert stock_ledger.reserve(product.id, 3) is True
        assert _stock(product.id) == 2

    def test_reserve_exact_remaining_stock(self, make_product):
        product = make_product(stock=2)

        assert stock_ledger.reserve(product.id, 2) is True
        assert _stock(product.id) == 0

    def test_short_stock_returns_false_without_mutation(self, make_product):
        product = make_product(stock=2)

        assert stock_ledger.reserve(product.id, 3) is False
        assert _stock(product.id) == 2

    @pytest.mark.parametrize("quantity", [0, -2])
    def test_invalid_quantity(self, make_product, quantity):
        product = make_product(stock=2)

        with pytest.raises(InvalidQuantity):
            stock_ledger.reserve(product.id, quantity)

    def test_unknown_product(self):
        with pytest.raises(ProductNotFound):
            stock_ledger.reserve("no-such-product", 1)

    def test_reservation_joins_enclosing_unit_of_work(self, make_product):
        product = make_product(stock=5)

        with pytest.raises(RuntimeError):
            with UnitOfWork():
                stock_ledger.reserve(product.id, 4)
                raise RuntimeError("abort")

        assert _stock(product.id) == 5


class TestRelease:
    def test_release_increments_stock(self, make_product):
        product = make_product(stock=1)

        assert stock_ledger.release(product.id, 4) == 5
        assert _stock(product.id) == 5

    def test_release_invalid_quantity(self, make_product):
        product = make_product(stock=1)

        with pytest.raises(InvalidQuantity):
            stock_ledger.release(product.id, 0)


class TestConcurrentReservations:
    @pytest.mark.slow
    def test_stock_never_goes_negative(self, make_product):
        product = make_product(stock=10)
        product_id = str(product.id)

        def attempt(_):
            with storefront.domain_context():
                return stock_ledger.reserve(product_id, 3)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(attempt, range(8)))

        assert results.count(True) == 10 // 3
        assert _stock(product_id) == 10 - 3 * (10 // 3)

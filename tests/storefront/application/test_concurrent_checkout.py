"""Concurrent checkouts competing for the same stock."""

from concurrent.futures import ThreadPoolExecutor

import pytest
from storefront.domain import storefront
from storefront.errors import InsufficientStock

pytestmark = pytest.mark.slow


def _checkout(orders, user_id, address):
    with storefront.domain_context():
        try:
            return orders.create_from_cart(user_id, address)
        except InsufficientStock as exc:
            return exc


class TestConcurrentCheckout:
    def test_last_unit_goes_to_exactly_one_shopper(self, orders, carts, catalogue, make_product, address):
        product = make_product(name="Last One", stock=1)
        carts.add_item("user-a", product.id, 1)
        carts.add_item("user-b", product.id, 1)

        with ThreadPoolExecutor(max_workers=2) as pool:
            results = list(pool.map(lambda user: _checkout(orders, user, address), ["user-a", "user-b"]))

        failures = [result for result in results if isinstance(result, InsufficientStock)]
        placed = [result for result in results if not isinstance(result, InsufficientStock)]

        assert len(placed) == 1
        assert len(failures) == 1
        assert catalogue.get(product.id).stock_quantity == 0

        winner = placed[0].user_id
        loser = "user-b" if str(winner) == "user-a" else "user-a"
        assert carts.get(str(winner)).is_empty
        assert carts.get(loser).total_items == 1

    def test_many_shoppers_never_oversell(self, orders, carts, catalogue, make_product, address):
        product = make_product(name="Limited", stock=5)
        shoppers = [f"user-{n}" for n in range(12)]
        for shopper in shoppers:
            carts.add_item(shopper, product.id, 1)

        with ThreadPoolExecutor(max_workers=6) as pool:
            results = list(pool.map(lambda user: _checkout(orders, user, address), shoppers))

        placed = [result for result in results if not isinstance(result, InsufficientStock)]
        assert len(placed) == 5
        assert catalogue.get(product.id).stock_quantity == 0
        assert len({order.order_number for order in placed}) == 5

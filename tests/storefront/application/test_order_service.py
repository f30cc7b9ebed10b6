"""Application tests for checkout and the order lifecycle."""

import re

import pytest
from protean import current_domain
from storefront.errors import (
    CartEmpty,
    InsufficientStock,
    InvalidOrderState,
    OrderNotFound,
    OrderNumberCollision,
    ProductUnavailable,
    Unauthorized,
)
from storefront.order.numbers import set_generator
from storefront.order.order import Order, OrderStatus


@pytest.fixture()
def stocked_cart(carts, make_product):
    """user-1 holds 2 mugs (8.00) and 1 teapot (25.00)."""
    mug = make_product(name="Mug", price=8.0, stock=5)
    pot = make_product(name="Teapot", price=25.0, stock=3)
    carts.add_item("user-1", mug.id, 2)
    carts.add_item("user-1", pot.id, 1)
    return mug, pot


class TestCreateFromCart:
    def test_places_order_reserves_stock_and_clears_cart(self, orders, carts, catalogue, stocked_cart, address):
        mug, pot = stocked_cart

        order = orders.create_from_cart("user-1", address, payment_method="card", notes="Leave at door")

        assert order.status == OrderStatus.PENDING.value
        assert re.fullmatch(r"ORD-[0-9A-F]{8}", order.order_number)
        assert order.total_items == 3
        assert order.total_amount == pytest.approx(41.0)
        assert order.payment_method == "card"
        assert order.shipping_address.city == "Portsmouth"

        assert catalogue.get(mug.id).stock_quantity == 3
        assert catalogue.get(pot.id).stock_quantity == 2

        cart = carts.get("user-1")
        assert cart.is_empty
        assert cart.total_amount == 0.0

    def test_order_lines_are_frozen(self, orders, catalogue, stocked_cart, address):
        mug, _ = stocked_cart
        order = orders.create_from_cart("user-1", address)

        catalogue.change_price(mug.id, 99.0)

        reloaded = orders.get(order.id)
        mug_line = next(line for line in reloaded.lines if str(line.product_id) == str(mug.id))
        assert mug_line.unit_price == 8.0
        assert mug_line.name == "Mug"
        assert mug_line.sku == mug.sku

    def test_empty_cart(self, orders, carts, address):
        carts.get_or_create("user-1")
        with pytest.raises(CartEmpty):
            orders.create_from_cart("user-1", address)

    def test_no_cart(self, orders, address):
        with pytest.raises(CartEmpty):
            orders.create_from_cart("user-1", address)

    def test_shortage_rolls_everything_back(self, orders, carts, catalogue, stocked_cart, address):
        mug, pot = stocked_cart
        # Another shopper takes teapots after user-1 added theirs
        carts.add_item("user-2", pot.id, 3)
        orders.create_from_cart("user-2", address)

        with pytest.raises(InsufficientStock) as exc_info:
            orders.create_from_cart("user-1", address)

        assert exc_info.value.product_id == str(pot.id)
        assert catalogue.get(mug.id).stock_quantity == 5
        assert catalogue.get(pot.id).stock_quantity == 0
        assert carts.get("user-1").total_items == 3
        assert orders.list_for_user("user-1") == []

    def test_withdrawn_product(self, orders, catalogue, stocked_cart, address):
        mug, _ = stocked_cart
        catalogue.deactivate(mug.id)

        with pytest.raises(ProductUnavailable):
            orders.create_from_cart("user-1", address)
        assert catalogue.get(mug.id).stock_quantity == 5


class TestOrderNumbers:
    def test_collision_is_retried(self, orders, carts, make_product, address):
        product = make_product(stock=5)
        numbers = iter(["ORD-AAAAAAAA", "ORD-AAAAAAAA", "ORD-BBBBBBBB"])
        set_generator(lambda prefix: next(numbers))

        carts.add_item("user-1", product.id, 1)
        first = orders.create_from_cart("user-1", address)
        carts.add_item("user-1", product.id, 1)
        second = orders.create_from_cart("user-1", address)

        assert first.order_number == "ORD-AAAAAAAA"
        assert second.order_number == "ORD-BBBBBBBB"

    def test_persistent_collision_gives_up(self, orders, carts, make_product, catalogue, address):
        product = make_product(stock=5)
        set_generator(lambda prefix: "ORD-SAMESAME")

        carts.add_item("user-1", product.id, 1)
        orders.create_from_cart("user-1", address)
        carts.add_item("user-1", product.id, 1)

        with pytest.raises(OrderNumberCollision):
            orders.create_from_cart("user-1", address)

        assert catalogue.get(product.id).stock_quantity == 4
        assert carts.item_count("user-1") == 1


class TestCancel:
    def test_cancel_returns_stock_and_leaves_cart_empty(self, orders, carts, catalogue, stocked_cart, address):
        mug, pot = stocked_cart
        order = orders.create_from_cart("user-1", address)

        cancelled = orders.cancel(order.id, reason="changed my mind")

        assert cancelled.status == OrderStatus.CANCELLED.value
        assert cancelled.cancellation_reason == "changed my mind"
        assert catalogue.get(mug.id).stock_quantity == 5
        assert catalogue.get(pot.id).stock_quantity == 3
        assert carts.get("user-1").is_empty

    def test_cancel_processing_order(self, orders, stocked_cart, address):
        order = orders.create_from_cart("user-1", address)
        orders.mark_processing(order.id)

        assert orders.cancel(order.id).status == OrderStatus.CANCELLED.value

    def test_cancel_shipped_order_fails_without_side_effects(self, orders, catalogue, stocked_cart, address):
        mug, _ = stocked_cart
        order = orders.create_from_cart("user-1", address)
        orders.mark_processing(order.id)
        orders.mark_shipped(order.id, "TRACK-123")

        with pytest.raises(InvalidOrderState):
            orders.cancel(order.id)

        assert orders.get(order.id).status == OrderStatus.SHIPPED.value
        assert catalogue.get(mug.id).stock_quantity == 3

    def test_cancel_twice_fails(self, orders, catalogue, stocked_cart, address):
        mug, _ = stocked_cart
        order = orders.create_from_cart("user-1", address)
        orders.cancel(order.id)

        with pytest.raises(InvalidOrderState):
            orders.cancel(order.id)
        assert catalogue.get(mug.id).stock_quantity == 5

    def test_cancel_someone_elses_order(self, orders, stocked_cart, address):
        order = orders.create_from_cart("user-1", address)

        with pytest.raises(Unauthorized):
            orders.cancel(order.id, user_id="user-2")
        assert orders.get(order.id).status == OrderStatus.PENDING.value

    def test_cancel_unknown_order(self, orders):
        with pytest.raises(OrderNotFound):
            orders.cancel("no-such-order")


class TestLifecycle:
    def test_full_lifecycle(self, orders, stocked_cart, address):
        order = orders.create_from_cart("user-1", address)

        orders.mark_processing(order.id)
        shipped = orders.mark_shipped(order.id, "TRACK-123")
        delivered = orders.mark_delivered(order.id)

        assert shipped.tracking_number == "TRACK-123"
        assert delivered.status == OrderStatus.DELIVERED.value
        assert delivered.delivered_at is not None
        assert orders.find_by_tracking_number("TRACK-123").id == order.id

        stored = orders.get(order.id)
        stored.check_totals()
        assert stored.total_items == order.total_items

    def test_cannot_skip_processing(self, orders, stocked_cart, address):
        order = orders.create_from_cart("user-1", address)

        with pytest.raises(InvalidOrderState):
            orders.mark_shipped(order.id, "TRACK-123")


class TestQueries:
    def test_find_by_order_number(self, orders, stocked_cart, address):
        order = orders.create_from_cart("user-1", address)

        assert orders.find_by_order_number(order.order_number).id == order.id
        assert orders.find_by_order_number("ORD-NOPENOPE") is None

    def test_list_for_user_newest_first(self, orders, carts, make_product, address):
        product = make_product(stock=10)
        placed = []
        for _ in range(3):
            carts.add_item("user-1", product.id, 1)
            placed.append(orders.create_from_cart("user-1", address).id)

        listed = [order.id for order in orders.list_for_user("user-1")]

        assert listed == list(reversed(placed))
        assert orders.list_for_user("user-2") == []

    def test_orders_are_persisted(self, orders, stocked_cart, address):
        order = orders.create_from_cart("user-1", address)
        assert current_domain.repository_for(Order).get(order.id).order_number == order.order_number

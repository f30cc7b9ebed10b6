"""Tests for keyed locks and the error taxonomy."""

import threading

import pytest
from protean.exceptions import ValidationError
from storefront.errors import (
    InsufficientStock,
    InternalFailure,
    InvalidQuantity,
    ProductNotFound,
    StorefrontError,
    guarded,
)
from storefront.utils.locks import KeyedLocks


class TestKeyedLocks:
    def test_same_key_returns_same_lock(self):
        locks = KeyedLocks("test")
        assert locks.lock_for("a") is locks.lock_for("a")
        assert locks.lock_for("a") is not locks.lock_for("b")

    def test_hold_is_reentrant(self):
        locks = KeyedLocks("test")
        with locks.hold("a", "b"), locks.hold("a"):
            pass

    def test_hold_blocks_other_threads(self):
        locks = KeyedLocks("test")
        acquired = []

        def contender():
            acquired.append(locks.lock_for("a").acquire(timeout=0.05))

        with locks.hold("a"):
            worker = threading.Thread(target=contender)
            worker.start()
            worker.join()

        assert acquired == [False]

    def test_none_keys_are_ignored(self):
        locks = KeyedLocks("test")
        with locks.hold(None, "a"):
            pass
        assert len(locks) == 1


class TestErrors:
    def test_errors_are_protean_validation_errors(self):
        exc = InvalidQuantity(0)
        assert isinstance(exc, ValidationError)
        assert exc.messages == {"invalid_quantity": ["Quantity must be a positive integer, got 0"]}

    def test_insufficient_stock_details(self):
        exc = InsufficientStock("prod-1", requested=3, available=1)
        assert exc.code == "insufficient_stock"
        assert exc.details == {"product_id": "prod-1", "requested": 3, "available": 1}
        assert "requested 3, available 1" in str(exc)

    def test_guarded_passes_domain_errors_through(self):
        @guarded
        def lookup():
            raise ProductNotFound("prod-1")

        with pytest.raises(ProductNotFound):
            lookup()

    def test_guarded_wraps_unexpected_errors(self):
        @guarded
        def explode():
            raise RuntimeError("disk on fire")

        with pytest.raises(InternalFailure) as exc_info:
            explode()

        assert isinstance(exc_info.value, StorefrontError)
        assert isinstance(exc_info.value.__cause__, RuntimeError)

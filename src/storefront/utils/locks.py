"""In-process serialization of cart and stock mutations.

Locks are always taken in the order user -> products (sorted) -> store, and
are re-entrant so the stock ledger can re-acquire a product lock its caller
already holds. They are held around the whole unit of work, commit included.

The store lock is only used when a provider keeps its data in process
memory: protean's memory provider commits a unit of work by swapping in a
copy of the whole database, so two concurrent units of work would
overwrite each other even when they touch different aggregates.
"""

import threading
from contextlib import ExitStack, contextmanager

from protean.utils.globals import current_domain


class KeyedLocks:
    """A registry of re-entrant locks, one per key."""

    def __init__(self, name: str):
        self.name = name
        self._locks: dict[str, threading.RLock] = {}
        self._guard = threading.Lock()

    def lock_for(self, key) -> threading.RLock:
        with self._guard:
            return self._locks.setdefault(str(key), threading.RLock())

    @contextmanager
    def hold(self, *keys):
        """Acquire the locks for ``keys`` in sorted order."""
        ordered = sorted({str(key) for key in keys if key is not None})
        with ExitStack() as stack:
            for key in ordered:
                stack.enter_context(self.lock_for(key))
            yield

    def __len__(self) -> int:
        return len(self._locks)


user_locks = KeyedLocks("user")
product_locks = KeyedLocks("product")
store_lock = threading.RLock()


def _store_is_shared() -> bool:
    return any(provider.conn_info["provider"] == "memory" for _, provider in current_domain.providers.items())


@contextmanager
def serialized(user_id=None, product_ids=()):
    """Hold the user lock, then the product locks, then the store lock when needed."""
    with ExitStack() as stack:
        if user_id is not None:
            stack.enter_context(user_locks.hold(user_id))
        stack.enter_context(product_locks.hold(*product_ids))
        if _store_is_shared():
            stack.enter_context(store_lock)
        yield

"""Order number allocation.

Numbers look like ``ORD-1F3A9C2B``: a configurable prefix and eight
upper-case hex characters. The generator can be swapped, which tests use to
force collisions.
"""

from collections.abc import Callable
from uuid import uuid4

import structlog
from protean.utils.globals import current_domain

from storefront.errors import OrderNumberCollision
from storefront.order.order import Order
from storefront.utils.config import setting

logger = structlog.get_logger(__name__)


def random_order_number(prefix: str) -> str:
    return f"{prefix}-{uuid4().hex[:8].upper()}"


_generator: Callable[[str], str] = random_order_number


def get_generator() -> Callable[[str], str]:
    return _generator


def set_generator(generator: Callable[[str], str]) -> None:
    global _generator
    _generator = generator


def reset_generator() -> None:
    global _generator
    _generator = random_order_number


def allocate_order_number() -> str:
    """Return an order number no existing order uses.

    Collisions are retried with a fresh number up to ``ORDER_NUMBER_ATTEMPTS``
    times, then ``OrderNumberCollision`` is raised.
    """
    prefix = setting("ORDER_NUMBER_PREFIX")
    attempts = int(setting("ORDER_NUMBER_ATTEMPTS"))
    repo = current_domain.repository_for(Order)

    for attempt in range(1, attempts + 1):
        candidate = _generator(prefix)
        if repo.find_by_order_number(candidate) is None:
            return candidate
        logger.warning("order_number_collision", order_number=candidate, attempt=attempt)

    raise OrderNumberCollision(attempts)

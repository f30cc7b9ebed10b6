"""Stock Ledger: the only writer of product stock counters.

``reserve`` and ``release`` are serialized per product. When called from a
command handler they join the handler's unit of work, so a reservation is
committed or rolled back together with the order that needed it. Called on
their own, they open and commit a unit of work of their own.
"""

from contextlib import contextmanager, nullcontext

import structlog
from protean import UnitOfWork
from protean.utils.globals import current_domain, current_uow

from storefront.catalogue.product import Product
from storefront.errors import InvalidQuantity
from storefront.utils.locks import serialized

logger = structlog.get_logger(__name__)


def _check_quantity(quantity):
    if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
        raise InvalidQuantity(quantity)


@contextmanager
def _unit_of_work():
    active = current_uow and current_uow.in_progress
    with nullcontext() if active else UnitOfWork():
        yield


class StockLedger:
    def available(self, product_id) -> int:
        """Current stock for ``product_id``."""
        return current_domain.repository_for(Product).get_product(product_id).stock_quantity

    def reserve(self, product_id, quantity: int) -> bool:
        """Take ``quantity`` units if that many are in stock.

        Returns False, leaving the counter untouched, when stock is short.
        """
        _check_quantity(quantity)

        with serialized(product_ids=[product_id]), _unit_of_work():
            repo = current_domain.repository_for(Product)
            product = repo.get_product(product_id)
            if not product.has_stock_for(quantity):
                logger.info(
                    "stock_reservation_refused",
                    product_id=str(product_id),
                    requested=quantity,
                    available=product.stock_quantity,
                )
                return False

            product.take_stock(quantity)
            repo.add(product)

        logger.info("stock_reserved", product_id=str(product_id), quantity=quantity, remaining=product.stock_quantity)
        return True

    def release(self, product_id, quantity: int, reason: str = "release") -> int:
        """Put ``quantity`` units back. Returns the new stock level."""
        _check_quantity(quantity)

        with serialized(product_ids=[product_id]), _unit_of_work():
            repo = current_domain.repository_for(Product)
            product = repo.get_product(product_id)
            product.return_stock(quantity, reason=reason)
            repo.add(product)

        logger.info(
            "stock_released",
            product_id=str(product_id),
            quantity=quantity,
            remaining=product.stock_quantity,
            reason=reason,
        )
        return product.stock_quantity


stock_ledger = StockLedger()

"""Storefront bounded context: Catalogue, Stock Ledger, Cart and Orders.

Keeps shopping carts and orders consistent with a single shared stock
counter per product. Carts and orders are plain CQRS aggregates; every
stock mutation goes through the stock ledger.
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)

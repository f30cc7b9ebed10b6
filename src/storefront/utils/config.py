"""Access to the `[custom]` section of the storefront domain config."""

from typing import Any

from protean.utils.globals import current_domain

DEFAULTS = {
    "ORDER_NUMBER_PREFIX": "ORD",
    "ORDER_NUMBER_ATTEMPTS": 5,
    "LOW_STOCK_THRESHOLD": 10,
}


def setting(key: str) -> Any:
    """Return a custom setting of the active domain, falling back to the packaged default."""
    custom = current_domain.config.get("custom") or {}
    return custom.get(key, DEFAULTS[key])

"""Application settings read from the environment.

Protean's own configuration (providers, event processing) lives in
``domain.toml``; these are the marketplace's operational knobs.
"""

import os


def _int_env(name: str, default: int) -> int:
    return int(os.getenv(name, default))


def _float_env(name: str, default: float) -> float:
    return float(os.getenv(name, default))


def max_conflict_retries() -> int:
    """Attempts allowed for an operation that keeps hitting storage conflicts."""
    return max(1, _int_env("MARKETPLACE_MAX_CONFLICT_RETRIES", 3))


def lock_timeout_seconds() -> float:
    """How long an operation waits for a record lock before giving up."""
    return _float_env("MARKETPLACE_LOCK_TIMEOUT_SECONDS", 5.0)


def default_page_size() -> int:
    return _int_env("MARKETPLACE_DEFAULT_PAGE_SIZE", 10)


def max_page_size() -> int:
    return _int_env("MARKETPLACE_MAX_PAGE_SIZE", 100)


def product_page_size() -> int:
    return _int_env("MARKETPLACE_PRODUCT_PAGE_SIZE", 12)


def max_product_page_size() -> int:
    return _int_env("MARKETPLACE_MAX_PRODUCT_PAGE_SIZE", 50)

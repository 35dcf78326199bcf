"""Marketplace HTTP API package."""

from marketplace.api.errors import register_error_handlers
from marketplace.api.routes import order_router, product_router, review_router

__all__ = ["order_router", "product_router", "review_router", "register_error_handlers"]

"""Marketplace bounded context: Catalogue, Ordering, and Reviews.

Handles produce listings and their stock, the order lifecycle from placement
through delivery, and buyer reviews with the product rating aggregate they
feed.
"""

import structlog
from protean.domain import Domain

marketplace = Domain(name="marketplace")

logger = structlog.get_logger(__name__)

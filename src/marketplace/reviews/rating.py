"""Product rating aggregation.

The rating shown on a product is recomputed in full from the product's
active reviews every time a review is committed or removed, never adjusted
incrementally, so it cannot drift from the review set.
"""

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product
from marketplace.domain import marketplace
from marketplace.reviews.events import ReviewCommitted, ReviewRemoved
from marketplace.reviews.review import Review
from marketplace.utils.locks import locks, product_key

logger = structlog.get_logger(__name__)

_ONE_DECIMAL = Decimal("0.1")


def summarize_ratings(ratings: Iterable[int]) -> tuple[float, int]:
    """Mean rounded half-up to one decimal, and the count. Empty gives ``(0.0, 0)``."""
    ratings = list(ratings)
    if not ratings:
        return 0.0, 0
    mean = Decimal(sum(ratings)) / Decimal(len(ratings))
    return float(mean.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP)), len(ratings)


def recalculate_product_rating(product_id) -> Product | None:
    """Rewrite the product's rating from its active reviews, under its lock."""
    with locks.hold([product_key(product_id)]):
        product_repo = current_domain.repository_for(Product)
        try:
            product = product_repo.get(product_id)
        except ObjectNotFoundError:
            logger.warning("Rating recalculation skipped, product not found", product_id=str(product_id))
            return None

        reviews = current_domain.repository_for(Review).active_for_product(product_id)
        average, count = summarize_ratings(review.rating for review in reviews)
        product.refresh_rating(average, count)
        product_repo.add(product)

    logger.info("Product rating recalculated", product_id=str(product_id), average=average, count=count)
    return product


@marketplace.event_handler(part_of=Review)
class ProductRatingAggregator:
    """Keeps ``Product.rating`` in step with the product's active reviews."""

    @handle(ReviewCommitted)
    def on_review_committed(self, event: ReviewCommitted) -> None:
        recalculate_product_rating(event.product_id)

    @handle(ReviewRemoved)
    def on_review_removed(self, event: ReviewRemoved) -> None:
        recalculate_product_rating(event.product_id)

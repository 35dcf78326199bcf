"""Review operations."""

import structlog
from protean.utils.globals import current_domain

from marketplace.reviews.removal import RemoveReview
from marketplace.reviews.review import Review
from marketplace.reviews.submission import SubmitReview
from marketplace.utils.locks import locks, review_key
from marketplace.utils.retry import retry_on_conflict

logger = structlog.get_logger(__name__)


def submit_review(buyer_id, product_id, order_id, rating, comment=None) -> Review:
    """Store a review; the product rating is recomputed once it commits."""

    def attempt():
        with locks.hold([review_key(product_id, buyer_id)]):
            return current_domain.process(
                SubmitReview(
                    product_id=product_id,
                    buyer_id=buyer_id,
                    order_id=order_id,
                    rating=rating,
                    comment=comment,
                ),
                asynchronous=False,
            )

    review_id = retry_on_conflict(attempt, label="submit_review")
    logger.info(
        "Review submitted",
        review_id=review_id,
        product_id=str(product_id),
        buyer_id=str(buyer_id),
        rating=rating,
    )
    return current_domain.repository_for(Review).get(review_id)


def reviews_for_product(product_id) -> list[Review]:
    return current_domain.repository_for(Review).active_for_product(product_id)


def remove_review(review_id) -> None:
    current_domain.process(RemoveReview(review_id=review_id), asynchronous=False)
    logger.info("Review removed", review_id=str(review_id))

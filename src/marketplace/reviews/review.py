"""Review aggregate: one buyer's rating of one product.

A buyer reviews a product at most once, backed by an order delivered to them.
Removal is a soft delete: the record stays, stops counting toward the
product's rating, and still blocks a second review by the same buyer.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, Integer, String

from marketplace.domain import marketplace
from marketplace.reviews.events import ReviewCommitted, ReviewRemoved


def make_review_key(product_id, buyer_id) -> str:
    return f"{product_id}:{buyer_id}"


@marketplace.aggregate
class Review:
    product_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    order_id = Identifier(required=True)
    rating = Integer(required=True)
    comment = String(max_length=500)
    is_verified = Boolean(default=False)
    is_active = Boolean(default=True)
    review_key = String(required=True, max_length=255, unique=True)

    created_at = DateTime()
    updated_at = DateTime()
    removed_at = DateTime()

    @invariant.post
    def rating_must_be_in_range(self):
        if self.rating is not None and (self.rating < 1 or self.rating > 5):
            raise ValidationError({"rating": ["Rating must be between 1 and 5"]})

    @classmethod
    def submit(cls, product_id, buyer_id, order_id, rating, comment=None, is_verified=False):
        now = datetime.now(UTC)
        review = cls(
            product_id=product_id,
            buyer_id=buyer_id,
            order_id=order_id,
            rating=rating,
            comment=comment,
            is_verified=is_verified,
            review_key=make_review_key(product_id, buyer_id),
            created_at=now,
            updated_at=now,
        )
        review.raise_(
            ReviewCommitted(
                review_id=str(review.id),
                product_id=str(product_id),
                buyer_id=str(buyer_id),
                order_id=str(order_id),
                rating=rating,
                committed_at=now,
            )
        )
        return review

    def remove(self):
        """Soft-delete the review. Removing a removed review changes nothing."""
        if not self.is_active:
            return

        now = datetime.now(UTC)
        self.is_active = False
        self.removed_at = now
        self.updated_at = now

        self.raise_(
            ReviewRemoved(
                review_id=str(self.id),
                product_id=str(self.product_id),
                removed_at=now,
            )
        )

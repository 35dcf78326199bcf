"""Repository for the Review aggregate."""

from marketplace.domain import marketplace
from marketplace.reviews.review import Review, make_review_key


@marketplace.repository(part_of=Review)
class ReviewRepository:
    def find_for(self, product_id, buyer_id) -> Review | None:
        """The buyer's review of the product, removed or not."""
        return self._dao.query.filter(review_key=make_review_key(product_id, buyer_id)).all().first

    def active_for_product(self, product_id) -> list[Review]:
        """Every active review of the product, newest first, without the default page cap."""
        return (
            self._dao.query.filter(product_id=str(product_id), is_active=True)
            .order_by("-created_at")
            .limit(None)
            .all()
            .items
        )

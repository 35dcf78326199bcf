"""RemoveReview: soft-delete a review."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.errors import ReviewNotFound
from marketplace.reviews.review import Review


@marketplace.command(part_of="Review")
class RemoveReview:
    review_id = Identifier(required=True)


@marketplace.command_handler(part_of=Review)
class RemoveReviewHandler:
    @handle(RemoveReview)
    def remove_review(self, command):
        repo = current_domain.repository_for(Review)
        try:
            review = repo.get(command.review_id)
        except ObjectNotFoundError:
            raise ReviewNotFound({"review_id": [f"Review {command.review_id} not found"]})

        review.remove()
        repo.add(review)

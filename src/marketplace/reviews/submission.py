"""SubmitReview: a buyer rates a product from a delivered order."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.errors import DuplicateReview, Forbidden
from marketplace.ordering.order import Order, OrderStatus
from marketplace.reviews.review import Review


@marketplace.command(part_of="Review")
class SubmitReview:
    product_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    order_id = Identifier(required=True)
    rating = Integer(required=True, min_value=1, max_value=5)
    comment = String(max_length=500)


@marketplace.command_handler(part_of=Review)
class SubmitReviewHandler:
    @handle(SubmitReview)
    def submit_review(self, command):
        repo = current_domain.repository_for(Review)

        if repo.find_for(command.product_id, command.buyer_id) is not None:
            raise DuplicateReview({"review": ["You have already reviewed this product"]})

        order = current_domain.repository_for(Order).get_active(command.order_id)
        if str(order.buyer_id) != str(command.buyer_id):
            raise Forbidden(f"Order {order.order_number} was not placed by this buyer")
        if str(command.product_id) not in {str(item.product_id) for item in order.items}:
            raise ValidationError({"product_id": ["The order does not contain this product"]})
        if order.status != OrderStatus.DELIVERED.value:
            raise ValidationError({"order_id": ["Only delivered orders can be reviewed"]})

        review = Review.submit(
            product_id=command.product_id,
            buyer_id=command.buyer_id,
            order_id=command.order_id,
            rating=command.rating,
            comment=command.comment,
            is_verified=True,
        )
        repo.add(review)
        return str(review.id)

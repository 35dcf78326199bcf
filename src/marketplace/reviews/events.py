"""Domain events for the Review aggregate."""

from protean.fields import DateTime, Identifier, Integer

from marketplace.domain import marketplace


@marketplace.event(part_of="Review")
class ReviewCommitted:
    """A buyer's review was stored and now counts toward the product rating."""

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    order_id = Identifier(required=True)
    rating = Integer(required=True)
    committed_at = DateTime(required=True)


@marketplace.event(part_of="Review")
class ReviewRemoved:
    """A review was soft-deleted and no longer counts toward the product rating."""

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    removed_at = DateTime(required=True)

"""Error taxonomy for the marketplace.

Input problems are Protean ``ValidationError``s carrying field-level
messages. Business rule violations that reject an input (unavailable product,
short stock, illegal transition, duplicate review) subclass it so generic
handlers still treat them as validation failures, while callers can catch
them precisely.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError


class ProductUnavailable(ValidationError):
    """The product is missing, inactive, unapproved, or not for sale."""


class InsufficientStock(ValidationError):
    """The product does not hold enough units for the request."""


class InvalidTransition(ValidationError):
    """The order status change is not an edge of the transition table."""


class DuplicateReview(ValidationError):
    """The buyer has already reviewed this product."""


class ProductNotFound(ObjectNotFoundError):
    """No active, approved product exists with the given identity."""


class OrderNotFound(ObjectNotFoundError):
    """No active order exists with the given identity."""


class ReviewNotFound(ObjectNotFoundError):
    """No review exists with the given identity."""


class Forbidden(Exception):
    """The actor has no standing to perform the operation."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class StorageConflict(Exception):
    """Concurrent access prevented the operation from completing.

    Transient: the operation that raised it may be retried.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class OrderNumberTaken(StorageConflict):
    """A freshly generated order number already belongs to another order."""

"""Domain events for the Product aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Product")
class ProductListed:
    """A farmer put a new product up for sale, pending admin approval."""

    __version__ = 1

    product_id: Identifier(required=True)
    farmer_id: Identifier(required=True)
    name: String(required=True)
    category: String(required=True)
    price: Float(required=True)
    quantity: Integer(required=True)
    listed_at: DateTime(required=True)


@marketplace.event(part_of="Product")
class ProductApproved:
    """An admin approved the listing; it becomes orderable."""

    __version__ = 1

    product_id: Identifier(required=True)
    approved_by: Identifier(required=True)
    notes: String()
    approved_at: DateTime(required=True)


@marketplace.event(part_of="Product")
class ProductRejected:
    """An admin rejected the listing; it is deactivated."""

    __version__ = 1

    product_id: Identifier(required=True)
    rejected_by: Identifier(required=True)
    reason: String()
    rejected_at: DateTime(required=True)


@marketplace.event(part_of="Product")
class ListingDeactivated:
    """The farmer took the listing down. It stays on record for past orders."""

    __version__ = 1

    product_id: Identifier(required=True)
    farmer_id: Identifier(required=True)
    deactivated_at: DateTime(required=True)


@marketplace.event(part_of="Product")
class ProductPriceChanged:
    __version__ = 1

    product_id: Identifier(required=True)
    previous_price: Float(required=True)
    new_price: Float(required=True)
    changed_at: DateTime(required=True)


@marketplace.event(part_of="Product")
class ProductAvailabilityChanged:
    __version__ = 1

    product_id: Identifier(required=True)
    is_available: Boolean(required=True)
    changed_at: DateTime(required=True)


@marketplace.event(part_of="Product")
class StockWithdrawn:
    """Units were taken out of stock to fill an order."""

    __version__ = 1

    product_id: Identifier(required=True)
    order_number: String(required=True)
    quantity: Integer(required=True)
    remaining: Integer(required=True)
    withdrawn_at: DateTime(required=True)


@marketplace.event(part_of="Product")
class StockAdjusted:
    """The farmer corrected the stock count (restock or write-down)."""

    __version__ = 1

    product_id: Identifier(required=True)
    delta: Integer(required=True)
    previous_quantity: Integer(required=True)
    new_quantity: Integer(required=True)
    adjusted_at: DateTime(required=True)


@marketplace.event(part_of="Product")
class ProductRatingRecalculated:
    """The rating aggregate was recomputed from the product's active reviews."""

    __version__ = 1

    product_id: Identifier(required=True)
    average: Float(required=True)
    count: Integer(required=True)
    recalculated_at: DateTime(required=True)

"""Product aggregate: a farmer's listing and its stock.

A listing starts available, unapproved, and active. The three flags are
independent; a product can be ordered only while all three hold.

``quantity`` is the only contended field in the catalogue. It changes through
:meth:`Product.withdraw_stock` (order placement) and
:meth:`Product.adjust_stock` (farmer corrections), both of which refuse to
take it below zero. Callers hold the product's lock around the
read-change-write sequence.
"""

from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from marketplace.catalogue.events import (
    ListingDeactivated,
    ProductApproved,
    ProductAvailabilityChanged,
    ProductListed,
    ProductPriceChanged,
    ProductRatingRecalculated,
    ProductRejected,
    StockAdjusted,
    StockWithdrawn,
)
from marketplace.domain import marketplace
from marketplace.errors import Forbidden, InsufficientStock, ProductUnavailable
from marketplace.shared.money import MINOR_UNIT


class ProductCategory(Enum):
    LIVESTOCK = "livestock"
    POULTRY = "poultry"
    DAIRY = "dairy"
    VEGETABLES = "vegetables"
    FRUITS = "fruits"
    CEREALS = "cereals"
    LEGUMES = "legumes"
    HERBS = "herbs"
    SEEDS = "seeds"
    OTHER = "other"


class ProductUnit(Enum):
    KG = "kg"
    PIECE = "piece"
    DOZEN = "dozen"
    LITRE = "litre"
    BAG = "bag"
    BUNCH = "bunch"
    HEAD = "head"
    OTHER = "other"


@marketplace.value_object(part_of="Product")
class Location:
    """Where the produce is. Kenyan administrative units."""

    county: String(max_length=100)
    sub_county: String(max_length=100)
    ward: String(max_length=100)


@marketplace.value_object(part_of="Product")
class RatingSummary:
    """Denormalized rating aggregate. The active review set is authoritative."""

    average: Float(default=0.0, min_value=0.0, max_value=5.0)
    count: Integer(default=0, min_value=0)


@marketplace.aggregate
class Product:
    farmer_id: Identifier(required=True)
    name: String(required=True, max_length=100)
    description: Text(required=True)
    category: String(choices=ProductCategory, required=True)
    subcategory: String(required=True, max_length=50)
    unit: String(choices=ProductUnit, required=True)
    price: Float(required=True, min_value=0.0)
    quantity: Integer(required=True, min_value=0)
    location: ValueObject(Location)
    is_available: Boolean(default=True)
    is_approved: Boolean(default=False)
    is_active: Boolean(default=True)
    approved_by: Identifier()
    approved_at: DateTime()
    admin_notes: String(max_length=500)
    rejection_reason: String(max_length=500)
    rating: ValueObject(RatingSummary)
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def description_within_limit(self):
        if self.description and len(self.description) > 1000:
            raise ValidationError({"description": ["Description cannot exceed 1000 characters"]})

    @invariant.post
    def price_in_minor_units(self):
        if self.price is not None and Decimal(str(self.price)) != Decimal(str(self.price)).quantize(MINOR_UNIT):
            raise ValidationError({"price": ["Price cannot have more than two decimal places"]})

    @classmethod
    def list_for_sale(
        cls,
        farmer_id,
        name,
        description,
        category,
        subcategory,
        unit,
        price,
        quantity,
        location=None,
    ):
        now = datetime.now(UTC)
        product = cls(
            farmer_id=farmer_id,
            name=name,
            description=description,
            category=category,
            subcategory=subcategory,
            unit=unit,
            price=price,
            quantity=quantity,
            location=Location(**location) if location else None,
            rating=RatingSummary(average=0.0, count=0),
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductListed(
                product_id=str(product.id),
                farmer_id=str(farmer_id),
                name=name,
                category=category,
                price=price,
                quantity=quantity,
                listed_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def is_orderable(self) -> bool:
        return bool(self.is_active and self.is_approved and self.is_available)

    def assert_owned_by(self, farmer_id):
        if str(self.farmer_id) != str(farmer_id):
            raise Forbidden(f"Product {self.id} belongs to another farmer")

    # -------------------------------------------------------------------
    # Stock
    # -------------------------------------------------------------------
    def withdraw_stock(self, quantity, order_number):
        """Take ``quantity`` units for an order, only if that many are on hand."""
        if not self.is_orderable:
            raise ProductUnavailable({"product_id": [f"Product {self.id} is not available"]})
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        if self.quantity < quantity:
            raise InsufficientStock({"quantity": [f"Insufficient quantity for product: {self.name}"]})

        now = datetime.now(UTC)
        self.quantity = self.quantity - quantity
        self.updated_at = now

        self.raise_(
            StockWithdrawn(
                product_id=str(self.id),
                order_number=order_number,
                quantity=quantity,
                remaining=self.quantity,
                withdrawn_at=now,
            )
        )

    def adjust_stock(self, delta):
        """Restock (positive ``delta``) or write down (negative) the stock count."""
        if delta == 0:
            raise ValidationError({"delta": ["Adjustment must change the quantity"]})
        if self.quantity + delta < 0:
            raise InsufficientStock(
                {"delta": [f"Cannot remove {-delta} units, only {self.quantity} in stock"]}
            )

        now = datetime.now(UTC)
        previous = self.quantity
        self.quantity = previous + delta
        self.updated_at = now

        self.raise_(
            StockAdjusted(
                product_id=str(self.id),
                delta=delta,
                previous_quantity=previous,
                new_quantity=self.quantity,
                adjusted_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Listing details
    # -------------------------------------------------------------------
    def change_price(self, new_price):
        now = datetime.now(UTC)
        previous = self.price
        self.price = new_price
        self.updated_at = now

        self.raise_(
            ProductPriceChanged(
                product_id=str(self.id),
                previous_price=previous,
                new_price=new_price,
                changed_at=now,
            )
        )

    def deactivate(self, farmer_id):
        """Soft-delete the listing. Already inactive listings are left as they are."""
        if not self.is_active:
            return

        now = datetime.now(UTC)
        self.is_active = False
        self.updated_at = now

        self.raise_(
            ListingDeactivated(
                product_id=str(self.id),
                farmer_id=str(farmer_id),
                deactivated_at=now,
            )
        )

    def set_availability(self, is_available):
        now = datetime.now(UTC)
        self.is_available = is_available
        self.updated_at = now

        self.raise_(
            ProductAvailabilityChanged(
                product_id=str(self.id),
                is_available=is_available,
                changed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Moderation
    # -------------------------------------------------------------------
    def approve(self, admin_id, notes=None):
        if not self.is_active:
            raise ValidationError({"product_id": ["A rejected listing cannot be approved"]})

        now = datetime.now(UTC)
        self.is_approved = True
        self.approved_by = admin_id
        self.approved_at = now
        if notes:
            self.admin_notes = notes
        self.updated_at = now

        self.raise_(
            ProductApproved(
                product_id=str(self.id),
                approved_by=str(admin_id),
                notes=notes,
                approved_at=now,
            )
        )

    def reject(self, admin_id, reason=None):
        now = datetime.now(UTC)
        self.is_active = False
        if reason:
            self.rejection_reason = reason
        self.updated_at = now

        self.raise_(
            ProductRejected(
                product_id=str(self.id),
                rejected_by=str(admin_id),
                reason=reason,
                rejected_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Ratings
    # -------------------------------------------------------------------
    def refresh_rating(self, average, count):
        """Overwrite the rating aggregate with a full recomputation."""
        now = datetime.now(UTC)
        self.rating = RatingSummary(average=average, count=count)
        self.updated_at = now

        self.raise_(
            ProductRatingRecalculated(
                product_id=str(self.id),
                average=average,
                count=count,
                recalculated_at=now,
            )
        )

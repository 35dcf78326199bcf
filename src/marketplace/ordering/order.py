"""Order aggregate.

State Machine:
    PENDING → CONFIRMED → PROCESSING → SHIPPED → DELIVERED
    CANCELLED (from PENDING, CONFIRMED, PROCESSING)

Line items and the total are fixed at placement. Afterwards only the status,
the payment fields and the notes change.
"""

import json
import re
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    ValueObject,
)

from marketplace.domain import marketplace
from marketplace.errors import Forbidden, InvalidTransition
from marketplace.ordering.events import OrderPlaced, OrderStatusChanged, PaymentStatusChanged
from marketplace.shared.money import as_amount, sum_lines, to_money

PHONE_PATTERN = re.compile(r"^(\+254|0)[0-9]{9}$")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(Enum):
    MPESA = "mpesa"
    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"
    OTHER = "other"


class ActorRole(Enum):
    BUYER = "buyer"
    FARMER = "farmer"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@marketplace.value_object(part_of="Order")
class ShippingAddress:
    """Where the buyer wants the order delivered, captured at placement."""

    county = String(required=True, max_length=100)
    sub_county = String(required=True, max_length=100)
    ward = String(required=True, max_length=100)
    specific_location = String(required=True, max_length=255)
    contact_phone = String(required=True, max_length=13)
    additional_notes = String(max_length=500)

    @invariant.post
    def contact_phone_is_kenyan(self):
        if self.contact_phone and not PHONE_PATTERN.match(self.contact_phone):
            raise ValidationError({"contact_phone": ["Please provide a valid Kenyan phone number"]})


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@marketplace.entity(part_of="Order")
class LineItem:
    """One product on an order, with the price and seller as they were at placement."""

    product_id = Identifier(required=True)
    farmer_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@marketplace.aggregate
class Order:
    order_number = String(required=True, max_length=20, unique=True)
    buyer_id = Identifier(required=True)
    items = HasMany(LineItem)
    total_amount = Float(required=True, min_value=0.0)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payment_method = String(choices=PaymentMethod, required=True)
    payment_reference = String(max_length=100)
    shipping_address = ValueObject(ShippingAddress, required=True)
    delivery_notes = String(max_length=500)
    farmer_notes = String(max_length=500)
    delivered_at = DateTime()
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_matches_line_items(self):
        if not self.items or self.total_amount is None:
            return
        expected = sum_lines((item.price, item.quantity) for item in self.items)
        if to_money(self.total_amount) != expected:
            raise ValidationError({"total_amount": ["Order total must equal the sum of its line items"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_number,
        buyer_id,
        lines,
        payment_method,
        shipping_address,
        delivery_notes=None,
    ):
        """Create a pending order from priced lines.

        Args:
            lines: dicts with product_id, farmer_id, quantity and the price
                snapshot taken from the product.
            shipping_address: dict with the ShippingAddress fields.
        """
        now = datetime.now(UTC)
        total = as_amount(sum_lines((line["price"], line["quantity"]) for line in lines))

        order = cls(
            order_number=order_number,
            buyer_id=buyer_id,
            items=[LineItem(**line) for line in lines],
            total_amount=total,
            payment_method=payment_method,
            shipping_address=ShippingAddress(**shipping_address),
            delivery_notes=delivery_notes,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                buyer_id=str(buyer_id),
                items=json.dumps(
                    [
                        {
                            "product_id": str(item.product_id),
                            "farmer_id": str(item.farmer_id),
                            "quantity": item.quantity,
                            "price": item.price,
                        }
                        for item in order.items
                    ]
                ),
                total_amount=total,
                payment_method=payment_method,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Parties
    # -------------------------------------------------------------------
    @property
    def farmer_ids(self) -> set[str]:
        return {str(item.farmer_id) for item in self.items}

    def actor_role(self, actor_id) -> ActorRole | None:
        """The role ``actor_id`` plays on this order. A farmer on the order
        counts as the farmer even when also the buyer."""
        if str(actor_id) in self.farmer_ids:
            return ActorRole.FARMER
        if str(actor_id) == str(self.buyer_id):
            return ActorRole.BUYER
        return None

    def assert_visible_to(self, actor_id):
        if self.actor_role(actor_id) is None:
            raise Forbidden(f"Not authorized to access order {self.order_number}")

    # -------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------
    def transition_to(self, new_status, actor_id, notes=None):
        role = self.actor_role(actor_id)
        if role is None:
            raise Forbidden(f"Not authorized to update order {self.order_number}")

        current = OrderStatus(self.status)
        target = OrderStatus(new_status)
        if target not in _VALID_TRANSITIONS[current]:
            raise InvalidTransition(
                {"status": [f"Cannot transition from {current.value} to {target.value}"]}
            )

        now = datetime.now(UTC)
        self.status = target.value
        if notes:
            if role == ActorRole.FARMER:
                self.farmer_notes = notes
            else:
                self.delivery_notes = notes
        if target == OrderStatus.DELIVERED:
            self.delivered_at = now
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=current.value,
                new_status=target.value,
                changed_by=str(actor_id),
                actor_role=role.value,
                notes=notes,
                changed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def record_payment(self, buyer_id, payment_status, reference=None):
        """Set the payment status. Any status may follow any other."""
        if str(buyer_id) != str(self.buyer_id):
            raise Forbidden(f"Only the buyer can update payment for order {self.order_number}")

        target = PaymentStatus(payment_status)
        now = datetime.now(UTC)
        previous = self.payment_status
        self.payment_status = target.value
        if reference:
            self.payment_reference = reference
        self.updated_at = now

        self.raise_(
            PaymentStatusChanged(
                order_id=str(self.id),
                previous_status=previous,
                new_status=target.value,
                reference=reference,
                changed_at=now,
            )
        )

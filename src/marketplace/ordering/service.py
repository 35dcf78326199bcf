"""Ordering operations: placing orders, moving them along, and listing them."""

import json
from dataclasses import dataclass

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from marketplace.config import default_page_size, max_page_size
from marketplace.ordering.numbering import generate_order_number
from marketplace.ordering.order import ActorRole, Order, OrderStatus
from marketplace.ordering.payment import SetPaymentStatus
from marketplace.ordering.placement import PlaceOrder
from marketplace.ordering.projections.farmer_orders import FarmerOrder
from marketplace.ordering.status import UpdateOrderStatus
from marketplace.shared.paging import page_count, page_window
from marketplace.utils.locks import locks, order_key, order_number_key, product_key
from marketplace.utils.retry import retry_on_conflict

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Pagination:
    current_page: int
    total_pages: int
    total_orders: int


def _normalize_items(items) -> list[dict]:
    """Check the requested lines before any product is read."""
    if not items:
        raise ValidationError({"items": ["Order must contain at least one item"]})

    normalized = []
    for position, item in enumerate(items):
        product_id = item.get("product_id") if isinstance(item, dict) else None
        quantity = item.get("quantity") if isinstance(item, dict) else None
        if not product_id:
            raise ValidationError({"items": [f"Item {position} is missing a product"]})
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
            raise ValidationError({"items": [f"Item {position} must have a quantity of at least 1"]})
        normalized.append({"product_id": str(product_id), "quantity": quantity})
    return normalized


def create_order(buyer_id, items, payment_method, shipping_address, delivery_notes=None) -> Order:
    lines = _normalize_items(items)
    product_keys = [product_key(line["product_id"]) for line in lines]

    def attempt():
        order_number = generate_order_number()
        with locks.hold([*product_keys, order_number_key(order_number)]):
            return current_domain.process(
                PlaceOrder(
                    order_number=order_number,
                    buyer_id=buyer_id,
                    items=json.dumps(lines),
                    payment_method=payment_method,
                    shipping_address=json.dumps(shipping_address or {}),
                    delivery_notes=delivery_notes,
                ),
                asynchronous=False,
            )

    order_id = retry_on_conflict(attempt, label="create_order")
    order = current_domain.repository_for(Order).get(order_id)
    logger.info(
        "Order placed",
        order_id=order_id,
        order_number=order.order_number,
        buyer_id=str(buyer_id),
        total_amount=order.total_amount,
        line_count=len(lines),
    )
    return order


def get_order(order_id, actor_id) -> Order:
    order = current_domain.repository_for(Order).get_active(order_id)
    order.assert_visible_to(actor_id)
    return order


def update_order_status(order_id, actor_id, new_status, notes=None) -> Order:
    def attempt():
        with locks.hold([order_key(order_id)]):
            current_domain.process(
                UpdateOrderStatus(order_id=order_id, actor_id=actor_id, new_status=new_status, notes=notes),
                asynchronous=False,
            )

    retry_on_conflict(attempt, label="update_order_status")
    order = current_domain.repository_for(Order).get(order_id)
    logger.info("Order status updated", order_id=str(order_id), status=order.status, actor_id=str(actor_id))
    return order


def set_payment_status(order_id, buyer_id, new_payment_status, reference=None) -> Order:
    def attempt():
        with locks.hold([order_key(order_id)]):
            current_domain.process(
                SetPaymentStatus(
                    order_id=order_id,
                    buyer_id=buyer_id,
                    payment_status=new_payment_status,
                    reference=reference,
                ),
                asynchronous=False,
            )

    retry_on_conflict(attempt, label="set_payment_status")
    order = current_domain.repository_for(Order).get(order_id)
    logger.info("Payment status updated", order_id=str(order_id), payment_status=order.payment_status)
    return order


def list_orders(owner_id, role, status=None, page=1, limit=None):
    """Active orders for a buyer or a farmer, newest first.

    Returns ``(orders, Pagination)``.
    """
    try:
        role = ActorRole(role)
    except ValueError:
        raise ValidationError({"role": [f"Unknown role {role}"]})
    if status:
        try:
            status = OrderStatus(status).value
        except ValueError:
            raise ValidationError({"status": [f"Unknown order status {status}"]})
    page, limit, offset = page_window(page, limit, default_page_size(), max_page_size())

    order_repo = current_domain.repository_for(Order)
    if role == ActorRole.BUYER:
        results = order_repo.page_for_buyer(owner_id, status=status, offset=offset, limit=limit)
        orders = list(results.items)
    else:
        filters = {"farmer_id": str(owner_id)}
        if status:
            filters["status"] = status
        results = (
            current_domain.repository_for(FarmerOrder)
            ._dao.query.filter(**filters)
            .order_by("-placed_at")
            .offset(offset)
            .limit(limit)
            .all()
        )
        orders = [order_repo.get(row.order_id) for row in results.items]
        orders = [order for order in orders if order.is_active]

    pagination = Pagination(
        current_page=page,
        total_pages=page_count(results.total, limit),
        total_orders=results.total,
    )
    return orders, pagination

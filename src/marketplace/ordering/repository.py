"""Repository for the Order aggregate."""

from protean.exceptions import ObjectNotFoundError

from marketplace.domain import marketplace
from marketplace.errors import OrderNotFound
from marketplace.ordering.order import Order


@marketplace.repository(part_of=Order)
class OrderRepository:
    def get_active(self, order_id) -> Order:
        try:
            order = self.get(order_id)
        except ObjectNotFoundError:
            raise OrderNotFound({"order_id": [f"Order {order_id} not found"]})

        if not order.is_active:
            raise OrderNotFound({"order_id": [f"Order {order_id} not found"]})
        return order

    def find_by_order_number(self, order_number: str) -> Order | None:
        results = self._dao.query.filter(order_number=order_number).all()
        return results.first

    def page_for_buyer(self, buyer_id, status=None, offset=0, limit=10):
        """Active orders placed by ``buyer_id``, newest first."""
        filters = {"buyer_id": str(buyer_id), "is_active": True}
        if status:
            filters["status"] = status
        return self._dao.query.filter(**filters).order_by("-created_at").offset(offset).limit(limit).all()

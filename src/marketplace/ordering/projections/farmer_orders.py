"""Farmer orders projection: one row per (order, farmer) pair.

An order with lines from several farmers shows up in each farmer's list.
Rows carry the order status so farmers can filter without loading orders.
"""

import json

from protean.core.projector import on
from protean.fields import DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.ordering.events import OrderPlaced, OrderStatusChanged
from marketplace.ordering.order import Order
from marketplace.shared.money import as_amount, sum_lines


@marketplace.projection
class FarmerOrder:
    id = Identifier(identifier=True, required=True)  # "<order_id>:<farmer_id>"
    order_id = Identifier(required=True)
    farmer_id = Identifier(required=True)
    order_number = String(required=True, max_length=20)
    buyer_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    item_count = Integer(default=0)
    farmer_subtotal = Float(default=0.0)
    placed_at = DateTime()
    updated_at = DateTime()


@marketplace.projector(projector_for=FarmerOrder, aggregates=[Order])
class FarmerOrderProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        repo = current_domain.repository_for(FarmerOrder)

        by_farmer = {}
        for item in json.loads(event.items):
            by_farmer.setdefault(item["farmer_id"], []).append(item)

        for farmer_id, items in by_farmer.items():
            repo.add(
                FarmerOrder(
                    id=f"{event.order_id}:{farmer_id}",
                    order_id=event.order_id,
                    farmer_id=farmer_id,
                    order_number=event.order_number,
                    buyer_id=event.buyer_id,
                    status="pending",
                    item_count=sum(item["quantity"] for item in items),
                    farmer_subtotal=as_amount(sum_lines((item["price"], item["quantity"]) for item in items)),
                    placed_at=event.placed_at,
                    updated_at=event.placed_at,
                )
            )

    @on(OrderStatusChanged)
    def on_status_changed(self, event):
        repo = current_domain.repository_for(FarmerOrder)
        for row in repo._dao.query.filter(order_id=str(event.order_id)).all().items:
            row.status = event.new_status
            row.updated_at = event.changed_at
            repo.add(row)

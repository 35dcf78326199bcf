"""Integration tests for racing status changes on one order."""

import threading

from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.errors import InvalidTransition
from marketplace.ordering import service as ordering
from marketplace.ordering.order import Order
from marketplace.ordering.projections.farmer_orders import FarmerOrder


def _race(order_id, actor_ids, new_status):
    barrier = threading.Barrier(len(actor_ids))
    outcomes = []
    guard = threading.Lock()

    def worker(actor_id):
        with marketplace.domain_context():
            barrier.wait()
            try:
                ordering.update_order_status(order_id, actor_id, new_status)
                result = "ok"
            except InvalidTransition:
                result = "invalid"
            with guard:
                outcomes.append(result)

    threads = [threading.Thread(target=worker, args=(actor,)) for actor in actor_ids]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)
    return sorted(outcomes)


class TestDoubleConfirmation:
    def test_one_confirmation_wins(self, listed_product, placed_order):
        product = listed_product(farmer_id="farmer-a")
        order = placed_order("buyer-001", [(product, 1)])

        outcomes = _race(order.id, ["farmer-a", "farmer-a"], "confirmed")

        assert outcomes == ["invalid", "ok"]
        assert current_domain.repository_for(Order).get(order.id).status == "confirmed"

    def test_cancel_racing_confirmation_always_lands(self, listed_product, placed_order):
        product = listed_product(farmer_id="farmer-a")
        order = placed_order("buyer-001", [(product, 1)])

        barrier = threading.Barrier(2)
        outcomes = {}

        def worker(actor_id, new_status):
            with marketplace.domain_context():
                barrier.wait()
                try:
                    ordering.update_order_status(order.id, actor_id, new_status)
                    outcomes[new_status] = "ok"
                except InvalidTransition:
                    outcomes[new_status] = "invalid"

        threads = [
            threading.Thread(target=worker, args=("farmer-a", "confirmed")),
            threading.Thread(target=worker, args=("buyer-001", "cancelled")),
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)

        # Cancellation is legal from both pending and confirmed.
        assert outcomes["cancelled"] == "ok"
        assert outcomes["confirmed"] in ("ok", "invalid")
        assert current_domain.repository_for(Order).get(order.id).status == "cancelled"
        row = current_domain.repository_for(FarmerOrder)._dao.query.filter(order_id=str(order.id)).all().first
        assert row.status == "cancelled"

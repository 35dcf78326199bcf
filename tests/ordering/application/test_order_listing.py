"""Application tests for listing a buyer's or a farmer's orders."""

import pytest
from protean.exceptions import ValidationError

from marketplace.ordering import service as ordering


@pytest.fixture
def products(listed_product):
    return (
        listed_product(farmer_id="farmer-a", quantity=100),
        listed_product(farmer_id="farmer-b", quantity=100),
    )


class TestBuyerListing:
    def test_newest_first(self, products, placed_order):
        first = placed_order("buyer-001", [(products[0], 1)])
        second = placed_order("buyer-001", [(products[1], 1)])
        placed_order("buyer-002", [(products[0], 1)])

        orders, pagination = ordering.list_orders("buyer-001", "buyer")

        assert [o.id for o in orders] == [second.id, first.id]
        assert pagination.total_orders == 2
        assert pagination.total_pages == 1
        assert pagination.current_page == 1

    def test_paging(self, products, placed_order):
        for _ in range(5):
            placed_order("buyer-001", [(products[0], 1)])

        orders, pagination = ordering.list_orders("buyer-001", "buyer", page=3, limit=2)

        assert len(orders) == 1
        assert pagination.total_orders == 5
        assert pagination.total_pages == 3
        assert pagination.current_page == 3

    def test_status_filter(self, products, placed_order):
        kept = placed_order("buyer-001", [(products[0], 1)])
        confirmed = placed_order("buyer-001", [(products[0], 1)])
        ordering.update_order_status(confirmed.id, "farmer-a", "confirmed")

        orders, pagination = ordering.list_orders("buyer-001", "buyer", status="pending")

        assert [o.id for o in orders] == [kept.id]
        assert pagination.total_orders == 1

    def test_no_orders(self):
        orders, pagination = ordering.list_orders("buyer-404", "buyer")
        assert orders == []
        assert pagination.total_orders == 0
        assert pagination.total_pages == 0


class TestFarmerListing:
    def test_farmer_sees_orders_with_their_lines(self, products, placed_order):
        mixed = placed_order("buyer-001", [(products[0], 1), (products[1], 2)])
        only_b = placed_order("buyer-002", [(products[1], 1)])

        a_orders, a_page = ordering.list_orders("farmer-a", "farmer")
        b_orders, b_page = ordering.list_orders("farmer-b", "farmer")

        assert [o.id for o in a_orders] == [mixed.id]
        assert {o.id for o in b_orders} == {mixed.id, only_b.id}
        assert a_page.total_orders == 1
        assert b_page.total_orders == 2

    def test_farmer_status_filter_follows_transitions(self, products, placed_order):
        order = placed_order("buyer-001", [(products[0], 1)])
        ordering.update_order_status(order.id, "farmer-a", "confirmed")

        pending, _ = ordering.list_orders("farmer-a", "farmer", status="pending")
        confirmed, _ = ordering.list_orders("farmer-a", "farmer", status="confirmed")

        assert pending == []
        assert [o.id for o in confirmed] == [order.id]


def test_unknown_role_rejected():
    with pytest.raises(ValidationError):
        ordering.list_orders("someone", "admin")


def test_limit_is_capped(monkeypatch):
    monkeypatch.setenv("MARKETPLACE_MAX_PAGE_SIZE", "5")
    _, pagination = ordering.list_orders("buyer-001", "buyer", limit=500)
    assert pagination.current_page == 1


def test_unknown_status_filter_rejected():
    with pytest.raises(ValidationError) as exc:
        ordering.list_orders("buyer-001", "buyer", status="bogus")
    assert "status" in exc.value.messages


def test_unknown_status_filter_rejected_for_farmers():
    with pytest.raises(ValidationError):
        ordering.list_orders("farmer-a", "farmer", status="lost")

"""Shared BDD fixtures and step definitions for the order lifecycle."""

import pytest
from protean.utils.globals import current_domain
from pytest_bdd import given, parsers, then, when

from marketplace.catalogue.product import Product
from marketplace.errors import Forbidden, InsufficientStock, InvalidTransition
from marketplace.ordering import service as ordering
from marketplace.ordering.order import Order


@pytest.fixture
def outcome():
    return {}


@given(
    parsers.cfparse('farmer "{farmer_id}" has an approved product priced {price:f} with {quantity:d} units'),
    target_fixture="product",
)
def _(listed_product, farmer_id, price, quantity):
    return listed_product(farmer_id=farmer_id, price=price, quantity=quantity)


@given(parsers.cfparse('buyer "{buyer_id}" has ordered {quantity:d} units'), target_fixture="order")
@when(parsers.cfparse('buyer "{buyer_id}" orders {quantity:d} units'), target_fixture="order")
def _(placed_order, product, buyer_id, quantity):
    return placed_order(buyer_id, [(product, quantity)])


@when(parsers.cfparse('buyer "{buyer_id}" tries to order {quantity:d} units'))
def _(placed_order, product, outcome, buyer_id, quantity):
    try:
        placed_order(buyer_id, [(product, quantity)])
    except (InsufficientStock, InvalidTransition, Forbidden) as exc:
        outcome["error"] = exc


@when(parsers.cfparse('"{actor_id}" moves the order to "{status}"'), target_fixture="order")
def _(order, actor_id, status):
    return ordering.update_order_status(order.id, actor_id, status)


@when(parsers.cfparse('"{actor_id}" tries to move the order to "{status}"'))
def _(order, outcome, actor_id, status):
    try:
        ordering.update_order_status(order.id, actor_id, status)
    except (InvalidTransition, Forbidden) as exc:
        outcome["error"] = exc


@then(parsers.cfparse("the order total is {total:f}"))
def _(order, total):
    assert order.total_amount == total


@then(parsers.cfparse('the order status is "{status}"'))
def _(order, status):
    assert current_domain.repository_for(Order).get(order.id).status == status


@then("the order has a delivery time")
def _(order):
    assert current_domain.repository_for(Order).get(order.id).delivered_at is not None


@then(parsers.cfparse("the product has {quantity:d} units left"))
def _(product, quantity):
    assert current_domain.repository_for(Product).get(product.id).quantity == quantity


@then("the status change is refused as an invalid transition")
def _(outcome):
    assert isinstance(outcome.get("error"), InvalidTransition)


@then("the status change is refused as forbidden")
def _(outcome):
    assert isinstance(outcome.get("error"), Forbidden)


@then("the order is refused for insufficient stock")
def _(outcome):
    assert isinstance(outcome.get("error"), InsufficientStock)

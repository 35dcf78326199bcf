"""Shared BDD fixtures and step definitions for product ratings."""

import pytest
from protean.utils.globals import current_domain
from pytest_bdd import given, parsers, then, when

from marketplace.catalogue.product import Product
from marketplace.errors import DuplicateReview
from marketplace.reviews import service as reviews


@pytest.fixture
def deliveries():
    return {}


@pytest.fixture
def submitted():
    return {}


@pytest.fixture
def outcome():
    return {}


@given(
    parsers.cfparse('farmer "{farmer_id}" has an approved product priced {price:f} with {quantity:d} units'),
    target_fixture="product",
)
def _(listed_product, farmer_id, price, quantity):
    return listed_product(farmer_id=farmer_id, price=price, quantity=quantity)


@given(parsers.re(r'buyer "(?P<buyer_id>[^"]+)" has received (?P<quantity>\d+) units?'))
def _(delivered_order, product, deliveries, buyer_id, quantity):
    deliveries[buyer_id] = delivered_order(buyer_id, product, int(quantity))


@given(parsers.cfparse('buyer "{buyer_id}" rates the product {rating:d}'))
@when(parsers.cfparse('buyer "{buyer_id}" rates the product {rating:d}'))
def _(product, deliveries, submitted, buyer_id, rating):
    submitted[buyer_id] = reviews.submit_review(buyer_id, product.id, deliveries[buyer_id].id, rating)


@when(parsers.cfparse('buyer "{buyer_id}" tries to rate the product {rating:d}'))
def _(product, deliveries, outcome, buyer_id, rating):
    try:
        reviews.submit_review(buyer_id, product.id, deliveries[buyer_id].id, rating)
    except DuplicateReview as exc:
        outcome["error"] = exc


@when(parsers.cfparse('the review by buyer "{buyer_id}" is removed'))
def _(submitted, buyer_id):
    reviews.remove_review(submitted[buyer_id].id)


@then(parsers.re(r"the product rating is (?P<average>[\d.]+) from (?P<count>\d+) reviews?"))
def _(product, average, count):
    rating = current_domain.repository_for(Product).get(product.id).rating
    assert rating.average == float(average)
    assert rating.count == int(count)


@then(parsers.cfparse("the product has {quantity:d} units left"))
def _(product, quantity):
    assert current_domain.repository_for(Product).get(product.id).quantity == quantity


@then("the review is refused as a duplicate")
def _(outcome):
    assert isinstance(outcome.get("error"), DuplicateReview)

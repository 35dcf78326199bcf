"""BDD tests for product ratings."""

from pytest_bdd import scenarios

scenarios("features/product_rating.feature")

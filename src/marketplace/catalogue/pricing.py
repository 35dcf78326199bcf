"""Farmer-managed listing details: price, availability, and taking a listing down."""

from protean import handle
from protean.fields import Boolean, Float, Identifier
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product
from marketplace.domain import marketplace


@marketplace.command(part_of="Product")
class UpdateProductPrice:
    product_id: Identifier(required=True)
    farmer_id: Identifier(required=True)
    price: Float(required=True, min_value=0.0)


@marketplace.command(part_of="Product")
class SetAvailability:
    product_id: Identifier(required=True)
    farmer_id: Identifier(required=True)
    is_available: Boolean(required=True)


@marketplace.command(part_of="Product")
class DeactivateListing:
    product_id: Identifier(required=True)
    farmer_id: Identifier(required=True)


@marketplace.command_handler(part_of=Product)
class ManageListingHandler:
    @handle(UpdateProductPrice)
    def update_price(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.assert_owned_by(command.farmer_id)
        product.change_price(command.price)
        repo.add(product)

    @handle(SetAvailability)
    def set_availability(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.assert_owned_by(command.farmer_id)
        product.set_availability(command.is_available)
        repo.add(product)

    @handle(DeactivateListing)
    def deactivate(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.assert_owned_by(command.farmer_id)
        product.deactivate(command.farmer_id)
        repo.add(product)

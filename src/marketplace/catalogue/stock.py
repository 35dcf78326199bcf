"""Farmer stock corrections."""

from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product
from marketplace.domain import marketplace


@marketplace.command(part_of="Product")
class AdjustStock:
    product_id: Identifier(required=True)
    farmer_id: Identifier(required=True)
    delta: Integer(required=True)


@marketplace.command_handler(part_of=Product)
class AdjustStockHandler:
    @handle(AdjustStock)
    def adjust_stock(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.assert_owned_by(command.farmer_id)
        product.adjust_stock(command.delta)
        repo.add(product)
        return product.quantity

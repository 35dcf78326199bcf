"""Putting a product up for sale."""

import json

from protean import handle
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product
from marketplace.domain import marketplace


@marketplace.command(part_of="Product")
class ListProduct:
    farmer_id: Identifier(required=True)
    name: String(required=True, max_length=100)
    description: Text(required=True)
    category: String(required=True, max_length=20)
    subcategory: String(required=True, max_length=50)
    unit: String(required=True, max_length=20)
    price: Float(required=True, min_value=0.0)
    quantity: Integer(required=True, min_value=0)
    location: Text()  # JSON {county, sub_county, ward}


@marketplace.command_handler(part_of=Product)
class ListProductHandler:
    @handle(ListProduct)
    def list_product(self, command):
        product = Product.list_for_sale(
            farmer_id=command.farmer_id,
            name=command.name,
            description=command.description,
            category=command.category,
            subcategory=command.subcategory,
            unit=command.unit,
            price=command.price,
            quantity=command.quantity,
            location=json.loads(command.location) if command.location else None,
        )
        current_domain.repository_for(Product).add(product)
        return str(product.id)

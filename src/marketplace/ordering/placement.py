"""PlaceOrder: price the requested lines, withdraw their stock, store the order.

Every check and every stock withdrawal happens on in-memory aggregates before
anything is handed to a repository, so a rejected order writes nothing. The
caller holds the locks of every referenced product for the duration.
"""

import json

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product
from marketplace.domain import marketplace
from marketplace.errors import OrderNumberTaken
from marketplace.ordering.order import Order, PaymentMethod


@marketplace.command(part_of="Order")
class PlaceOrder:
    order_number = String(required=True, max_length=20)
    buyer_id = Identifier(required=True)
    items = Text(required=True)  # JSON array of {product_id, quantity}
    payment_method = String(choices=PaymentMethod, required=True)
    shipping_address = Text(required=True)  # JSON ShippingAddress fields
    delivery_notes = String(max_length=500)


@marketplace.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        order_repo = current_domain.repository_for(Order)
        product_repo = current_domain.repository_for(Product)

        if order_repo.find_by_order_number(command.order_number) is not None:
            raise OrderNumberTaken(f"Order number {command.order_number} is already in use")

        # One instance per product so repeated lines draw on the same stock
        products = {}
        lines = []
        for requested in json.loads(command.items):
            product_id = str(requested["product_id"])
            if product_id not in products:
                products[product_id] = product_repo.get_orderable(product_id)
            product = products[product_id]

            product.withdraw_stock(requested["quantity"], command.order_number)
            lines.append(
                {
                    "product_id": product_id,
                    "farmer_id": str(product.farmer_id),
                    "quantity": requested["quantity"],
                    "price": product.price,
                }
            )

        order = Order.place(
            order_number=command.order_number,
            buyer_id=command.buyer_id,
            lines=lines,
            payment_method=command.payment_method,
            shipping_address=json.loads(command.shipping_address),
            delivery_notes=command.delivery_notes,
        )

        order_repo.add(order)
        for product in products.values():
            product_repo.add(product)
        return str(order.id)

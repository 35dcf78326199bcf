"""UpdateOrderStatus: move an order along its lifecycle."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.ordering.order import Order, OrderStatus


@marketplace.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    new_status = String(choices=OrderStatus, required=True)
    notes = String(max_length=500)


@marketplace.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get_active(command.order_id)
        order.transition_to(command.new_status, command.actor_id, notes=command.notes)
        repo.add(order)

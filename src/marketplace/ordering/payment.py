"""SetPaymentStatus: the buyer records how payment went."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.ordering.order import Order, PaymentStatus


@marketplace.command(part_of="Order")
class SetPaymentStatus:
    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    payment_status = String(choices=PaymentStatus, required=True)
    reference = String(max_length=100)


@marketplace.command_handler(part_of=Order)
class SetPaymentStatusHandler:
    @handle(SetPaymentStatus)
    def set_payment_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get_active(command.order_id)
        order.record_payment(command.buyer_id, command.payment_status, reference=command.reference)
        repo.add(order)

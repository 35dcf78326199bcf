"""Admin approval and rejection of listings."""

from enum import Enum

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product
from marketplace.domain import marketplace


class ListingDecision(Enum):
    APPROVE = "approve"
    REJECT = "reject"


@marketplace.command(part_of="Product")
class ModerateListing:
    product_id: Identifier(required=True)
    admin_id: Identifier(required=True)
    decision: String(choices=ListingDecision, required=True)
    notes: String(max_length=500)


@marketplace.command_handler(part_of=Product)
class ModerateListingHandler:
    @handle(ModerateListing)
    def moderate_listing(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)

        if command.decision == ListingDecision.APPROVE.value:
            product.approve(command.admin_id, notes=command.notes)
        else:
            product.reject(command.admin_id, reason=command.notes)

        repo.add(product)

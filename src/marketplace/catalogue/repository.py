"""Repository for the Product aggregate."""

from protean import Q
from protean.exceptions import ObjectNotFoundError

from marketplace.catalogue.product import Product
from marketplace.domain import marketplace
from marketplace.errors import ProductNotFound, ProductUnavailable


@marketplace.repository(part_of=Product)
class ProductRepository:
    def get_orderable(self, product_id) -> Product:
        """Load a product that can currently be ordered.

        A missing product is reported the same way as an inactive, unapproved
        or unavailable one.
        """
        try:
            product = self.get(product_id)
        except ObjectNotFoundError:
            raise ProductUnavailable({"product_id": [f"Product {product_id} is not available"]})

        if not product.is_orderable:
            raise ProductUnavailable({"product_id": [f"Product {product_id} is not available"]})
        return product

    def get_published(self, product_id) -> Product:
        """Load an active, approved product. Availability does not matter."""
        try:
            product = self.get(product_id)
        except ObjectNotFoundError:
            raise ProductNotFound({"product_id": [f"Product {product_id} not found"]})

        if not (product.is_active and product.is_approved):
            raise ProductNotFound({"product_id": [f"Product {product_id} not found"]})
        return product

    def browse(self, filters=None, search=None, order_by="-created_at", offset=0, limit=12):
        """Orderable products matching ``filters``.

        ``search`` matches name or description, case-insensitively.
        """
        criteria = {"is_active": True, "is_approved": True, "is_available": True, **(filters or {})}
        query = self._dao.query
        if search:
            query = query.filter(Q(name__icontains=search) | Q(description__icontains=search))
        return query.filter(**criteria).order_by(order_by).offset(offset).limit(limit).all()

    def page_for_farmer(self, farmer_id, offset=0, limit=12):
        """The farmer's active, approved listings, newest first."""
        return (
            self._dao.query.filter(farmer_id=str(farmer_id), is_active=True, is_approved=True)
            .order_by("-created_at")
            .offset(offset)
            .limit(limit)
            .all()
        )

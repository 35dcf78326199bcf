"""Catalogue operations.

Each mutation of an existing product runs under that product's lock so it
serializes with order placement and rating recomputation on the same record.
Browsing reads without locks.
"""

import json
from dataclasses import dataclass

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from marketplace.catalogue.listing import ListProduct
from marketplace.catalogue.moderation import ModerateListing
from marketplace.catalogue.pricing import DeactivateListing, SetAvailability, UpdateProductPrice
from marketplace.catalogue.product import Product, ProductCategory
from marketplace.catalogue.stock import AdjustStock
from marketplace.config import max_product_page_size, product_page_size
from marketplace.shared.paging import page_count, page_window
from marketplace.utils.locks import locks, product_key
from marketplace.utils.retry import retry_on_conflict

logger = structlog.get_logger(__name__)

SORTABLE_FIELDS = ("created_at", "price", "name")


@dataclass(frozen=True)
class ProductPagination:
    current_page: int
    total_pages: int
    total_products: int

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.current_page > 1


def _load(product_id) -> Product:
    return current_domain.repository_for(Product).get(product_id)


def _locked(product_id, command, label) -> Product:
    def attempt():
        with locks.hold([product_key(product_id)]):
            current_domain.process(command, asynchronous=False)
            return _load(product_id)

    return retry_on_conflict(attempt, label=label)


def list_product(
    farmer_id,
    name,
    description,
    category,
    subcategory,
    unit,
    price,
    quantity,
    location=None,
) -> Product:
    product_id = current_domain.process(
        ListProduct(
            farmer_id=farmer_id,
            name=name,
            description=description,
            category=category,
            subcategory=subcategory,
            unit=unit,
            price=price,
            quantity=quantity,
            location=json.dumps(location) if location else None,
        ),
        asynchronous=False,
    )
    logger.info("Product listed", product_id=product_id, farmer_id=str(farmer_id))
    return _load(product_id)


def moderate_listing(product_id, admin_id, decision, notes=None) -> Product:
    product = _locked(
        product_id,
        ModerateListing(product_id=product_id, admin_id=admin_id, decision=decision, notes=notes),
        "moderate_listing",
    )
    logger.info("Listing moderated", product_id=str(product_id), admin_id=str(admin_id), decision=decision)
    return product


def update_product_price(product_id, farmer_id, price) -> Product:
    product = _locked(
        product_id,
        UpdateProductPrice(product_id=product_id, farmer_id=farmer_id, price=price),
        "update_product_price",
    )
    logger.info("Product price updated", product_id=str(product_id), price=product.price)
    return product


def adjust_stock(product_id, farmer_id, delta) -> Product:
    product = _locked(
        product_id,
        AdjustStock(product_id=product_id, farmer_id=farmer_id, delta=delta),
        "adjust_stock",
    )
    logger.info("Stock adjusted", product_id=str(product_id), delta=delta, quantity=product.quantity)
    return product


def set_availability(product_id, farmer_id, is_available) -> Product:
    product = _locked(
        product_id,
        SetAvailability(product_id=product_id, farmer_id=farmer_id, is_available=is_available),
        "set_availability",
    )
    logger.info("Product availability changed", product_id=str(product_id), is_available=is_available)
    return product


def deactivate_listing(product_id, farmer_id) -> Product:
    product = _locked(
        product_id,
        DeactivateListing(product_id=product_id, farmer_id=farmer_id),
        "deactivate_listing",
    )
    logger.info("Listing deactivated", product_id=str(product_id), farmer_id=str(farmer_id))
    return product


def get_product(product_id) -> Product:
    """An active, approved product, whether or not it is currently for sale."""
    return current_domain.repository_for(Product).get_published(product_id)


def _sort_key(sort: str) -> str:
    if sort.lstrip("-") not in SORTABLE_FIELDS:
        raise ValidationError({"sort": [f"Cannot sort by {sort}"]})
    return sort


def browse_products(
    category=None,
    county=None,
    sub_county=None,
    min_price=None,
    max_price=None,
    search=None,
    sort="-created_at",
    page=1,
    limit=None,
):
    """Products a buyer can order right now.

    County and sub-county match case-insensitively on a substring. Returns
    ``(products, ProductPagination)``.
    """
    filters = {}
    if category:
        try:
            filters["category"] = ProductCategory(category).value
        except ValueError:
            raise ValidationError({"category": [f"Unknown category {category}"]})
    if county:
        filters["location_county__icontains"] = county
    if sub_county:
        filters["location_sub_county__icontains"] = sub_county
    for name, bound, lookup in (("min_price", min_price, "gte"), ("max_price", max_price, "lte")):
        if bound is None:
            continue
        if bound < 0:
            raise ValidationError({name: ["Price bounds cannot be negative"]})
        filters[f"price__{lookup}"] = bound

    order_by = _sort_key(sort)
    page, limit, offset = page_window(page, limit, product_page_size(), max_product_page_size())
    results = current_domain.repository_for(Product).browse(
        filters, search=search, order_by=order_by, offset=offset, limit=limit
    )
    pagination = ProductPagination(
        current_page=page,
        total_pages=page_count(results.total, limit),
        total_products=results.total,
    )
    return list(results.items), pagination


def list_farmer_products(farmer_id, page=1, limit=None):
    """A farmer's active, approved listings, newest first.

    Returns ``(products, ProductPagination)``.
    """
    page, limit, offset = page_window(page, limit, product_page_size(), max_product_page_size())
    results = current_domain.repository_for(Product).page_for_farmer(farmer_id, offset=offset, limit=limit)
    pagination = ProductPagination(
        current_page=page,
        total_pages=page_count(results.total, limit),
        total_products=results.total,
    )
    return list(results.items), pagination

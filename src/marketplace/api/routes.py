"""FastAPI routes for the marketplace: products, orders and reviews."""

from fastapi import APIRouter, Query

from marketplace.api.schemas import (
    AdjustStockRequest,
    CreateOrderRequest,
    LineItemResponse,
    ListProductRequest,
    LocationSchema,
    ModerateListingRequest,
    OrderListResponse,
    OrderResponse,
    PaginationResponse,
    ProductDetailResponse,
    ProductListResponse,
    ProductPaginationResponse,
    ProductResponse,
    RatingSchema,
    ReviewResponse,
    SetAvailabilityRequest,
    StatusResponse,
    SubmitReviewRequest,
    UpdateOrderStatusRequest,
    UpdatePaymentStatusRequest,
    UpdatePriceRequest,
)
from marketplace.catalogue import service as catalogue
from marketplace.ordering import service as ordering
from marketplace.reviews import service as reviews


def _product_response(product) -> ProductResponse:
    location = product.location
    return ProductResponse(
        id=str(product.id),
        farmer_id=str(product.farmer_id),
        name=product.name,
        description=product.description,
        category=product.category,
        subcategory=product.subcategory,
        unit=product.unit,
        price=product.price,
        quantity=product.quantity,
        location=(
            LocationSchema(county=location.county, sub_county=location.sub_county, ward=location.ward)
            if location
            else None
        ),
        is_available=product.is_available,
        is_approved=product.is_approved,
        is_active=product.is_active,
        rating=RatingSchema(average=product.rating.average, count=product.rating.count),
    )


def _product_list_response(products, pagination) -> ProductListResponse:
    return ProductListResponse(
        products=[_product_response(product) for product in products],
        pagination=ProductPaginationResponse(
            current_page=pagination.current_page,
            total_pages=pagination.total_pages,
            total_products=pagination.total_products,
            has_next=pagination.has_next,
            has_prev=pagination.has_prev,
        ),
    )


def _order_response(order) -> OrderResponse:
    return OrderResponse(
        id=str(order.id),
        order_number=order.order_number,
        buyer_id=str(order.buyer_id),
        items=[
            LineItemResponse(
                product_id=str(item.product_id),
                farmer_id=str(item.farmer_id),
                quantity=item.quantity,
                price=item.price,
            )
            for item in order.items
        ],
        total_amount=order.total_amount,
        status=order.status,
        payment_status=order.payment_status,
        payment_method=order.payment_method,
        delivery_notes=order.delivery_notes,
        farmer_notes=order.farmer_notes,
        delivered_at=order.delivered_at,
    )


def _review_response(review) -> ReviewResponse:
    return ReviewResponse(
        id=str(review.id),
        product_id=str(review.product_id),
        buyer_id=str(review.buyer_id),
        order_id=str(review.order_id),
        rating=review.rating,
        comment=review.comment,
        is_verified=review.is_verified,
        is_active=review.is_active,
    )


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.post("", status_code=201, response_model=ProductResponse)
def list_product(body: ListProductRequest) -> ProductResponse:
    product = catalogue.list_product(
        farmer_id=body.farmer_id,
        name=body.name,
        description=body.description,
        category=body.category,
        subcategory=body.subcategory,
        unit=body.unit,
        price=body.price,
        quantity=body.quantity,
        location=body.location.model_dump() if body.location else None,
    )
    return _product_response(product)


@product_router.get("", response_model=ProductListResponse)
def browse_products(
    category: str | None = None,
    county: str | None = None,
    sub_county: str | None = None,
    min_price: float | None = Query(None, ge=0),
    max_price: float | None = Query(None, ge=0),
    search: str | None = None,
    sort: str = "-created_at",
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
) -> ProductListResponse:
    products, pagination = catalogue.browse_products(
        category=category,
        county=county,
        sub_county=sub_county,
        min_price=min_price,
        max_price=max_price,
        search=search,
        sort=sort,
        page=page,
        limit=limit,
    )
    return _product_list_response(products, pagination)


@product_router.get("/farmer/{farmer_id}", response_model=ProductListResponse)
def list_farmer_products(
    farmer_id: str,
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
) -> ProductListResponse:
    products, pagination = catalogue.list_farmer_products(farmer_id, page=page, limit=limit)
    return _product_list_response(products, pagination)


@product_router.get("/{product_id}", response_model=ProductDetailResponse)
def get_product(product_id: str) -> ProductDetailResponse:
    product = catalogue.get_product(product_id)
    return ProductDetailResponse(
        product=_product_response(product),
        reviews=[_review_response(review) for review in reviews.reviews_for_product(product_id)],
    )


@product_router.delete("/{product_id}", response_model=StatusResponse)
def deactivate_listing(product_id: str, farmer_id: str) -> StatusResponse:
    catalogue.deactivate_listing(product_id, farmer_id)
    return StatusResponse()


@product_router.put("/{product_id}/moderation", response_model=ProductResponse)
def moderate_listing(product_id: str, body: ModerateListingRequest) -> ProductResponse:
    product = catalogue.moderate_listing(product_id, body.admin_id, body.decision, notes=body.notes)
    return _product_response(product)


@product_router.put("/{product_id}/price", response_model=ProductResponse)
def update_price(product_id: str, body: UpdatePriceRequest) -> ProductResponse:
    return _product_response(catalogue.update_product_price(product_id, body.farmer_id, body.price))


@product_router.post("/{product_id}/stock", response_model=ProductResponse)
def adjust_stock(product_id: str, body: AdjustStockRequest) -> ProductResponse:
    return _product_response(catalogue.adjust_stock(product_id, body.farmer_id, body.delta))


@product_router.put("/{product_id}/availability", response_model=ProductResponse)
def set_availability(product_id: str, body: SetAvailabilityRequest) -> ProductResponse:
    return _product_response(catalogue.set_availability(product_id, body.farmer_id, body.is_available))


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderResponse)
def create_order(body: CreateOrderRequest) -> OrderResponse:
    order = ordering.create_order(
        buyer_id=body.buyer_id,
        items=[item.model_dump() for item in body.items],
        payment_method=body.payment_method,
        shipping_address=body.shipping_address.model_dump(exclude_none=True),
        delivery_notes=body.delivery_notes,
    )
    return _order_response(order)


@order_router.get("", response_model=OrderListResponse)
def list_orders(
    owner_id: str,
    role: str = "buyer",
    status: str | None = None,
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
) -> OrderListResponse:
    orders, pagination = ordering.list_orders(owner_id, role, status=status, page=page, limit=limit)
    return OrderListResponse(
        orders=[_order_response(order) for order in orders],
        pagination=PaginationResponse(
            current_page=pagination.current_page,
            total_pages=pagination.total_pages,
            total_orders=pagination.total_orders,
        ),
    )


@order_router.get("/{order_id}", response_model=OrderResponse)
def get_order(order_id: str, actor_id: str) -> OrderResponse:
    return _order_response(ordering.get_order(order_id, actor_id))


@order_router.put("/{order_id}/status", response_model=OrderResponse)
def update_order_status(order_id: str, body: UpdateOrderStatusRequest) -> OrderResponse:
    order = ordering.update_order_status(order_id, body.actor_id, body.status, notes=body.notes)
    return _order_response(order)


@order_router.put("/{order_id}/payment", response_model=OrderResponse)
def update_payment_status(order_id: str, body: UpdatePaymentStatusRequest) -> OrderResponse:
    order = ordering.set_payment_status(order_id, body.buyer_id, body.payment_status, reference=body.reference)
    return _order_response(order)


# ---------------------------------------------------------------------------
# Review Router
# ---------------------------------------------------------------------------
review_router = APIRouter(prefix="/reviews", tags=["reviews"])


@review_router.post("", status_code=201, response_model=ReviewResponse)
def submit_review(body: SubmitReviewRequest) -> ReviewResponse:
    review = reviews.submit_review(
        buyer_id=body.buyer_id,
        product_id=body.product_id,
        order_id=body.order_id,
        rating=body.rating,
        comment=body.comment,
    )
    return _review_response(review)


@review_router.delete("/{review_id}", response_model=StatusResponse)
def remove_review(review_id: str) -> StatusResponse:
    reviews.remove_review(review_id)
    return StatusResponse()

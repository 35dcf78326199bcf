"""Pydantic request/response schemas for the marketplace API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

# --- Product ---


class LocationSchema(BaseModel):
    county: str | None = Field(None, max_length=100)
    sub_county: str | None = Field(None, max_length=100)
    ward: str | None = Field(None, max_length=100)


class ListProductRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "farmer_id": "farmer-001",
                    "name": "Sukuma Wiki",
                    "description": "Fresh collard greens harvested this morning.",
                    "category": "vegetables",
                    "subcategory": "leafy greens",
                    "unit": "bunch",
                    "price": 30.0,
                    "quantity": 120,
                    "location": {"county": "Kiambu", "sub_county": "Limuru", "ward": "Ndeiya"},
                }
            ]
        }
    }

    farmer_id: str
    name: str = Field(..., max_length=100)
    description: str = Field(..., max_length=1000)
    category: str
    subcategory: str = Field(..., max_length=50)
    unit: str
    price: float = Field(..., ge=0)
    quantity: int = Field(..., ge=0)
    location: LocationSchema | None = None


class ModerateListingRequest(BaseModel):
    admin_id: str
    decision: str
    notes: str | None = Field(None, max_length=500)


class UpdatePriceRequest(BaseModel):
    farmer_id: str
    price: float


class AdjustStockRequest(BaseModel):
    farmer_id: str
    delta: int


class SetAvailabilityRequest(BaseModel):
    farmer_id: str
    is_available: bool


class RatingSchema(BaseModel):
    average: float
    count: int


class ProductResponse(BaseModel):
    id: str
    farmer_id: str
    name: str
    description: str
    category: str
    subcategory: str
    unit: str
    price: float
    quantity: int
    location: LocationSchema | None = None
    is_available: bool
    is_approved: bool
    is_active: bool
    rating: RatingSchema


class ProductPaginationResponse(BaseModel):
    current_page: int
    total_pages: int
    total_products: int
    has_next: bool
    has_prev: bool


class ProductListResponse(BaseModel):
    products: list[ProductResponse]
    pagination: ProductPaginationResponse


# --- Order ---


class OrderItemRequest(BaseModel):
    product_id: str
    quantity: int


class ShippingAddressSchema(BaseModel):
    county: str
    sub_county: str
    ward: str
    specific_location: str
    contact_phone: str
    additional_notes: str | None = None


class CreateOrderRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "buyer_id": "buyer-001",
                    "items": [{"product_id": "prod-001", "quantity": 3}],
                    "payment_method": "mpesa",
                    "shipping_address": {
                        "county": "Nairobi",
                        "sub_county": "Westlands",
                        "ward": "Parklands",
                        "specific_location": "3rd Parklands Ave",
                        "contact_phone": "0712345678",
                    },
                }
            ]
        }
    }

    buyer_id: str
    items: list[OrderItemRequest]
    payment_method: str
    shipping_address: ShippingAddressSchema
    delivery_notes: str | None = Field(None, max_length=500)


class UpdateOrderStatusRequest(BaseModel):
    actor_id: str
    status: str
    notes: str | None = Field(None, max_length=500)


class UpdatePaymentStatusRequest(BaseModel):
    buyer_id: str
    payment_status: str
    reference: str | None = None


class LineItemResponse(BaseModel):
    product_id: str
    farmer_id: str
    quantity: int
    price: float


class OrderResponse(BaseModel):
    id: str
    order_number: str
    buyer_id: str
    items: list[LineItemResponse]
    total_amount: float
    status: str
    payment_status: str
    payment_method: str
    delivery_notes: str | None = None
    farmer_notes: str | None = None
    delivered_at: datetime | None = None


class PaginationResponse(BaseModel):
    current_page: int
    total_pages: int
    total_orders: int


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]
    pagination: PaginationResponse


# --- Review ---


class SubmitReviewRequest(BaseModel):
    buyer_id: str
    product_id: str
    order_id: str
    rating: int = Field(..., ge=1, le=5)
    comment: str | None = Field(None, max_length=500)


class ReviewResponse(BaseModel):
    id: str
    product_id: str
    buyer_id: str
    order_id: str
    rating: int
    comment: str | None = None
    is_verified: bool
    is_active: bool


class StatusResponse(BaseModel):
    status: str = "ok"


class ProductDetailResponse(BaseModel):
    product: ProductResponse
    reviews: list[ReviewResponse]

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.constants import OrderStatus


class OrderItemCreate(BaseModel):
    product_id: str = Field(..., min_length=1, max_length=36)
    quantity: int = Field(..., description="Units ordered, 1..1000")


class CustomerInfo(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = Field(None, max_length=500)

    @field_validator("email")
    def validate_email(cls, v):
        local, _, domain = v.partition("@")
        if not local or "." not in domain:
            raise ValueError("Invalid email format")
        return v.lower()


class OrderCreate(BaseModel):
    customer_id: str = Field(..., min_length=1, max_length=64)
    customer_info: CustomerInfo
    # count and quantity bounds are checked by OrderCreateValidator so every violation is reported together
    items: List[OrderItemCreate]
    promotion_id: Optional[str] = Field(None, max_length=36)
    notes: Optional[str] = Field(None, max_length=1000)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class AppliedPromotion(BaseModel):
    promotion_id: str
    promotion_name: str
    inferred_type: str
    discount_amount: float


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    product_id: str
    product_name: str
    product_sku: str
    unit_price: float
    quantity: int
    discount: float
    total: float
    applied_promotions: List[AppliedPromotion] = []


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    customer_id: str
    customer_name: str
    customer_email: str
    customer_phone: Optional[str] = None
    customer_address: Optional[str] = None
    promotion_id: Optional[str] = None
    status: OrderStatus
    currency: str
    subtotal: float
    discount: float
    total: float
    notes: Optional[str] = None
    items: List[OrderItemResponse] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class OrderListResponse(BaseModel):
    orders: List[OrderResponse]
    page: int
    page_size: int
    total_count: int
    total_pages: int


class OrderStats(BaseModel):
    total_orders: int
    total_revenue: float
    average_order_value: float
    todays_orders: int
    todays_revenue: float

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.core.constants import PromotionType
from app.utils.datetime_helpers import ensure_utc


def _check_dates(starts_at: Optional[datetime], ends_at: Optional[datetime]):
    # naive values are read as UTC
    if starts_at and ends_at and ensure_utc(starts_at) >= ensure_utc(ends_at):
        raise ValueError("start_date must be before end_date")


class SlabCreate(BaseModel):
    """Weight tier: [min_weight, max_weight] grams -> discount per unit. No max_weight = unbounded."""
    min_weight: int = Field(0, ge=0)
    max_weight: Optional[int] = Field(None, gt=0)
    discount_per_unit: Decimal = Field(..., gt=0, decimal_places=2)

    # validator reads slabs through the stored column names
    @property
    def range_start(self) -> int:
        return self.min_weight

    @property
    def range_end(self) -> Optional[int]:
        return self.max_weight


class PromotionCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    type: PromotionType
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_enabled: bool = True
    priority: int = Field(0, ge=0)
    slabs: Optional[List[SlabCreate]] = None
    percentage_value: Optional[Decimal] = Field(None, gt=0, le=100)
    fixed_value: Optional[Decimal] = Field(None, gt=0)

    @model_validator(mode="after")
    def validate_type_requirements(self):
        _check_dates(self.start_date, self.end_date)
        if self.type == PromotionType.WEIGHTED and not self.slabs:
            raise ValueError("slabs are required for WEIGHTED promotions")
        if self.type == PromotionType.PERCENTAGE and self.percentage_value is None:
            raise ValueError("percentage_value is required for PERCENTAGE promotions")
        if self.type == PromotionType.FIXED and self.fixed_value is None:
            raise ValueError("fixed_value is required for FIXED promotions")
        if self.type in (PromotionType.PERCENTAGE, PromotionType.FIXED) and self.slabs:
            raise ValueError("slabs are not allowed for PERCENTAGE or FIXED promotions")
        return self


class PromotionUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    priority: Optional[int] = Field(None, ge=0)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @model_validator(mode="after")
    def validate_update(self):
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        _check_dates(self.start_date, self.end_date)
        return self


class PromotionToggle(BaseModel):
    is_enabled: bool


class SlabsReplace(BaseModel):
    slabs: List[SlabCreate] = Field(..., min_length=1)


class DiscountCalculateRequest(BaseModel):
    product_id: str = Field(..., min_length=1, max_length=36)
    quantity: int = Field(..., gt=0)


class DiscountCalculateResponse(BaseModel):
    promotion_id: str
    product_id: str
    quantity: int
    promotion_type: Optional[PromotionType] = None
    discount: float
    applied: bool
    reason: Optional[str] = None


class SlabResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    range_start: float
    range_end: Optional[float] = None
    rule_kind: str
    rule_value: float
    is_active: bool


class PromotionResponse(BaseModel):
    id: str
    name: str
    type: PromotionType
    type_tag: Optional[str] = None
    priority: int
    is_active: bool
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    slabs: List[SlabResponse] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

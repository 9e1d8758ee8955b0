from datetime import datetime
from decimal import Decimal
from typing import Optional
import re

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.core.constants import Money

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def _validate_slug(value: Optional[str]) -> Optional[str]:
    if value is not None and not SLUG_PATTERN.match(value):
        raise ValueError("slug must contain lowercase letters, digits and single hyphens")
    return value


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=1, max_length=255)
    sku: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=5000)
    unit_price: Decimal = Field(..., ge=0, le=Money.MAX_PRICE, decimal_places=2)
    currency: str = Field("BDT", min_length=3, max_length=3)
    weight_grams: int = Field(0, ge=0, description="Unit weight in grams")
    is_active: bool = True

    @field_validator("slug")
    def validate_slug(cls, v):
        return _validate_slug(v)

    @field_validator("currency")
    def validate_currency(cls, v):
        return v.upper()


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = Field(None, min_length=1, max_length=255)
    sku: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=5000)
    unit_price: Optional[Decimal] = Field(None, ge=0, le=Money.MAX_PRICE, decimal_places=2)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    weight_grams: Optional[int] = Field(None, ge=0)

    @field_validator("slug")
    def validate_slug(cls, v):
        return _validate_slug(v)

    @field_validator("currency")
    def validate_currency(cls, v):
        return v.upper() if v else v

    @model_validator(mode="after")
    def reject_nulls(self):
        # only description may be cleared
        cleared = sorted(name for name in self.model_fields_set if name != "description" and getattr(self, name) is None)
        if cleared:
            raise ValueError(f"{', '.join(cleared)} cannot be null")
        return self


class ProductToggle(BaseModel):
    is_active: bool


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    slug: str
    sku: str
    description: Optional[str] = None
    unit_price: float
    currency: str
    weight_grams: int
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

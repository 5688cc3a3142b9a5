"""
marketplace/schemas/content.py

Purpose: Banner and homepage section schemas
"""

from datetime import datetime, timezone
from typing import List, Optional, Literal

from pydantic import Field, field_validator

from marketplace.schemas.common import CamelModel

BannerAudience = Literal["all", "new_users", "returning_users", "premium_users"]
BannerCategory = Literal["electronics", "fashion", "home", "beauty", "sports", "books", "general"]
SectionType = Literal["category", "featured", "custom", "banner"]


def naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Stored dates are naive UTC; offsets are converted, not dropped."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class BannerCreateRequest(CamelModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=200)
    image_url: str = Field(..., min_length=1)
    button_text: Optional[str] = None
    button_link: Optional[str] = None
    is_active: Optional[bool] = None
    order: Optional[int] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    target_audience: Optional[BannerAudience] = None
    category: Optional[BannerCategory] = None
    priority: Optional[int] = Field(None, ge=1, le=10)

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, v):
        return naive_utc(v)


class BannerUpdateRequest(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=200)
    image_url: Optional[str] = None
    button_text: Optional[str] = None
    button_link: Optional[str] = None
    is_active: Optional[bool] = None
    order: Optional[int] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    target_audience: Optional[BannerAudience] = None
    category: Optional[BannerCategory] = None
    priority: Optional[int] = Field(None, ge=1, le=10)

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, v):
        return naive_utc(v)


class BannerOrder(CamelModel):
    id: str
    order: int


class BannerReorderRequest(CamelModel):
    banner_orders: List[BannerOrder]


class SectionCreateRequest(CamelModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    type: SectionType
    category: Optional[str] = None
    products: List[str] = []
    max_products: int = Field(6, ge=1, le=20)
    is_visible: bool = True
    order: int = 0
    banner_image: Optional[str] = None
    banner_link: Optional[str] = None
    banner_text: Optional[str] = None


class SectionUpdateRequest(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    type: Optional[SectionType] = None
    category: Optional[str] = None
    products: Optional[List[str]] = None
    max_products: Optional[int] = Field(None, ge=1, le=20)
    is_visible: Optional[bool] = None
    order: Optional[int] = None
    banner_image: Optional[str] = None
    banner_link: Optional[str] = None
    banner_text: Optional[str] = None


class SectionProductRequest(CamelModel):
    product_id: str


class SectionProductsReorderRequest(CamelModel):
    product_ids: List[str]


class SectionOrder(CamelModel):
    section_id: str
    order: int


class SectionReorderRequest(CamelModel):
    section_orders: List[SectionOrder]

"""
marketplace/schemas/product.py

Purpose: Product create/update schemas

- Shared by vendor, admin and seller product endpoints
- Accepts JSON bodies or multipart forms (see api/forms.py)
"""

from typing import Any, Dict, List, Optional, Literal

from pydantic import Field

from marketplace.schemas.common import CamelModel


class ImageInput(CamelModel):
    url: str
    public_id: Optional[str] = None
    alt: Optional[str] = None
    is_primary: bool = False


class InventoryInput(CamelModel):
    track_quantity: Optional[bool] = None
    quantity: Optional[int] = Field(None, ge=0)
    low_stock_threshold: Optional[int] = Field(None, ge=0)
    allow_backorder: Optional[bool] = None


class DeliveryOptionsInput(CamelModel):
    instant: Optional[bool] = None
    next_day: Optional[bool] = None
    standard: Optional[bool] = None


class SpecificationInput(CamelModel):
    name: str
    value: str


ProductStatus = Literal["draft", "active", "inactive", "archived"]


class ProductCreateRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=2000)
    short_description: Optional[str] = Field(None, max_length=200)
    price: float = Field(..., ge=0)
    compare_price: Optional[float] = Field(None, ge=0)
    cost_price: Optional[float] = Field(None, ge=0)
    sku: Optional[str] = None
    barcode: Optional[str] = None
    category: str = Field(..., min_length=1)
    subcategory: Optional[str] = None
    brand: Optional[str] = None
    tags: List[str] = []
    images: List[ImageInput] = []
    inventory: Optional[InventoryInput] = None
    shipping: Optional[Dict[str, Any]] = None
    seo: Optional[Dict[str, Any]] = None
    specifications: List[SpecificationInput] = []
    variants: List[Dict[str, Any]] = []
    status: ProductStatus = "draft"
    featured: bool = False
    delivery_options: Optional[DeliveryOptionsInput] = None


class ProductUpdateRequest(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=2000)
    short_description: Optional[str] = Field(None, max_length=200)
    price: Optional[float] = Field(None, ge=0)
    compare_price: Optional[float] = Field(None, ge=0)
    cost_price: Optional[float] = Field(None, ge=0)
    sku: Optional[str] = None
    barcode: Optional[str] = None
    category: Optional[str] = Field(None, min_length=1)
    subcategory: Optional[str] = None
    brand: Optional[str] = None
    tags: Optional[List[str]] = None
    images: Optional[List[ImageInput]] = None
    inventory: Optional[InventoryInput] = None
    shipping: Optional[Dict[str, Any]] = None
    seo: Optional[Dict[str, Any]] = None
    specifications: Optional[List[SpecificationInput]] = None
    variants: Optional[List[Dict[str, Any]]] = None
    status: Optional[ProductStatus] = None
    featured: Optional[bool] = None
    delivery_options: Optional[DeliveryOptionsInput] = None

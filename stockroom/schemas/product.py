"""
Pydantic schemas for Product model.
"""
from typing import Literal, Optional
from datetime import datetime
import uuid
from pydantic import BaseModel, Field, ConfigDict, field_validator

from stockroom.models.product import MAX_STOCK_LEVEL


class ProductBase(BaseModel):
    """Base product schema."""
    name: str = Field(..., min_length=2, max_length=100)
    description: Optional[str] = None
    unit: str = Field(..., min_length=1, max_length=20)
    category_id: Optional[uuid.UUID] = None
    supplier_id: Optional[uuid.UUID] = None


class ProductCreate(ProductBase):
    """Schema for creating a product."""
    stock: int = Field(default=0, ge=0, le=MAX_STOCK_LEVEL)


class ProductUpdate(BaseModel):
    """
    Schema for updating a product.

    Stock is not accepted here; it only changes through stock transactions.
    """
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = None
    unit: Optional[str] = Field(None, min_length=1, max_length=20)
    category_id: Optional[uuid.UUID] = None
    supplier_id: Optional[uuid.UUID] = None
    status: Optional[Literal["active", "discontinued"]] = None

    @field_validator("name", "unit")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class ProductResponse(ProductBase):
    """Schema for product response."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    unique_code: str
    stock: int
    status: str
    created_at: datetime
    updated_at: datetime


class ProductListResponse(BaseModel):
    """Paginated product list response."""
    items: list[ProductResponse]
    total: int
    page: int
    page_size: int
    pages: int

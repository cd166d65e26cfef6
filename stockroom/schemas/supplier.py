"""
Pydantic schemas for Supplier model.
"""
from typing import Literal, Optional
from datetime import datetime
import uuid
from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator


class SupplierBase(BaseModel):
    """Base supplier schema."""
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    contact_person: Optional[str] = Field(None, max_length=100)
    status: Literal["active", "inactive"] = "active"


class SupplierCreate(SupplierBase):
    """Schema for creating a supplier."""


class SupplierUpdate(BaseModel):
    """Schema for updating a supplier."""
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    contact_person: Optional[str] = Field(None, max_length=100)
    status: Optional[Literal["active", "inactive"]] = None

    @field_validator("name", "email", "status")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class SupplierResponse(SupplierBase):
    """Schema for supplier response."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime
    updated_at: datetime

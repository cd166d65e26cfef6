"""
Pydantic schemas for StockTransaction model.
"""
from typing import Optional
from datetime import datetime
import uuid
from pydantic import BaseModel, Field, ConfigDict
from enum import Enum

from stockroom.models.product import MAX_STOCK_LEVEL


class TransactionType(str, Enum):
    """Stock transaction types."""
    IN = "in"                  # goods received
    OUT = "out"                # sale or issue
    ADJUSTMENT = "adjustment"  # correction, always an increase
    RETURN = "return"          # customer or supplier return


class StockTransactionBase(BaseModel):
    """Base stock transaction schema."""
    transaction_type: TransactionType
    quantity: int = Field(
        ..., ge=1, le=MAX_STOCK_LEVEL, description="Number of units moved; direction follows the type"
    )
    reference_number: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None


class StockTransactionCreate(StockTransactionBase):
    """Schema for creating a stock transaction."""
    product_id: uuid.UUID


class ProductBrief(BaseModel):
    """Product fields embedded in a transaction."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    unit: str
    stock: int


class OwnerBrief(BaseModel):
    """Owner fields embedded in a transaction."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str


class StockTransactionResponse(StockTransactionBase):
    """Schema for stock transaction response."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    product_id: uuid.UUID
    previous_stock: int
    new_stock: int
    created_at: datetime


class StockTransactionWithProduct(StockTransactionResponse):
    """Stock transaction with product and owner details."""
    product: ProductBrief
    owner: OwnerBrief


class StockTransactionListResponse(BaseModel):
    """Paginated stock transaction list."""
    items: list[StockTransactionWithProduct]
    total: int
    page: int
    page_size: int
    pages: int


class StockSummary(BaseModel):
    """Ledger totals for one owner."""
    total_transactions: int
    total_stock_in: int
    total_stock_out: int
    total_adjustments: int

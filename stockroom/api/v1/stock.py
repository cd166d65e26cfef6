"""
Stock Management API endpoints for recording and reviewing inventory movements.
"""
from typing import Optional
from datetime import datetime
import uuid
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.ext.asyncio import AsyncSession

from stockroom.core.database import get_db
from stockroom.core.security import get_current_user
from stockroom.models.user import User
from stockroom.schemas.stock import (
    TransactionType,
    StockTransactionCreate,
    StockTransactionWithProduct,
    StockTransactionListResponse,
    StockSummary
)
from stockroom.services.ledger import StockLedger

router = APIRouter(prefix="/stock", tags=["Stock Management"])


def get_ledger(db: AsyncSession = Depends(get_db)) -> StockLedger:
    return StockLedger(db)


@router.post(
    "/transactions",
    response_model=StockTransactionWithProduct,
    status_code=status.HTTP_201_CREATED
)
async def create_stock_transaction(
    transaction_data: StockTransactionCreate,
    current_user: User = Depends(get_current_user),
    ledger: StockLedger = Depends(get_ledger)
):
    """
    Record a stock movement.

    - **product_id**: Product UUID
    - **transaction_type**: 'in', 'out', 'adjustment' or 'return'
    - **quantity**: Units moved (at least 1); 'out' subtracts, every other type adds
    - **reference_number**: Optional PO or invoice number
    """
    return await ledger.record_transaction(
        product_id=transaction_data.product_id,
        owner_id=current_user.id,
        transaction_type=transaction_data.transaction_type,
        quantity=transaction_data.quantity,
        reference_number=transaction_data.reference_number,
        notes=transaction_data.notes
    )


@router.get("/transactions", response_model=StockTransactionListResponse)
async def list_transactions(
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=100),
    product_id: Optional[uuid.UUID] = None,
    transaction_type: Optional[TransactionType] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    current_user: User = Depends(get_current_user),
    ledger: StockLedger = Depends(get_ledger)
):
    """
    List stock transactions, most recent first.

    - **product_id**: Filter by product
    - **transaction_type**: Filter by type
    - **start_date**: Filter from date
    - **end_date**: Filter to date
    """
    items, total = await ledger.list_transactions(
        current_user.id,
        product_id=product_id,
        transaction_type=transaction_type,
        start_date=start_date,
        end_date=end_date,
        page=page,
        page_size=page_size
    )

    return StockTransactionListResponse(
        items=items,
        total=total,
        page=page,
        page_size=page_size,
        pages=(total + page_size - 1) // page_size
    )


@router.get("/transactions/{transaction_id}", response_model=StockTransactionWithProduct)
async def get_transaction(
    transaction_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    ledger: StockLedger = Depends(get_ledger)
):
    """Get a specific stock transaction."""
    return await ledger.get_transaction(transaction_id, current_user.id)


@router.get(
    "/products/{product_id}/transactions",
    response_model=list[StockTransactionWithProduct]
)
async def list_product_transactions(
    product_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    ledger: StockLedger = Depends(get_ledger)
):
    """Full movement history of one product, most recent first."""
    return await ledger.list_for_product(product_id, current_user.id)


@router.get("/summary", response_model=StockSummary)
async def get_stock_summary(
    current_user: User = Depends(get_current_user),
    ledger: StockLedger = Depends(get_ledger)
):
    """
    Ledger totals for the current user.

    Returns the transaction count, units received ('in'), units issued
    ('out') and the number of adjustments.
    """
    return await ledger.summarize(current_user.id)

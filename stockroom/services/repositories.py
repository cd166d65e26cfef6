"""
Data access for products and stock transactions.

Thin async wrappers around the session so the ledger reads as a sequence of
domain steps. Every query is scoped to the owning user.
"""
from typing import Optional, Sequence
from datetime import datetime
import uuid

from sqlalchemy import select, func, and_, case, desc
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from stockroom.models.product import Product
from stockroom.models.stock import StockTransaction


class ProductRepository:
    """Product lookups used by the ledger."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_for_owner(
        self,
        product_id: uuid.UUID,
        owner_id: uuid.UUID,
        lock: bool = False
    ) -> Optional[Product]:
        """
        Fetch a product owned by ``owner_id``.

        With ``lock=True`` the row is selected ``FOR UPDATE`` and any copy
        already in the identity map is overwritten with the locked values.
        """
        query = select(Product).where(
            and_(
                Product.id == product_id,
                Product.user_id == owner_id
            )
        )
        if lock:
            query = query.with_for_update().execution_options(populate_existing=True)

        result = await self.session.execute(query)
        return result.scalar_one_or_none()


class TransactionRepository:
    """Insert and query stock transactions. There is no update or delete."""

    def __init__(self, session: AsyncSession):
        self.session = session

    def add(self, transaction: StockTransaction) -> None:
        self.session.add(transaction)

    def _with_relations(self, query):
        return query.options(
            selectinload(StockTransaction.product),
            selectinload(StockTransaction.owner)
        )

    async def get(
        self,
        transaction_id: uuid.UUID,
        owner_id: uuid.UUID
    ) -> Optional[StockTransaction]:
        query = self._with_relations(
            select(StockTransaction).where(
                and_(
                    StockTransaction.id == transaction_id,
                    StockTransaction.user_id == owner_id
                )
            )
        ).execution_options(populate_existing=True)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_for_owner(
        self,
        owner_id: uuid.UUID,
        product_id: Optional[uuid.UUID] = None,
        transaction_type: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        offset: int = 0,
        limit: Optional[int] = None
    ) -> tuple[Sequence[StockTransaction], int]:
        """Return one page of transactions, newest first, and the total match count."""
        query = select(StockTransaction).where(StockTransaction.user_id == owner_id)

        if product_id:
            query = query.where(StockTransaction.product_id == product_id)

        if transaction_type:
            query = query.where(StockTransaction.transaction_type == transaction_type)

        if start_date:
            query = query.where(StockTransaction.created_at >= start_date)

        if end_date:
            query = query.where(StockTransaction.created_at <= end_date)

        # Get total count
        count_query = select(func.count()).select_from(query.subquery())
        total = (await self.session.execute(count_query)).scalar() or 0

        query = self._with_relations(query).order_by(
            desc(StockTransaction.created_at),
            desc(StockTransaction.id)
        )
        query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)

        result = await self.session.execute(query)
        return result.scalars().all(), total

    async def exists_for_product(self, product_id: uuid.UUID) -> bool:
        result = await self.session.execute(
            select(StockTransaction.id).where(StockTransaction.product_id == product_id).limit(1)
        )
        return result.first() is not None

    async def totals(self, owner_id: uuid.UUID) -> dict[str, int]:
        """Count and quantity sums per type for one owner, in a single scan."""
        kind = StockTransaction.transaction_type
        query = select(
            func.count(StockTransaction.id),
            func.sum(case((kind == "in", StockTransaction.quantity), else_=0)),
            func.sum(case((kind == "out", StockTransaction.quantity), else_=0)),
            func.sum(case((kind == "adjustment", 1), else_=0)),
        ).where(StockTransaction.user_id == owner_id)

        count, stock_in, stock_out, adjustments = (await self.session.execute(query)).one()

        # SUM over no rows is NULL
        return {
            "total_transactions": count or 0,
            "total_stock_in": stock_in or 0,
            "total_stock_out": stock_out or 0,
            "total_adjustments": adjustments or 0,
        }

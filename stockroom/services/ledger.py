"""
Stock ledger: the only code path that changes a product's stock.

Each accepted movement locks the product row, applies the transition for its
type, re-derives the product status and appends an immutable
``StockTransaction`` with the before/after snapshot. The product update and
the ledger insert are committed together or not at all.
"""
from typing import Optional, Sequence
from datetime import datetime
import uuid

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from stockroom.core.config import settings
from stockroom.error_handlers import (
    AppException,
    InsufficientStockError,
    LedgerValidationError,
    ProductNotFoundError,
    ResourceNotFoundError,
    translate_store_error,
)
from stockroom.logging_config import get_logger
from stockroom.models.product import MAX_STOCK_LEVEL
from stockroom.models.stock import StockTransaction
from stockroom.schemas.stock import StockSummary, TransactionType
from stockroom.services.repositories import ProductRepository, TransactionRepository

logger = get_logger("ledger")

INCREASING_TYPES = {TransactionType.IN, TransactionType.RETURN, TransactionType.ADJUSTMENT}


def parse_transaction_type(value) -> TransactionType:
    try:
        return TransactionType(value)
    except ValueError:
        raise LedgerValidationError(
            f"Invalid transaction type '{value}'. "
            f"Expected one of: {', '.join(t.value for t in TransactionType)}",
            field="transaction_type"
        ) from None


def validate_quantity(quantity) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise LedgerValidationError("Quantity must be an integer", field="quantity")
    if quantity < 1:
        raise LedgerValidationError("Quantity must be at least 1", field="quantity")
    if quantity > MAX_STOCK_LEVEL:
        raise LedgerValidationError(f"Quantity must be at most {MAX_STOCK_LEVEL}", field="quantity")
    return quantity


def compute_new_stock(
    previous_stock: int,
    transaction_type: TransactionType,
    quantity: int,
    product_id=None
) -> int:
    """
    Apply one movement to ``previous_stock``.

    ``in``, ``return`` and ``adjustment`` add ``quantity``; ``out`` subtracts
    it and fails when fewer units are available than requested. An increase
    past ``MAX_STOCK_LEVEL`` is rejected as invalid input.
    """
    if transaction_type in INCREASING_TYPES:
        new_stock = previous_stock + quantity
        if new_stock > MAX_STOCK_LEVEL:
            raise LedgerValidationError(
                f"Resulting stock {new_stock} exceeds the maximum of {MAX_STOCK_LEVEL}",
                field="quantity"
            )
        return new_stock

    if transaction_type == TransactionType.OUT:
        if quantity > previous_stock:
            raise InsufficientStockError(product_id, available=previous_stock, requested=quantity)
        return previous_stock - quantity

    raise LedgerValidationError(
        f"Invalid transaction type '{transaction_type}'",
        field="transaction_type"
    )


class StockLedger:
    """
    Records stock movements and answers ledger queries for one session.

    ``record_transaction`` owns the session's current database transaction
    and always ends it. The movement itself runs in a savepoint:

    - on success the transaction is committed;
    - on a business rejection (``AppException``) only the savepoint is rolled
      back and the empty outer transaction is committed, so objects the
      caller loaded earlier stay usable;
    - on a store failure or cancellation the whole transaction is rolled
      back, which expires every object in the session. Reload them (by id,
      or with ``await session.refresh(obj)``) before reading attributes.
    """

    def __init__(self, session: AsyncSession, lock_timeout_ms: Optional[int] = None):
        self.session = session
        self.products = ProductRepository(session)
        self.transactions = TransactionRepository(session)
        self.lock_timeout_ms = (
            settings.stock_lock_timeout_ms if lock_timeout_ms is None else lock_timeout_ms
        )

    async def _bound_lock_wait(self) -> None:
        if self.session.bind.dialect.name == "postgresql" and self.lock_timeout_ms:
            # SET LOCAL lasts until the end of the current transaction
            await self.session.execute(
                text(f"SET LOCAL lock_timeout = '{int(self.lock_timeout_ms)}ms'")
            )

    async def record_transaction(
        self,
        product_id: uuid.UUID,
        owner_id: uuid.UUID,
        transaction_type,
        quantity: int,
        reference_number: Optional[str] = None,
        notes: Optional[str] = None
    ) -> StockTransaction:
        """
        Apply one stock movement and append its ledger entry atomically.

        Raises:
            LedgerValidationError: unknown type or quantity outside 1..MAX_STOCK_LEVEL,
                before any store access; or an increase that would push stock past
                MAX_STOCK_LEVEL
            ProductNotFoundError: product missing or owned by someone else
            InsufficientStockError: ``out`` larger than the available stock
            ConflictError: the product row could not be locked or the commit was
                serialized out; nothing was written
            StoreError: any other persistence failure; nothing was written

        Returns:
            The recorded transaction with ``product`` and ``owner`` loaded.
        """
        kind = parse_transaction_type(transaction_type)
        quantity = validate_quantity(quantity)

        try:
            await self._bound_lock_wait()

            savepoint = await self.session.begin_nested()
            try:
                product = await self.products.get_for_owner(product_id, owner_id, lock=True)
                if product is None:
                    raise ProductNotFoundError(product_id)

                previous_stock = product.stock
                new_stock = compute_new_stock(previous_stock, kind, quantity, product_id=product.id)
                product.set_stock_level(new_stock)

                transaction = StockTransaction(
                    user_id=owner_id,
                    product_id=product.id,
                    transaction_type=kind.value,
                    quantity=quantity,
                    previous_stock=previous_stock,
                    new_stock=new_stock,
                    reference_number=reference_number or None,
                    notes=notes or None
                )
                self.transactions.add(transaction)

                await self.session.flush()
            except AppException:
                await savepoint.rollback()
                raise

            await self.session.commit()

        except AppException as exc:
            # Only the savepoint was undone; ending the outer transaction
            # releases the lock and leaves untouched caller objects loaded
            await self.session.commit()
            logger.warning(
                f"Rejected {kind.value} x{quantity} for product {product_id}: {exc.message}"
            )
            raise
        except SQLAlchemyError as exc:
            await self.session.rollback()
            error = translate_store_error(exc)
            logger.error(
                f"Store failure recording {kind.value} x{quantity} for product {product_id}: "
                f"{type(error).__name__}",
                exc_info=True
            )
            raise error from exc
        except BaseException:
            # cancelled mid-sequence
            await self.session.rollback()
            raise

        logger.info(
            f"Recorded {kind.value} x{quantity} for product {product.id}: "
            f"{previous_stock} -> {new_stock} (status {product.status})"
        )

        return await self.transactions.get(transaction.id, owner_id)

    async def get_transaction(
        self,
        transaction_id: uuid.UUID,
        owner_id: uuid.UUID
    ) -> StockTransaction:
        transaction = await self.transactions.get(transaction_id, owner_id)
        if transaction is None:
            raise ResourceNotFoundError("Transaction", transaction_id)
        return transaction

    async def list_transactions(
        self,
        owner_id: uuid.UUID,
        product_id: Optional[uuid.UUID] = None,
        transaction_type=None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        page: int = 1,
        page_size: Optional[int] = None
    ) -> tuple[Sequence[StockTransaction], int]:
        """Transactions for ``owner_id``, most recent first, with the total match count."""
        kind = parse_transaction_type(transaction_type).value if transaction_type else None
        offset = (page - 1) * page_size if page_size else 0

        return await self.transactions.list_for_owner(
            owner_id,
            product_id=product_id,
            transaction_type=kind,
            start_date=start_date,
            end_date=end_date,
            offset=offset,
            limit=page_size
        )

    async def list_for_product(
        self,
        product_id: uuid.UUID,
        owner_id: uuid.UUID
    ) -> Sequence[StockTransaction]:
        """Full history of one product. Unknown or foreign products raise ``ProductNotFoundError``."""
        if await self.products.get_for_owner(product_id, owner_id) is None:
            raise ProductNotFoundError(product_id)

        items, _ = await self.transactions.list_for_owner(owner_id, product_id=product_id)
        return items

    async def summarize(self, owner_id: uuid.UUID) -> StockSummary:
        return StockSummary(**await self.transactions.totals(owner_id))

"""Concurrent writers against the same product must be serialized by the ledger."""
import asyncio

from sqlalchemy import select

from stockroom.error_handlers import InsufficientStockError
from stockroom.models import Product, StockTransaction
from stockroom.services.ledger import StockLedger


async def _attempt(session_factory, product_id, owner_id, kind, quantity):
    """Run one ledger call in its own session, the way one request would."""
    async with session_factory() as session:
        try:
            transaction = await StockLedger(session).record_transaction(
                product_id, owner_id, kind, quantity
            )
            await session.commit()
            return transaction.new_stock
        except InsufficientStockError as exc:
            return exc


class TestConcurrentLedgerWrites:

    async def test_two_outs_of_eight_from_ten_one_wins(self, session_factory, owner, make_product):
        """
        Stock 10, two concurrent 'out 8' calls: exactly one succeeds and leaves
        2, the other sees the committed result and fails.
        """
        product = await make_product(owner, stock=10)

        results = await asyncio.gather(
            _attempt(session_factory, product.id, owner.id, "out", 8),
            _attempt(session_factory, product.id, owner.id, "out", 8),
        )

        successes = [r for r in results if isinstance(r, int)]
        failures = [r for r in results if isinstance(r, InsufficientStockError)]
        assert successes == [2]
        assert len(failures) == 1
        assert failures[0].available == 2
        assert failures[0].requested == 8

        async with session_factory() as session:
            stored = await session.get(Product, product.id)
            history = (await session.execute(select(StockTransaction))).scalars().all()

        assert stored.stock == 2
        assert len(history) == 1
        assert (history[0].previous_stock, history[0].new_stock) == (10, 2)

    async def test_many_concurrent_receipts_lose_no_update(self, session_factory, owner, make_product):
        product = await make_product(owner, stock=0)

        results = await asyncio.gather(*[
            _attempt(session_factory, product.id, owner.id, "in", 1)
            for _ in range(8)
        ])

        assert sorted(results) == list(range(1, 9))

        async with session_factory() as session:
            stored = await session.get(Product, product.id)
            history = (await session.execute(select(StockTransaction))).scalars().all()

        assert stored.stock == 8
        assert stored.status == "active"
        # each entry continues exactly where another one ended
        assert sorted((t.previous_stock, t.new_stock) for t in history) == [(n, n + 1) for n in range(8)]

    async def test_different_products_proceed_independently(self, session_factory, owner, make_product):
        first = await make_product(owner, stock=5)
        second = await make_product(owner, stock=5)

        results = await asyncio.gather(
            _attempt(session_factory, first.id, owner.id, "out", 5),
            _attempt(session_factory, second.id, owner.id, "out", 5),
        )

        assert results == [0, 0]

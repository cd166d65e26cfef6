"""Domain services."""
from stockroom.services.ledger import StockLedger, compute_new_stock
from stockroom.services.repositories import ProductRepository, TransactionRepository

__all__ = ["StockLedger", "compute_new_stock", "ProductRepository", "TransactionRepository"]

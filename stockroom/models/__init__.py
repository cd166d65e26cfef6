"""
SQLAlchemy models for the Stockroom application.
Import all models here to ensure they're registered with SQLAlchemy.
"""
from stockroom.models.user import User
from stockroom.models.category import Category
from stockroom.models.supplier import Supplier
from stockroom.models.product import Product
from stockroom.models.stock import StockTransaction, LedgerImmutableError

__all__ = [
    "User",
    "Category",
    "Supplier",
    "Product",
    "StockTransaction",
    "LedgerImmutableError",
]

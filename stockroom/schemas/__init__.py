"""
Pydantic schemas for request/response validation.
"""
from stockroom.schemas.user import (
    UserBase, UserCreate, UserResponse, Token, TokenRefresh, LoginRequest, LoginResponse
)
from stockroom.schemas.category import CategoryCreate, CategoryResponse
from stockroom.schemas.supplier import (
    SupplierBase, SupplierCreate, SupplierUpdate, SupplierResponse
)
from stockroom.schemas.product import (
    ProductBase, ProductCreate, ProductUpdate, ProductResponse, ProductListResponse
)
from stockroom.schemas.stock import (
    TransactionType, StockTransactionBase, StockTransactionCreate, ProductBrief, OwnerBrief,
    StockTransactionResponse, StockTransactionWithProduct, StockTransactionListResponse,
    StockSummary
)

__all__ = [
    # User schemas
    "UserBase", "UserCreate", "UserResponse", "Token", "TokenRefresh",
    "LoginRequest", "LoginResponse",

    # Category schemas
    "CategoryCreate", "CategoryResponse",

    # Supplier schemas
    "SupplierBase", "SupplierCreate", "SupplierUpdate", "SupplierResponse",

    # Product schemas
    "ProductBase", "ProductCreate", "ProductUpdate", "ProductResponse", "ProductListResponse",

    # Stock schemas
    "TransactionType", "StockTransactionBase", "StockTransactionCreate", "ProductBrief",
    "OwnerBrief", "StockTransactionResponse", "StockTransactionWithProduct",
    "StockTransactionListResponse", "StockSummary",
]

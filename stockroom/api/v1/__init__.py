"""API v1 Router."""
from fastapi import APIRouter

from stockroom.api.v1 import auth, categories, suppliers, products, stock

api_router = APIRouter(prefix="/api/v1")

# Include all route modules
api_router.include_router(auth.router)
api_router.include_router(categories.router)
api_router.include_router(suppliers.router)
api_router.include_router(products.router)
api_router.include_router(stock.router)

__all__ = ["api_router"]

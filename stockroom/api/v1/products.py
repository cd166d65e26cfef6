"""
Products API endpoints for inventory management.

Stock levels are read-only here: initial stock is set on creation and every
later change goes through ``/stock/transactions``.
"""
from typing import Optional
import time
import uuid
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, and_, or_

from stockroom.core.database import get_db
from stockroom.core.security import get_current_user
from stockroom.error_handlers import ResourceNotFoundError, ResourceInUseError, ValidationError
from stockroom.models.user import User
from stockroom.models.product import Product
from stockroom.models.category import Category
from stockroom.models.supplier import Supplier
from stockroom.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductListResponse
)
from stockroom.services.repositories import ProductRepository, TransactionRepository

router = APIRouter(prefix="/products", tags=["Products"])

BASE36_DIGITS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def _base36(value: int) -> str:
    digits = ""
    while value:
        value, remainder = divmod(value, 36)
        digits = BASE36_DIGITS[remainder] + digits
    return digits or "0"


def generate_unique_code(prefix: str) -> str:
    """``<prefix>-<base36 microsecond timestamp>``, e.g. ``Beverages-1A2B3C4D5E``."""
    return f"{prefix}-{_base36(time.time_ns() // 1000)}"[:50]


async def _resolve_category(db: AsyncSession, category_id: Optional[uuid.UUID]) -> Optional[Category]:
    if category_id is None:
        return None
    category = await db.get(Category, category_id)
    if category is None:
        raise ValidationError("No category match found", errors=[{"field": "category_id"}])
    return category


async def _resolve_supplier(
    db: AsyncSession,
    supplier_id: Optional[uuid.UUID],
    owner_id: uuid.UUID
) -> Optional[Supplier]:
    if supplier_id is None:
        return None
    result = await db.execute(
        select(Supplier).where(
            and_(
                Supplier.id == supplier_id,
                Supplier.user_id == owner_id
            )
        )
    )
    supplier = result.scalar_one_or_none()
    if supplier is None:
        raise ValidationError("No supplier match found", errors=[{"field": "supplier_id"}])
    return supplier


async def _get_owned_product(
    db: AsyncSession,
    product_id: uuid.UUID,
    owner_id: uuid.UUID,
    lock: bool = False
) -> Product:
    # Writers lock the row so status changes serialize with ledger movements
    product = await ProductRepository(db).get_for_owner(product_id, owner_id, lock=lock)
    if product is None:
        raise ResourceNotFoundError("Product", product_id)
    return product


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    product_data: ProductCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a new product.

    - **name**: Product name
    - **unit**: Unit of measure label
    - **stock**: Initial stock quantity
    - **category_id** / **supplier_id**: Optional references
    """
    category = await _resolve_category(db, product_data.category_id)
    await _resolve_supplier(db, product_data.supplier_id, current_user.id)

    new_product = Product(
        user_id=current_user.id,
        unique_code=generate_unique_code(category.name if category else "PRD"),
        **product_data.model_dump(exclude={"stock"})
    )
    new_product.set_stock_level(product_data.stock)

    db.add(new_product)
    await db.commit()
    await db.refresh(new_product)

    return new_product


@router.get("", response_model=ProductListResponse)
async def list_products(
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=100),
    search: Optional[str] = None,
    category_id: Optional[uuid.UUID] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    List products with pagination and filtering.

    - **search**: Search by name or code
    - **category_id**: Filter by category
    - **status**: Filter by status
    """
    query = select(Product).where(Product.user_id == current_user.id)

    if search:
        search_pattern = f"%{search}%"
        query = query.where(
            or_(
                Product.name.ilike(search_pattern),
                Product.unique_code.ilike(search_pattern)
            )
        )

    if category_id:
        query = query.where(Product.category_id == category_id)

    if status_filter:
        query = query.where(Product.status == status_filter)

    # Get total count
    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar() or 0

    # Get paginated results
    query = query.order_by(Product.updated_at.desc(), Product.created_at.desc())
    query = query.offset((page - 1) * page_size).limit(page_size)

    result = await db.execute(query)
    products = result.scalars().all()

    return ProductListResponse(
        items=products,
        total=total,
        page=page,
        page_size=page_size,
        pages=(total + page_size - 1) // page_size
    )


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get a specific product by ID."""
    return await _get_owned_product(db, product_id, current_user.id)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: uuid.UUID,
    product_data: ProductUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Update product details.

    Stock cannot be changed here. Status may be set to 'discontinued' or back
    to 'active'; reactivating a product with no stock leaves it out-of-stock.
    """
    product = await _get_owned_product(db, product_id, current_user.id, lock=True)
    update_data = product_data.model_dump(exclude_unset=True)

    if update_data.get("category_id"):
        category = await _resolve_category(db, update_data["category_id"])
        if category.id != product.category_id:
            product.unique_code = generate_unique_code(category.name)

    if update_data.get("supplier_id"):
        await _resolve_supplier(db, update_data["supplier_id"], current_user.id)

    new_status = update_data.pop("status", None)
    for field, value in update_data.items():
        setattr(product, field, value)

    if new_status is not None:
        product.status = new_status
        if new_status == "active":
            # a zero-stock product never reads as active
            product.set_stock_level(product.stock)

    await db.commit()
    await db.refresh(product)

    return product


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Delete a product.

    Products with recorded stock transactions cannot be deleted; mark them
    discontinued instead.
    """
    product = await _get_owned_product(db, product_id, current_user.id, lock=True)

    if await TransactionRepository(db).exists_for_product(product.id):
        raise ResourceInUseError("Product", product_id, "it has stock transaction history")

    await db.delete(product)
    await db.commit()

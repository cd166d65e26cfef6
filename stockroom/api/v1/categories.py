"""
Category API endpoints. Categories are shared reference data.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from stockroom.core.database import get_db
from stockroom.core.security import get_current_user
from stockroom.error_handlers import DuplicateResourceError
from stockroom.models.category import Category
from stockroom.schemas.category import CategoryCreate, CategoryResponse

router = APIRouter(
    prefix="/categories",
    tags=["Categories"],
    dependencies=[Depends(get_current_user)]
)


@router.get("", response_model=list[CategoryResponse])
async def list_categories(db: AsyncSession = Depends(get_db)):
    """List all categories by name."""
    result = await db.execute(select(Category).order_by(Category.name))
    return result.scalars().all()


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    category_data: CategoryCreate,
    db: AsyncSession = Depends(get_db)
):
    """Create a category. Names are unique."""
    result = await db.execute(select(Category).where(Category.name == category_data.name))
    if result.scalar_one_or_none():
        raise DuplicateResourceError("Category", "name", category_data.name)

    category = Category(name=category_data.name)
    db.add(category)
    await db.commit()
    await db.refresh(category)

    return category

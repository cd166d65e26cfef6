"""
Supplier API endpoints, scoped to the current user.
"""
import uuid
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_

from stockroom.core.database import get_db
from stockroom.core.security import get_current_user
from stockroom.error_handlers import DuplicateResourceError, ResourceNotFoundError
from stockroom.models.user import User
from stockroom.models.supplier import Supplier
from stockroom.schemas.supplier import SupplierCreate, SupplierUpdate, SupplierResponse

router = APIRouter(prefix="/suppliers", tags=["Suppliers"])


async def _ensure_email_free(db: AsyncSession, email: str) -> None:
    result = await db.execute(select(Supplier).where(Supplier.email == email))
    if result.scalar_one_or_none():
        raise DuplicateResourceError("Supplier", "email", email)


async def _get_owned_supplier(db: AsyncSession, supplier_id: uuid.UUID, owner_id: uuid.UUID) -> Supplier:
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
        raise ResourceNotFoundError("Supplier", supplier_id)
    return supplier


@router.get("", response_model=list[SupplierResponse])
async def list_suppliers(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """List the current user's suppliers."""
    result = await db.execute(
        select(Supplier)
        .where(Supplier.user_id == current_user.id)
        .order_by(Supplier.name)
    )
    return result.scalars().all()


@router.post("", response_model=SupplierResponse, status_code=status.HTTP_201_CREATED)
async def create_supplier(
    supplier_data: SupplierCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Create a supplier. Supplier emails are unique."""
    await _ensure_email_free(db, supplier_data.email)

    supplier = Supplier(user_id=current_user.id, **supplier_data.model_dump())
    db.add(supplier)
    await db.commit()
    await db.refresh(supplier)

    return supplier


@router.get("/{supplier_id}", response_model=SupplierResponse)
async def get_supplier(
    supplier_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await _get_owned_supplier(db, supplier_id, current_user.id)


@router.put("/{supplier_id}", response_model=SupplierResponse)
async def update_supplier(
    supplier_id: uuid.UUID,
    supplier_data: SupplierUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    supplier = await _get_owned_supplier(db, supplier_id, current_user.id)
    update_data = supplier_data.model_dump(exclude_unset=True)

    if update_data.get("email") and update_data["email"] != supplier.email:
        await _ensure_email_free(db, update_data["email"])

    for field, value in update_data.items():
        setattr(supplier, field, value)

    await db.commit()
    await db.refresh(supplier)

    return supplier


@router.delete("/{supplier_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_supplier(
    supplier_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Delete a supplier. Products referencing it keep no supplier."""
    supplier = await _get_owned_supplier(db, supplier_id, current_user.id)
    await db.delete(supplier)
    await db.commit()

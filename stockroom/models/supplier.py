"""
Supplier model, scoped to the owning user.
"""
from typing import Optional
import uuid
from sqlalchemy import String, Text, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stockroom.core.database import Base, UpdatedAtMixin


class Supplier(UpdatedAtMixin, Base):
    """Supplier contact record."""

    __tablename__ = "suppliers"

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    contact_person: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="active", nullable=False)

    # Relationships
    owner = relationship("User", back_populates="suppliers")
    products = relationship("Product", back_populates="supplier", passive_deletes=True)

    __table_args__ = (
        CheckConstraint("status IN ('active', 'inactive')", name="status"),
        Index("idx_suppliers_user_id", "user_id"),
        Index("idx_suppliers_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<Supplier(id={self.id}, name={self.name}, status={self.status})>"

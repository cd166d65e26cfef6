"""
Product model for inventory management.
"""
from typing import Optional
import uuid
from sqlalchemy import String, Integer, Text, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stockroom.core.database import Base, UpdatedAtMixin

STATUS_ACTIVE = "active"
STATUS_DISCONTINUED = "discontinued"
STATUS_OUT_OF_STOCK = "out-of-stock"

# Largest value the INTEGER stock and quantity columns hold on every backend
MAX_STOCK_LEVEL = 2**31 - 1


class Product(UpdatedAtMixin, Base):
    """Product inventory model."""

    __tablename__ = "products"

    # Foreign keys
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False
    )
    category_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True
    )
    supplier_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("suppliers.id", ondelete="SET NULL"),
        nullable=True
    )

    # Product identification
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    unique_code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    unit: Mapped[str] = mapped_column(String(20), nullable=False)

    # Stock information, written only through the stock ledger
    stock: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=STATUS_ACTIVE, nullable=False)

    # Relationships
    owner = relationship("User", back_populates="products")
    category = relationship("Category", back_populates="products")
    supplier = relationship("Supplier", back_populates="products")
    stock_transactions = relationship("StockTransaction", back_populates="product", passive_deletes=True)

    # Indexes
    __table_args__ = (
        CheckConstraint("stock >= 0", name="stock_non_negative"),
        CheckConstraint(
            "status IN ('active', 'discontinued', 'out-of-stock')",
            name="status"
        ),
        Index("idx_products_user_id", "user_id"),
        Index("idx_products_low_stock", "user_id", "stock"),
    )

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, code={self.unique_code}, name={self.name}, stock={self.stock})>"

    def set_stock_level(self, new_stock: int) -> None:
        """
        Set stock and derive status from it.

        Zero stock always means out-of-stock. Positive stock revives an
        out-of-stock product; any other status (e.g. discontinued) is kept.
        """
        if new_stock < 0:
            raise ValueError(f"stock cannot be negative: {new_stock}")

        self.stock = new_stock
        if new_stock == 0:
            self.status = STATUS_OUT_OF_STOCK
        elif self.status == STATUS_OUT_OF_STOCK:
            self.status = STATUS_ACTIVE

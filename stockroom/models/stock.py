"""
Stock transaction model: the append-only audit trail of every stock movement.
"""
from typing import Optional
import uuid
from sqlalchemy import String, Integer, ForeignKey, Index, Text, CheckConstraint, event
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stockroom.core.database import Base


class StockTransaction(Base):
    """Stock transaction model for tracking all inventory movements."""

    __tablename__ = "stock_transactions"

    # Foreign keys
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("products.id", ondelete="RESTRICT"),
        nullable=False
    )

    # Transaction details
    transaction_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False
    )  # 'in', 'out', 'adjustment', 'return'
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    # Stock snapshot around this movement
    previous_stock: Mapped[int] = mapped_column(Integer, nullable=False)
    new_stock: Mapped[int] = mapped_column(Integer, nullable=False)

    # PO number, invoice number, etc.
    reference_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Relationships
    owner = relationship("User", back_populates="stock_transactions")
    product = relationship("Product", back_populates="stock_transactions")

    # Indexes
    __table_args__ = (
        CheckConstraint("quantity >= 1", name="quantity_positive"),
        CheckConstraint("new_stock >= 0", name="new_stock_non_negative"),
        CheckConstraint(
            "transaction_type IN ('in', 'out', 'adjustment', 'return')",
            name="transaction_type"
        ),
        Index("idx_stock_transactions_user", "user_id"),
        Index("idx_stock_transactions_product", "product_id"),
        Index("idx_stock_transactions_type", "transaction_type"),
        Index("idx_stock_transactions_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<StockTransaction(id={self.id}, type={self.transaction_type}, qty={self.quantity}, "
            f"{self.previous_stock}->{self.new_stock})>"
        )


class LedgerImmutableError(Exception):
    """Raised when code tries to change or remove a recorded stock transaction."""


@event.listens_for(StockTransaction, "before_update")
def _refuse_update(mapper, connection, target):
    raise LedgerImmutableError(f"stock transaction {target.id} is append-only")


@event.listens_for(StockTransaction, "before_delete")
def _refuse_delete(mapper, connection, target):
    raise LedgerImmutableError(f"stock transaction {target.id} cannot be deleted")

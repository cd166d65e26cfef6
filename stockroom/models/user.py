"""
User model for authentication and tenancy.
"""
from typing import Optional
from sqlalchemy import String, Boolean
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stockroom.core.database import Base, UpdatedAtMixin


class User(UpdatedAtMixin, Base):
    """User account model. Every product, supplier and transaction is owned by one user."""

    __tablename__ = "users"

    # User credentials
    username: Mapped[str] = mapped_column(String(30), unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # Profile information
    full_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Role and permissions
    role: Mapped[str] = mapped_column(String(50), default="user", nullable=False)

    # Account status
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    products = relationship("Product", back_populates="owner", cascade="all, delete-orphan")
    suppliers = relationship("Supplier", back_populates="owner", cascade="all, delete-orphan")
    stock_transactions = relationship("StockTransaction", back_populates="owner")

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username}, role={self.role})>"

"""
Category reference data shared by all tenants.
"""
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stockroom.core.database import Base, UpdatedAtMixin


class Category(UpdatedAtMixin, Base):
    """Product category."""

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)

    products = relationship("Product", back_populates="category", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name={self.name})>"

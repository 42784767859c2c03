"""
Product catalog models: Categories and Products.
"""

from sqlalchemy import CheckConstraint, Column, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, relationship

from .base import Base, TimestampMixin


class Category(Base, TimestampMixin):
    """Product grouping shown in the shop sidebar"""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)

    def __repr__(self):
        return f"<Category(id={self.id}, name='{self.name}')>"


class Product(Base, TimestampMixin):
    """Sellable item"""

    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    price = Column(Float, nullable=False, default=0.0)
    weight = Column(Float, nullable=True)
    description = Column(Text, nullable=True)
    image_name = Column(String(255), nullable=True)

    category: Mapped[Category] = relationship("Category", lazy="selectin")

    __table_args__ = (
        CheckConstraint("price >= 0", name="check_product_price_positive"),
        Index("idx_products_category", category_id),
    )

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', price={self.price})>"

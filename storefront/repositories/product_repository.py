"""
Product Repository

Adds category filtering on top of the generic CRUD operations.
"""

from typing import List

from sqlalchemy import func, select

from storefront.models.db import Product

from .base import SQLAlchemyRepository


class ProductRepository(SQLAlchemyRepository[Product]):
    model = Product

    async def find_all_by_category_id(self, category_id: int) -> List[Product]:
        result = await self.session.execute(
            select(Product).where(Product.category_id == category_id).order_by(Product.id)
        )
        return list(result.scalars().all())

    async def count_by_category_id(self, category_id: int) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(Product).where(Product.category_id == category_id)
        )
        return result.scalar_one()

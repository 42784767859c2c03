from storefront.models.db import Category

from .base import SQLAlchemyRepository


class CategoryRepository(SQLAlchemyRepository[Category]):
    model = Category

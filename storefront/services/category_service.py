import logging
from typing import List, Optional

from storefront.core.exceptions import CategoryInUseError, CategoryNotFoundError
from storefront.models.db import Category
from storefront.models.schemas import CategoryForm
from storefront.repositories.category_repository import CategoryRepository
from storefront.repositories.product_repository import ProductRepository

logger = logging.getLogger(__name__)


class CategoryService:
    def __init__(self, category_repository: CategoryRepository, product_repository: ProductRepository):
        self.category_repository = category_repository
        self.product_repository = product_repository

    async def get_all_categories(self) -> List[Category]:
        return await self.category_repository.find_all()

    async def get_category_by_id(self, category_id: int) -> Optional[Category]:
        return await self.category_repository.find_by_id(category_id)

    async def add_category(self, form: CategoryForm) -> Category:
        """Create a category, or rename it when ``form.id`` is set"""
        if form.id is not None:
            category = await self.category_repository.find_by_id(form.id)
            if category is None:
                raise CategoryNotFoundError(form.id)
            category.name = form.name
        else:
            category = Category(name=form.name)
        return await self.category_repository.save(category)

    async def remove_category_by_id(self, category_id: int) -> None:
        if not await self.category_repository.exists(category_id):
            raise CategoryNotFoundError(category_id)
        product_count = await self.product_repository.count_by_category_id(category_id)
        if product_count:
            raise CategoryInUseError(category_id, product_count)
        await self.category_repository.delete(category_id)

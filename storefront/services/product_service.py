import logging
from typing import List, Optional

from fastapi import UploadFile

from storefront.core.exceptions import CategoryNotFoundError, ProductNotFoundError
from storefront.models.db import Product
from storefront.models.schemas import ProductForm
from storefront.repositories.category_repository import CategoryRepository
from storefront.repositories.product_repository import ProductRepository
from storefront.services.image_storage import ProductImageStorage

logger = logging.getLogger(__name__)


class ProductService:
    """Catalog reads for the shop and product management for admins"""

    def __init__(
        self,
        product_repository: ProductRepository,
        category_repository: CategoryRepository | None = None,
        image_storage: ProductImageStorage | None = None,
    ):
        self.product_repository = product_repository
        self.category_repository = category_repository
        self.image_storage = image_storage

    async def get_all_products(self) -> List[Product]:
        return await self.product_repository.find_all()

    async def get_product_by_id(self, product_id: int) -> Optional[Product]:
        return await self.product_repository.find_by_id(product_id)

    async def get_all_products_by_category_id(self, category_id: int) -> List[Product]:
        return await self.product_repository.find_all_by_category_id(category_id)

    async def add_product(self, form: ProductForm, image: UploadFile | None = None) -> Product:
        """
        Create or update a product.

        A new upload replaces the image; otherwise ``form.image_name`` is kept.
        """
        if self.category_repository is not None and not await self.category_repository.exists(form.category_id):
            raise CategoryNotFoundError(form.category_id)

        if form.id is not None:
            product = await self.product_repository.find_by_id(form.id)
            if product is None:
                raise ProductNotFoundError(form.id)
        else:
            product = Product()

        image_name = form.image_name
        if image is not None and image.filename:
            if self.image_storage is None:
                raise RuntimeError("ProductService was built without image storage")
            image_name = await self.image_storage.save(image)

        product.name = form.name
        product.category_id = form.category_id
        product.price = form.price
        product.weight = form.weight
        product.description = form.description
        product.image_name = image_name

        product = await self.product_repository.save(product)
        logger.info(f"Product saved: {product.name} (ID: {product.id})")
        return product

    async def remove_product_by_id(self, product_id: int) -> None:
        if not await self.product_repository.delete(product_id):
            raise ProductNotFoundError(product_id)

"""
Contracts between the cart and the catalog.
"""

from typing import Optional, Protocol, runtime_checkable

from storefront.models.db import Product


@runtime_checkable
class ProductCatalog(Protocol):
    """
    Product lookup the cart needs to snapshot a product into a cart line.

    ``ProductService`` satisfies it; tests can pass any object with the same method.
    """

    async def get_product_by_id(self, product_id: int) -> Optional[Product]:
        """The product, or None when it does not exist"""
        ...

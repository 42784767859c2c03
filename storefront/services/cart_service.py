import logging

from storefront.core.exceptions import CartItemNotFoundError, ProductNotFoundError
from storefront.core.interfaces import ProductCatalog
from storefront.models.schemas import CartItem, CartView
from storefront.repositories.cart_store import CartStore

logger = logging.getLogger(__name__)


class CartService:
    """Session-scoped shopping cart"""

    def __init__(self, store: CartStore, catalog: ProductCatalog):
        self.store = store
        self.catalog = catalog

    async def add_to_cart(self, session_id: str, product_id: int) -> int:
        """
        Append a product snapshot to the session cart

        Returns:
            The new number of items in the cart

        Raises:
            ProductNotFoundError: If the product does not exist
        """
        product = await self.catalog.get_product_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        size = await self.store.add(session_id, CartItem.from_product(product))
        logger.debug(f"Product {product_id} added to cart (size={size})")
        return size

    async def get_cart(self, session_id: str) -> CartView:
        return CartView(items=await self.store.items(session_id))

    async def count(self, session_id: str) -> int:
        """Number of lines in the session cart, as shown in the page header"""
        return len(await self.store.items(session_id))

    async def remove_item(self, session_id: str, index: int) -> CartItem:
        try:
            return await self.store.remove(session_id, index)
        except IndexError as e:
            raise CartItemNotFoundError(index) from e

    async def clear(self, session_id: str) -> None:
        await self.store.clear(session_id)

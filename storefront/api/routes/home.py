"""
Public shop pages: home, catalog, category filter and product detail
"""

from fastapi import APIRouter, Depends, Request

from storefront.api.dependencies import get_cart_count, get_category_service, get_product_service
from storefront.api.templating import render
from storefront.core.exceptions import ProductNotFoundError
from storefront.services import CategoryService, ProductService

router = APIRouter()


@router.get("/")
async def home(request: Request, cart_count: int = Depends(get_cart_count)):  # noqa: B008
    return render(request, "index.html", {"cartCount": cart_count})


@router.get("/shop")
async def shop(
    request: Request,
    cart_count: int = Depends(get_cart_count),  # noqa: B008
    category_service: CategoryService = Depends(get_category_service),  # noqa: B008
    product_service: ProductService = Depends(get_product_service),  # noqa: B008
):
    return render(
        request,
        "shop.html",
        {
            "cartCount": cart_count,
            "categories": await category_service.get_all_categories(),
            "products": await product_service.get_all_products(),
        },
    )


@router.get("/shop/category/{category_id}")
async def shop_by_category(
    request: Request,
    category_id: int,
    cart_count: int = Depends(get_cart_count),  # noqa: B008
    category_service: CategoryService = Depends(get_category_service),  # noqa: B008
    product_service: ProductService = Depends(get_product_service),  # noqa: B008
):
    return render(
        request,
        "shop.html",
        {
            "cartCount": cart_count,
            "categories": await category_service.get_all_categories(),
            "products": await product_service.get_all_products_by_category_id(category_id),
            "selected_category_id": category_id,
        },
    )


@router.get("/shop/viewproduct/{product_id}")
async def view_product(
    request: Request,
    product_id: int,
    cart_count: int = Depends(get_cart_count),  # noqa: B008
    product_service: ProductService = Depends(get_product_service),  # noqa: B008
):
    product = await product_service.get_product_by_id(product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    return render(request, "view_product.html", {"cartCount": cart_count, "product": product})

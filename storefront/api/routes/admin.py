"""
Admin back-office: category and product management.

Every path here is restricted to ROLE_ADMIN by the security rules.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from fastapi.responses import RedirectResponse

from storefront.api.dependencies import get_category_service, get_product_service
from storefront.api.templating import render
from storefront.core.exceptions import CategoryNotFoundError, ProductNotFoundError
from storefront.models.schemas import CategoryForm, ProductForm
from storefront.services import CategoryService, ProductService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin")


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=status.HTTP_302_FOUND)


@router.get("")
async def admin_home(request: Request):
    return render(request, "admin/index.html")


# ============================================================
# CATEGORIES
# ============================================================


@router.get("/categories")
async def list_categories(
    request: Request,
    category_service: CategoryService = Depends(get_category_service),  # noqa: B008
):
    return render(request, "admin/categories.html", {"categories": await category_service.get_all_categories()})


@router.get("/categories/add")
async def category_add_page(request: Request):
    return render(request, "admin/category_form.html", {"category": None})


@router.post("/categories/add")
async def category_add(
    id: Optional[int] = Form(None),
    name: str = Form(...),
    category_service: CategoryService = Depends(get_category_service),  # noqa: B008
):
    await category_service.add_category(CategoryForm(id=id, name=name))
    return _redirect("/admin/categories")


@router.get("/categories/update/{category_id}")
async def category_update_page(
    request: Request,
    category_id: int,
    category_service: CategoryService = Depends(get_category_service),  # noqa: B008
):
    category = await category_service.get_category_by_id(category_id)
    if category is None:
        raise CategoryNotFoundError(category_id)
    return render(request, "admin/category_form.html", {"category": category})


@router.get("/categories/delete/{category_id}")
async def category_delete(
    category_id: int,
    category_service: CategoryService = Depends(get_category_service),  # noqa: B008
):
    await category_service.remove_category_by_id(category_id)
    return _redirect("/admin/categories")


# ============================================================
# PRODUCTS
# ============================================================


@router.get("/products")
async def list_products(
    request: Request,
    product_service: ProductService = Depends(get_product_service),  # noqa: B008
):
    return render(request, "admin/products.html", {"products": await product_service.get_all_products()})


@router.get("/products/add")
async def product_add_page(
    request: Request,
    category_service: CategoryService = Depends(get_category_service),  # noqa: B008
):
    return render(
        request,
        "admin/product_form.html",
        {"product": None, "categories": await category_service.get_all_categories()},
    )


@router.post("/products/add")
async def product_add(
    id: Optional[int] = Form(None),
    name: str = Form(...),
    category_id: int = Form(..., alias="categoryId"),
    price: float = Form(...),
    weight: Optional[float] = Form(None),
    description: Optional[str] = Form(None),
    image_name: Optional[str] = Form(None, alias="imageName"),
    product_image: Optional[UploadFile] = File(None, alias="productImage"),  # noqa: B008
    product_service: ProductService = Depends(get_product_service),  # noqa: B008
):
    form = ProductForm(
        id=id,
        name=name,
        category_id=category_id,
        price=price,
        weight=weight,
        description=description,
        image_name=image_name or None,
    )
    await product_service.add_product(form, product_image)
    return _redirect("/admin/products")


@router.get("/products/update/{product_id}")
async def product_update_page(
    request: Request,
    product_id: int,
    product_service: ProductService = Depends(get_product_service),  # noqa: B008
    category_service: CategoryService = Depends(get_category_service),  # noqa: B008
):
    product = await product_service.get_product_by_id(product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    return render(
        request,
        "admin/product_form.html",
        {"product": product, "categories": await category_service.get_all_categories()},
    )


@router.get("/products/delete/{product_id}")
async def product_delete(
    product_id: int,
    product_service: ProductService = Depends(get_product_service),  # noqa: B008
):
    await product_service.remove_product_by_id(product_id)
    return _redirect("/admin/products")

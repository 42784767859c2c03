"""
Session cart: add, view, remove by position, checkout and order confirmation
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse

from storefront.api.dependencies import get_cart_service, require_principal
from storefront.api.templating import render
from storefront.services import CartService, Principal

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/addToCart/{product_id}")
async def add_to_cart(
    product_id: int,
    principal: Principal = Depends(require_principal),  # noqa: B008
    cart_service: CartService = Depends(get_cart_service),  # noqa: B008
):
    await cart_service.add_to_cart(principal.session_id, product_id)
    return RedirectResponse("/shop", status_code=status.HTTP_302_FOUND)


@router.get("/cart")
async def cart(
    request: Request,
    principal: Principal = Depends(require_principal),  # noqa: B008
    cart_service: CartService = Depends(get_cart_service),  # noqa: B008
):
    view = await cart_service.get_cart(principal.session_id)
    return render(request, "cart.html", {"cartCount": view.count, "total": view.total, "cart": view.items})


@router.get("/cart/removeItem/{index}")
async def remove_item(
    index: int,
    principal: Principal = Depends(require_principal),  # noqa: B008
    cart_service: CartService = Depends(get_cart_service),  # noqa: B008
):
    await cart_service.remove_item(principal.session_id, index)
    return RedirectResponse("/cart", status_code=status.HTTP_302_FOUND)


@router.get("/checkout")
async def checkout(
    request: Request,
    principal: Principal = Depends(require_principal),  # noqa: B008
    cart_service: CartService = Depends(get_cart_service),  # noqa: B008
):
    view = await cart_service.get_cart(principal.session_id)
    return render(request, "checkout.html", {"cartCount": view.count, "total": view.total})


@router.api_route("/orderPlaced", methods=["GET", "POST"])
async def order_placed(
    request: Request,
    principal: Principal = Depends(require_principal),  # noqa: B008
    cart_service: CartService = Depends(get_cart_service),  # noqa: B008
):
    view = await cart_service.get_cart(principal.session_id)
    await cart_service.clear(principal.session_id)
    logger.info(f"Order placed by user {principal.user_id}: {view.count} item(s), total {view.total}")
    return render(request, "order_placed.html", {"cartCount": 0, "total": view.total})

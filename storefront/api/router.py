from fastapi import APIRouter

from storefront.api.routes import admin, auth, cart, errors, home

web_router = APIRouter()

web_router.include_router(home.router, tags=["shop"])
web_router.include_router(cart.router, tags=["cart"])
web_router.include_router(auth.router, tags=["auth"])
web_router.include_router(admin.router, tags=["admin"])
web_router.include_router(errors.router, tags=["errors"])

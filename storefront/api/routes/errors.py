from fastapi import APIRouter, Request

from storefront.api.templating import render

router = APIRouter()


@router.get("/403")
async def forbidden_page(request: Request):
    return render(request, "error/403.html")


@router.get("/404")
async def not_found_page(request: Request):
    return render(request, "error/404.html")


@router.get("/500")
async def server_error_page(request: Request):
    return render(request, "error/500.html")

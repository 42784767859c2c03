"""
Form login, registration, logout and "Sign in with Google"
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, HTTPException, Request, status
from fastapi.responses import RedirectResponse
from pydantic import ValidationError

from storefront.api.dependencies import (
    get_cart_store,
    get_current_principal,
    get_google_oauth_service,
    get_session_service,
    get_token_service,
    get_user_service,
)
from storefront.api.templating import render
from storefront.config.settings import Settings, get_settings
from storefront.core.exceptions import EmailAlreadyRegisteredError, InvalidPasswordError, OAuthError
from storefront.models.schemas import UserCreate
from storefront.repositories import CartStore
from storefront.services import GoogleOAuthService, Principal, SessionService, TokenService, UserService

logger = logging.getLogger(__name__)

router = APIRouter()

OAUTH_STATE_COOKIE = "OAUTH_STATE"
LOGIN_FAILURE_URL = "/login?error=true"


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=status.HTTP_302_FOUND)


@router.get("/login")
async def login_page(request: Request, error: Optional[str] = None):
    return render(request, "login.html", {"error": error is not None})


@router.post("/login")
async def login(
    email: str = Form(""),
    password: str = Form(""),
    user_service: UserService = Depends(get_user_service),  # noqa: B008
    session_service: SessionService = Depends(get_session_service),  # noqa: B008
):
    user = await user_service.authenticate(email, password)
    if user is None:
        return _redirect(LOGIN_FAILURE_URL)

    response = _redirect("/")
    session_service.login(response, user)
    return response


@router.get("/register")
async def register_page(request: Request):
    return render(request, "register.html", {"form": {}, "errors": []})


@router.post("/register")
async def register(
    request: Request,
    first_name: str = Form("", alias="firstName"),
    last_name: str = Form("", alias="lastName"),
    email: str = Form(""),
    password: str = Form(""),
    user_service: UserService = Depends(get_user_service),  # noqa: B008
    session_service: SessionService = Depends(get_session_service),  # noqa: B008
):
    submitted = {"firstName": first_name, "lastName": last_name, "email": email}
    try:
        form = UserCreate(first_name=first_name, last_name=last_name or None, email=email, password=password)
        user = await user_service.register(form)
    except ValidationError as e:
        errors = [f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors()]
        return render(
            request, "register.html", {"form": submitted, "errors": errors}, status_code=status.HTTP_400_BAD_REQUEST
        )
    except (EmailAlreadyRegisteredError, InvalidPasswordError) as e:
        return render(
            request, "register.html", {"form": submitted, "errors": [e.message]}, status_code=status.HTTP_400_BAD_REQUEST
        )

    response = _redirect("/")
    session_service.login(response, user)
    return response


@router.get("/logout")
async def logout(
    principal: Principal | None = Depends(get_current_principal),  # noqa: B008
    store: CartStore = Depends(get_cart_store),  # noqa: B008
    session_service: SessionService = Depends(get_session_service),  # noqa: B008
):
    if principal is not None:
        await store.clear(principal.session_id)
        logger.info(f"User {principal.user_id} logged out")

    response = _redirect("/login")
    session_service.logout(response)
    return response


@router.get("/oauth2/authorization/google")
async def google_authorization(
    settings: Settings = Depends(get_settings),  # noqa: B008
    token_service: TokenService = Depends(get_token_service),  # noqa: B008
    oauth_service: GoogleOAuthService = Depends(get_google_oauth_service),  # noqa: B008
):
    if not settings.google_oauth_enabled:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Google login is not configured")

    state = token_service.create_state_token()
    response = _redirect(oauth_service.authorization_url(state))
    response.set_cookie(
        key=OAUTH_STATE_COOKIE,
        value=state,
        max_age=600,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
        path="/",
    )
    return response


@router.get("/login/oauth2/code/google")
async def google_callback(
    request: Request,
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    settings: Settings = Depends(get_settings),  # noqa: B008
    token_service: TokenService = Depends(get_token_service),  # noqa: B008
    oauth_service: GoogleOAuthService = Depends(get_google_oauth_service),  # noqa: B008
    session_service: SessionService = Depends(get_session_service),  # noqa: B008
):
    if not settings.google_oauth_enabled:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Google login is not configured")

    if error or not code:
        logger.warning(f"Google authorization failed: {error or 'missing code'}")
        return _failed_oauth_login()

    if not token_service.verify_state_token(state, request.cookies.get(OAUTH_STATE_COOKIE)):
        logger.warning("Google callback with invalid state")
        return _failed_oauth_login()

    try:
        user = await oauth_service.complete_login(code)
    except OAuthError as e:
        logger.warning(f"Google login failed: {e.message}")
        return _failed_oauth_login()

    response = _redirect("/")
    response.delete_cookie(OAUTH_STATE_COOKIE, path="/")
    session_service.login(response, user)
    return response


def _failed_oauth_login() -> RedirectResponse:
    response = _redirect(LOGIN_FAILURE_URL)
    response.delete_cookie(OAUTH_STATE_COOKIE, path="/")
    return response

"""
End-to-end tests for "Sign in with Google".

Google is replaced by an httpx.MockTransport; no network access.
"""

from urllib.parse import parse_qs, urlparse

import httpx
import pytest
from fastapi import Depends

from storefront.api.dependencies import get_google_oauth_service, get_user_service
from storefront.api.routes.auth import OAUTH_STATE_COOKIE
from storefront.clients.google_oauth_client import GoogleOAuthClient
from storefront.config.settings import Settings, get_settings
from storefront.models.db import ROLE_USER
from storefront.repositories import UserRepository
from storefront.services import GoogleOAuthService, UserService

CALLBACK = "/login/oauth2/code/google"


def _google(token_status: int = 200) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url == httpx.URL(GoogleOAuthClient.TOKEN_URL):
            if token_status != 200:
                return httpx.Response(token_status, json={"error": "invalid_grant"})
            return httpx.Response(200, json={"access_token": "google-access"})
        if request.url == httpx.URL(GoogleOAuthClient.USERINFO_URL):
            return httpx.Response(
                200,
                json={"email": "Dana@Mail.com", "given_name": "Dana", "family_name": "Reed", "email_verified": True},
            )
        return httpx.Response(404)

    return httpx.MockTransport(handler)


@pytest.fixture
def enable_google(app):
    """Configure Google login on the app; returns a setter for the mocked transport."""
    oauth_settings = Settings(
        GOOGLE_CLIENT_ID="client-id",
        GOOGLE_CLIENT_SECRET="client-secret",
        GOOGLE_REDIRECT_URI=f"http://testserver{CALLBACK}",
    )
    transport = {"current": _google()}

    def override_oauth_service(user_service: UserService = Depends(get_user_service)) -> GoogleOAuthService:  # noqa: B008
        return GoogleOAuthService(
            user_service,
            client_factory=lambda: GoogleOAuthClient(oauth_settings, transport=transport["current"]),
        )

    app.dependency_overrides[get_settings] = lambda: oauth_settings
    app.dependency_overrides[get_google_oauth_service] = override_oauth_service

    def _use(new_transport: httpx.MockTransport) -> None:
        transport["current"] = new_transport

    return _use


async def _start_login(client: httpx.AsyncClient) -> str:
    response = await client.get("/oauth2/authorization/google")
    assert response.status_code == 302
    return client.cookies[OAUTH_STATE_COOKIE]


@pytest.mark.integration
@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/oauth2/authorization/google", f"{CALLBACK}?code=x&state=y"])
async def test_google_login_disabled_without_credentials(client, path):
    response = await client.get(path)

    assert response.status_code == 404


@pytest.mark.integration
@pytest.mark.asyncio
async def test_authorization_redirects_to_google(client, enable_google):
    response = await client.get("/oauth2/authorization/google")

    location = urlparse(response.headers["location"])
    params = parse_qs(location.query)
    assert response.status_code == 302
    assert location.netloc == "accounts.google.com"
    assert params["client_id"] == ["client-id"]
    assert params["redirect_uri"] == [f"http://testserver{CALLBACK}"]
    assert params["state"] == [client.cookies[OAUTH_STATE_COOKIE]]


@pytest.mark.integration
@pytest.mark.asyncio
async def test_callback_creates_customer_and_logs_in(client, enable_google, session_factory):
    state = await _start_login(client)

    response = await client.get(CALLBACK, params={"code": "auth-code", "state": state})

    assert response.status_code == 302
    assert response.headers["location"] == "/"
    assert (await client.get("/cart")).status_code == 200

    async with session_factory() as session:
        user = await UserRepository(session).find_by_email("dana@mail.com")
    assert user.first_name == "Dana"
    assert user.password_hash is None
    assert user.authorities == [ROLE_USER]


@pytest.mark.integration
@pytest.mark.asyncio
async def test_callback_reuses_existing_account(client, enable_google, create_user, session_factory):
    await create_user(email="dana@mail.com", first_name="Existing")
    state = await _start_login(client)

    await client.get(CALLBACK, params={"code": "auth-code", "state": state})

    async with session_factory() as session:
        repository = UserRepository(session)
        assert await repository.count() == 1
        assert (await repository.find_by_email("dana@mail.com")).first_name == "Existing"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_callback_with_wrong_state_fails(client, enable_google):
    await _start_login(client)

    response = await client.get(CALLBACK, params={"code": "auth-code", "state": "forged"})

    assert response.headers["location"] == "/login?error=true"
    assert (await client.get("/cart")).headers["location"] == "/login"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_callback_with_provider_error_fails(client, enable_google):
    state = await _start_login(client)

    response = await client.get(CALLBACK, params={"error": "access_denied", "state": state})

    assert response.headers["location"] == "/login?error=true"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_callback_with_rejected_code_fails(client, enable_google):
    enable_google(_google(token_status=400))
    state = await _start_login(client)

    response = await client.get(CALLBACK, params={"code": "bad-code", "state": state})

    assert response.status_code == 302
    assert response.headers["location"] == "/login?error=true"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_callback_with_dropped_connection_fails(client, enable_google):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadError("connection reset by peer", request=request)

    enable_google(httpx.MockTransport(handler))
    state = await _start_login(client)

    response = await client.get(CALLBACK, params={"code": "auth-code", "state": state})

    assert response.status_code == 302
    assert response.headers["location"] == "/login?error=true"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_callback_with_non_json_token_response_fails(client, enable_google):
    enable_google(httpx.MockTransport(lambda request: httpx.Response(200, text="<html>oops</html>")))
    state = await _start_login(client)

    response = await client.get(CALLBACK, params={"code": "auth-code", "state": state})

    assert response.headers["location"] == "/login?error=true"

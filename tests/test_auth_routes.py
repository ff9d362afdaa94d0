try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from urllib.parse import parse_qs, urlparse

import httpx
import pytest

try:
    from ._upstream import FakeIntranet, install_overrides
except ImportError:  # pragma: no cover
    from _upstream import FakeIntranet, install_overrides  # type: ignore

from campus_events.main import app

pytestmark = pytest.mark.anyio


@pytest.fixture()
def intranet():
    fake = FakeIntranet()
    settings = install_overrides(app, fake)
    yield fake, settings
    app.dependency_overrides.clear()


def _client(**kwargs) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://testserver", **kwargs
    )


async def test_login_redirects_to_consent_screen(intranet) -> None:
    async with _client() as client:
        response = await client.get("/api/auth/login")

    assert response.status_code == 302
    location = urlparse(response.headers["location"])
    assert location.path == "/oauth/authorize"
    params = parse_qs(location.query)
    assert params["scope"] == ["public"]
    assert params["response_type"] == ["code"]


async def test_process_sets_cookie_with_token_lifetime(intranet) -> None:
    fake, _ = intranet
    fake.token_response = {"access_token": "tok", "expires_in": 3600}

    async with _client() as client:
        response = await client.post("/api/auth/process", json={"code": "abc123"})

    assert response.status_code == 200
    assert response.json() == {"success": True}
    cookie = response.headers["set-cookie"]
    assert cookie.startswith("42_access_token=tok;")
    assert "Max-Age=3600" in cookie
    assert "HttpOnly" in cookie
    assert "Path=/" in cookie
    assert "samesite=lax" in cookie.lower()
    assert "Secure" not in cookie
    assert fake.token_requests[-1]["code"] == ["abc123"]


async def test_process_marks_cookie_secure_in_production(intranet) -> None:
    _, settings = intranet
    settings.environment = "production"

    async with _client() as client:
        response = await client.post("/api/auth/process", json={"code": "abc123"})

    assert "Secure" in response.headers["set-cookie"]


@pytest.mark.parametrize("body", [{}, {"code": ""}, None])
async def test_process_requires_code(intranet, body) -> None:
    async with _client() as client:
        if body is None:
            response = await client.post("/api/auth/process")
        else:
            response = await client.post("/api/auth/process", json=body)

    assert response.status_code == 400
    assert response.json() == {"error": "Code is required"}
    assert "set-cookie" not in response.headers


async def test_process_reports_exchange_failure(intranet) -> None:
    fake, _ = intranet
    fake.token_status = 401
    fake.token_response = {"error": "invalid_grant"}

    async with _client() as client:
        response = await client.post("/api/auth/process", json={"code": "stale"})

    assert response.status_code == 500
    assert "invalid_grant" in response.json()["error"]
    assert "set-cookie" not in response.headers


async def test_callback_sets_cookie_and_redirects_to_dashboard(intranet) -> None:
    async with _client() as client:
        response = await client.get("/api/auth/callback", params={"code": "abc123"})

    assert response.status_code == 302
    assert response.headers["location"] == "http://testserver/dashboard"
    assert response.headers["set-cookie"].startswith("42_access_token=user-token;")


async def test_callback_uses_configured_frontend(intranet) -> None:
    _, settings = intranet
    settings.frontend_base_url = "https://events.example.com"

    async with _client() as client:
        response = await client.get("/api/auth/callback", params={"code": "abc123"})

    assert response.headers["location"] == "https://events.example.com/dashboard"


@pytest.mark.parametrize(
    ("params", "expected"),
    [
        ({}, "/?error=no_code"),
        ({"error": "access_denied"}, "/?error=access_denied"),
    ],
)
async def test_callback_error_redirects(intranet, params, expected) -> None:
    async with _client() as client:
        response = await client.get("/api/auth/callback", params=params)

    assert response.status_code == 302
    assert response.headers["location"] == f"http://testserver{expected}"
    assert "set-cookie" not in response.headers


async def test_callback_exchange_failure_redirects_with_token_error(intranet) -> None:
    fake, _ = intranet
    fake.token_status = 500

    async with _client() as client:
        response = await client.get("/api/auth/callback", params={"code": "abc123"})

    assert response.headers["location"] == "http://testserver/?error=token_error"


async def test_logout_clears_cookie(intranet) -> None:
    async with _client(cookies={"42_access_token": "user-token"}) as client:
        response = await client.get("/api/auth/logout")

    assert response.status_code == 302
    assert response.headers["location"] == "http://testserver/"
    cookie = response.headers["set-cookie"]
    assert cookie.startswith('42_access_token="";')
    assert "Max-Age=0" in cookie


async def test_check_reports_cookie_presence(intranet) -> None:
    async with _client() as client:
        anonymous = await client.get("/api/auth/check")
    async with _client(cookies={"42_access_token": "user-token"}) as client:
        signed_in = await client.get("/api/auth/check")

    assert anonymous.json() == {"authenticated": False}
    assert signed_in.json() == {"authenticated": True}


async def test_me_requires_session(intranet) -> None:
    fake, _ = intranet

    async with _client() as client:
        response = await client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.json() == {"error": "Not authenticated"}
    assert fake.api_requests == []


async def test_me_returns_profile(intranet) -> None:
    async with _client(cookies={"42_access_token": "user-token"}) as client:
        response = await client.get("/api/auth/me")

    assert response.status_code == 200
    body = response.json()
    assert body["login"] == "student"
    assert body["staff?"] is False


@pytest.mark.parametrize(("upstream", "expected"), [(429, 429), (401, 401), (500, 500)])
async def test_me_maps_upstream_failures(intranet, upstream, expected) -> None:
    fake, _ = intranet
    fake.fail("/v2/me", upstream)

    async with _client(cookies={"42_access_token": "user-token"}) as client:
        response = await client.get("/api/auth/me")

    assert response.status_code == expected
    assert response.json()["error"]


async def test_health_endpoint(intranet) -> None:
    async with _client() as client:
        response = await client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.parametrize(
    ("content", "expected"),
    [
        ("not json", "Invalid request: body: JSON decode error"),
        ('{"code": 123}', "Invalid request: code: Input should be a valid string"),
    ],
)
async def test_process_rejects_malformed_body(intranet, content, expected) -> None:
    fake, _ = intranet

    async with _client() as client:
        response = await client.post(
            "/api/auth/process",
            content=content,
            headers={"Content-Type": "application/json"},
        )

    assert response.status_code == 400
    assert response.json() == {"error": expected}
    assert "set-cookie" not in response.headers
    assert fake.token_requests == []

"""Integration tests for login, bearer auth and app-wide HTTP behaviour."""

from datetime import timedelta

import pytest

# ---------------------------------------------------------------------------
# POST /api/auth/login
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_login_returns_token_and_profile(client, alice, app):
    response = await client.post(
        "/api/auth/login", json={"username": "alice", "password": "p"}
    )

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["token"]
    assert data["user"]["username"] == "alice"
    assert data["user"]["id"] == alice.user_id
    assert data["user"]["firstName"] == "Alice"
    assert data["user"]["userType"] == "CUSTOMER"
    assert app.state.token_service.verify(data["token"]).username == "alice"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_login_unknown_user(client, alice):
    response = await client.post(
        "/api/auth/login", json={"username": "mallory", "password": "p"}
    )
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid username or password"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_login_wrong_password(client, alice):
    response = await client.post(
        "/api/auth/login", json={"username": "alice", "password": "nope"}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
@pytest.mark.integration
@pytest.mark.parametrize(
    "body",
    [{}, {"username": "alice"}, {"username": " ", "password": "p"}],
)
async def test_login_requires_both_fields(client, body):
    response = await client.post("/api/auth/login", json=body)
    assert response.status_code == 400
    assert response.json() == {"error": "Username and password are required"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_login_with_malformed_json(client):
    response = await client.post(
        "/api/auth/login",
        content="{not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert "error" in response.json()


# ---------------------------------------------------------------------------
# Bearer tokens
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_protected_route_without_token(client):
    response = await client.get("/api/products/42")
    assert response.status_code == 401
    assert response.json() == {"error": "Authorization token required"}
    assert response.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
@pytest.mark.integration
@pytest.mark.parametrize("header", ["Basic abc", "Bearer ", "Token xyz"])
async def test_malformed_authorization_header(client, header):
    response = await client.get("/api/products", headers={"Authorization": header})
    assert response.status_code == 401
    assert response.json() == {"error": "Authorization token required"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_expired_token(client, app, alice):
    token = app.state.token_service.issue("alice", expires_delta=timedelta(seconds=-5))
    response = await client.get(
        "/api/products", headers={"Authorization": f"Bearer {token}"}
    )
    assert response.status_code == 401
    assert response.json() == {"error": "Token expired"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_tampered_token(client, auth_headers):
    headers = {"Authorization": auth_headers["Authorization"] + "x"}
    response = await client.get("/api/products", headers=headers)
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid token"}


# ---------------------------------------------------------------------------
# App-wide behaviour
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "shop"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unknown_endpoint(client, auth_headers):
    response = await client.get("/api/nothing-here", headers=auth_headers)
    assert response.status_code == 404
    assert response.json() == {"error": "Endpoint not found"}


@pytest.mark.asyncio
@pytest.mark.integration
@pytest.mark.parametrize("path", ["/api/products/1/extra", "/api/nothing-here"])
async def test_unmatched_api_path_without_token(client, path):
    """Credentials are checked before the path is routed."""
    response = await client.get(path)
    assert response.status_code == 401
    assert response.json() == {"error": "Authorization token required"}
    assert response.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unmatched_api_path_with_bad_token(client, auth_headers):
    headers = {"Authorization": auth_headers["Authorization"] + "x"}
    response = await client.get("/api/products/1/extra", headers=headers)
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid token"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unsupported_method(client):
    response = await client.get("/api/auth/login")
    assert response.status_code == 405
    assert response.json() == {"error": "Method not allowed"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_responses_carry_cors_and_charset(client):
    """Errors included, every response is UTF-8 JSON with CORS headers."""
    response = await client.get("/api/products")

    assert response.headers["content-type"] == "application/json; charset=utf-8"
    assert response.headers["access-control-allow-origin"] == "*"
    assert "Authorization" in response.headers["access-control-allow-headers"]
    assert response.headers["x-request-id"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_preflight_request(client):
    response = await client.options("/api/products/1")
    assert response.status_code == 200
    assert response.content == b""
    assert response.headers["access-control-allow-methods"] == (
        "GET, POST, PUT, DELETE, OPTIONS"
    )
    assert response.headers["access-control-max-age"] == "3600"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_request_id_is_propagated(client):
    response = await client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["x-request-id"] == "req-123"

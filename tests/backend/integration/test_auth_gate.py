import datetime as dt

import pytest
from httpx import ASGITransport, AsyncClient

from accounts.core.errors import StoreError
from accounts.core.security import TokenIssuer
from accounts.core.store import InMemoryUserStore
from accounts.main import create_app


pytestmark = pytest.mark.asyncio

PROTECTED = [
    ("get", "/api/users/me", None),
    ("get", "/api/users", None),
    ("get", "/api/users/00000000-0000-0000-0000-000000000000", None),
    ("post", "/api/users/block", {"userIds": []}),
    ("post", "/api/users/unblock", {"userIds": []}),
    ("post", "/api/users/delete", {"userIds": []}),
    ("post", "/api/users/check-current-user", {"email": "a@x.com"}),
]


async def _call(client, method, path, body, headers=None):
    if method == "get":
        return await client.get(path, headers=headers or {})
    return await client.post(path, json=body, headers=headers or {})


@pytest.mark.parametrize("method,path,body", PROTECTED)
async def test_protected_routes_require_token(client, method, path, body):
    resp = await _call(client, method, path, body)
    assert resp.status_code == 401
    assert resp.json() == {"error": "Access token is required"}


@pytest.mark.parametrize("method,path,body", PROTECTED)
async def test_non_bearer_scheme_counts_as_missing(client, method, path, body):
    resp = await _call(client, method, path, body, {"Authorization": "Basic dXNlcjpwdw=="})
    assert resp.status_code == 401


@pytest.mark.parametrize("method,path,body", PROTECTED)
async def test_invalid_token_is_403(client, method, path, body):
    resp = await _call(client, method, path, body, {"Authorization": "Bearer invalid.token.here"})
    assert resp.status_code == 403
    assert resp.json() == {"error": "Invalid or expired token"}


@pytest.mark.parametrize("method,path,body", PROTECTED)
async def test_token_older_than_one_hour_is_rejected(app, client, register_user, method, path, body):
    user = await register_user()
    issued = dt.datetime.now(dt.timezone.utc) - dt.timedelta(hours=1, seconds=5)
    token = app.state.tokens.issue(user["id"], now=issued)

    resp = await _call(client, method, path, body, {"Authorization": f"Bearer {token}"})
    assert resp.status_code == 403
    assert resp.json() == {"error": "Invalid or expired token"}


async def test_token_signed_with_other_secret_is_rejected(client, register_user):
    user = await register_user()
    token = TokenIssuer("someone-elses-secret").issue(user["id"])
    resp = await client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 403


async def test_public_routes_need_no_token(client):
    assert (await client.post("/api/users/check-email", json={"email": "a@x.com"})).status_code == 404
    assert (await client.post("/api/users/login", json={"email": "a@x.com", "password": "x"})).status_code == 404


async def test_cors_allows_configured_origin(client):
    resp = await client.options(
        "/api/users/login",
        headers={"Origin": "https://app.example.com", "Access-Control-Request-Method": "POST"},
    )
    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "*"


# ---------------------------------------------------------- store failures ---
class BrokenStore(InMemoryUserStore):
    """Store whose every operation fails, as an unreachable database would."""

    async def find_by_email(self, email):
        raise StoreError("connection refused")

    async def find_by_id(self, user_id):
        raise StoreError("connection refused")

    async def insert(self, **fields):
        raise StoreError("connection refused")

    async def update_status(self, user_ids, status):
        raise StoreError("connection refused")

    async def delete_by_ids(self, user_ids):
        raise StoreError("connection refused")

    async def list_all(self):
        raise StoreError("connection refused")


@pytest.fixture
def broken_client_factory(settings):
    broken_app = create_app(settings, store=BrokenStore())
    token = broken_app.state.tokens.issue("00000000-0000-0000-0000-000000000001")

    def _factory():
        return AsyncClient(transport=ASGITransport(app=broken_app), base_url="http://testserver"), token

    return _factory


@pytest.mark.parametrize(
    "method,path,body",
    [
        ("post", "/api/users/register", {"email": "a@x.com", "name": "A", "role": "u", "status": "unblocked", "password": "p"}),
        ("post", "/api/users/login", {"email": "a@x.com", "password": "p"}),
        ("post", "/api/users/check-email", {"email": "a@x.com"}),
    ]
    + PROTECTED,
)
async def test_store_failure_is_generic_500(broken_client_factory, method, path, body):
    client, token = broken_client_factory()
    async with client:
        resp = await _call(client, method, path, body, {"Authorization": f"Bearer {token}"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Server error"}
    assert "connection refused" not in resp.text

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise

from accounts.config import Settings
from accounts.core.db import build_tortoise_config
from accounts.core.store import InMemoryUserStore, TortoiseUserStore
from accounts.main import create_app


TEST_DB_URL = "sqlite://:memory:"
TEST_SECRET = "tests-secret-key"


async def _init_test_db() -> None:
    """
    Initialize a clean in-memory SQLite database.
    Ensures tables are recreated from scratch.
    """
    await Tortoise.init(config=build_tortoise_config(TEST_DB_URL, "unused"))
    await Tortoise.generate_schemas()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url=TEST_DB_URL,
        database_key="unused",
        jwt_secret=TEST_SECRET,
    )


@pytest_asyncio.fixture(params=["memory", "tortoise"])
async def store(request):
    """
    Every store-backed test runs against both implementations.
    """
    if request.param == "memory":
        yield InMemoryUserStore()
        return
    await _init_test_db()
    yield TortoiseUserStore()
    await Tortoise.close_connections()


@pytest.fixture
def app(settings, store):
    return create_app(settings, store=store)


@pytest_asyncio.fixture
async def client(app):
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client


@pytest_asyncio.fixture
async def register_user(client):
    """
    Factory fixture registering users through the public endpoint.
    """

    async def _register(
        email: str = "a@x.com",
        password: str = "pw123",
        name: str = "A",
        role: str = "user",
        status: str = "unblocked",
    ) -> dict:
        resp = await client.post(
            "/api/users/register",
            json={"email": email, "name": name, "role": role, "status": status, "password": password},
        )
        assert resp.status_code == 201, resp.text
        return resp.json()["user"]

    return _register


@pytest_asyncio.fixture
async def auth_headers(client, register_user):
    """
    Authorization headers of a freshly registered admin, obtained via login.
    """
    await register_user(email="admin@example.com", password="AdminPass!23", name="Admin", role="admin")
    resp = await client.post(
        "/api/users/login",
        json={"email": "admin@example.com", "password": "AdminPass!23"},
    )
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['token']}"}

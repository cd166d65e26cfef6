"""Shared test fixtures for all tests."""
import os
import tempfile
from pathlib import Path

# Settings are read at import time, so point them at a throwaway SQLite file first
_TEST_DIR = Path(tempfile.mkdtemp(prefix="stockroom-tests-"))
_DB_PATH = _TEST_DIR / "test.db"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_PATH}"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_DIR"] = ""
os.environ["DEBUG"] = "false"

import pytest
from sqlalchemy import create_engine
from fastapi.testclient import TestClient

from stockroom.core.database import Base, get_session_factory, close_db
from stockroom.main import app
from stockroom.models import User, Product

PASSWORD = "Secret123"


@pytest.fixture(autouse=True)
def fresh_schema():
    """Recreate every table before each test."""
    engine = create_engine(f"sqlite:///{_DB_PATH}")
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    engine.dispose()
    yield


@pytest.fixture
async def session_factory():
    factory = get_session_factory()
    yield factory
    await close_db()


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


async def _create_user(session, username: str) -> User:
    user = User(
        username=username,
        email=f"{username}@example.com",
        password_hash="not-a-real-hash"
    )
    session.add(user)
    await session.commit()
    return user


@pytest.fixture
async def owner(db_session):
    return await _create_user(db_session, "owner")


@pytest.fixture
async def other_owner(db_session):
    return await _create_user(db_session, "intruder")


@pytest.fixture
def make_product(db_session):
    """Factory inserting a committed product for an owner."""
    counter = {"n": 0}

    async def _make(user: User, stock: int = 0, status: str = "active", name: str = "Widget") -> Product:
        counter["n"] += 1
        product = Product(
            user_id=user.id,
            name=name,
            unique_code=f"TEST-{counter['n']}",
            unit="pcs",
            stock=stock,
            status="out-of-stock" if stock == 0 and status == "active" else status
        )
        db_session.add(product)
        await db_session.commit()
        return product

    return _make


@pytest.fixture
def client():
    """Test client running the application lifespan."""
    with TestClient(app) as test_client:
        yield test_client


def register_and_login(client: TestClient, username: str) -> dict:
    """Create an account through the API and return bearer auth headers."""
    email = f"{username}@example.com"
    response = client.post(
        "/api/v1/auth/register",
        json={"username": username, "email": email, "password": PASSWORD}
    )
    assert response.status_code == 201, response.text

    response = client.post("/api/v1/auth/login", json={"email": email, "password": PASSWORD})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def auth_headers(client):
    return register_and_login(client, "alice")


@pytest.fixture
def other_auth_headers(client):
    return register_and_login(client, "bob")


@pytest.fixture
def product_factory(client, auth_headers):
    """Create products through the API."""
    def _create(stock: int = 0, headers: dict = None, **fields) -> dict:
        payload = {"name": "Widget", "unit": "pcs", "stock": stock, **fields}
        response = client.post("/api/v1/products", json=payload, headers=headers or auth_headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _create

# tests/conftest.py
import asyncio
import os
import tempfile

_db_dir = tempfile.mkdtemp(prefix="storefront-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_db_dir, 'test.db')}"
os.environ["ADMIN_USERNAME"] = "admin"
os.environ["ADMIN_PASSWORD"] = "admin-password"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["PASSWORD_HASH_ITERATIONS"] = "1000"

import pytest
from fastapi.testclient import TestClient

from storefront.db.database import engine, Base
from storefront.main import app


async def _reset_database():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


def auth_headers(client: TestClient, username: str, password: str) -> dict:
    response = client.post("/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def test_client():
    """Fresh database per test; startup seeds the admin account."""
    asyncio.run(_reset_database())
    with TestClient(app) as client:
        yield client


@pytest.fixture
def admin_headers(test_client: TestClient) -> dict:
    return auth_headers(test_client, "admin", "admin-password")


@pytest.fixture
def user_headers(test_client: TestClient) -> dict:
    response = test_client.post("/register", json={"username": "alice", "password": "alice-password"})
    assert response.status_code == 201, response.text
    return auth_headers(test_client, "alice", "alice-password")


@pytest.fixture
def other_user_headers(test_client: TestClient) -> dict:
    response = test_client.post("/register", json={"username": "bob", "password": "bob-password"})
    assert response.status_code == 201, response.text
    return auth_headers(test_client, "bob", "bob-password")


@pytest.fixture
def catalog(test_client: TestClient, admin_headers: dict) -> dict:
    """
    Two categories and five products:

    id  name        price   color  category
    1   Mug          5.00   red    kitchen
    2   Kettle      25.00   black  kitchen
    3   Lamp        40.00   red    living
    4   Armchair   199.99   grey   living
    5   Poster      10.00   red    (none)
    """
    kitchen = test_client.post(
        "/categories", json={"name": "Kitchen", "description": "Cookware"}, headers=admin_headers
    ).json()
    living = test_client.post(
        "/categories", json={"name": "Living room"}, headers=admin_headers
    ).json()

    rows = [
        {"name": "Mug", "price": 5.0, "color": "red", "stock": 50, "category_id": kitchen["id"]},
        {"name": "Kettle", "price": 25.0, "color": "black", "stock": 10, "category_id": kitchen["id"]},
        {"name": "Lamp", "price": 40.0, "color": "red", "stock": 7, "category_id": living["id"]},
        {"name": "Armchair", "price": 199.99, "color": "grey", "stock": 2, "category_id": living["id"]},
        {"name": "Poster", "price": 10.0, "color": "red", "stock": 100, "image": "/static/poster.jpg"},
    ]
    products = []
    for row in rows:
        response = test_client.post("/products", json=row, headers=admin_headers)
        assert response.status_code == 201, response.text
        products.append(response.json())

    return {"kitchen": kitchen, "living": living, "products": products}

import os

# Configuration is read at import time, so the environment is prepared first
os.environ.pop("DATABASE_URL", None)
os.environ["JWT_SECRET"] = "test-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ADMIN_EMAIL"] = "admin@shop.com"
os.environ["ADMIN_PASSWORD"] = "admin123"
os.environ["EXPOSE_TEMP_PASSWORDS"] = "true"

import contextlib

import mongomock
import pytest

import database

database.db = mongomock.MongoClient()["storefront_test"]

from fastapi.testclient import TestClient  # noqa: E402

from main import app  # noqa: E402

ADMIN_EMAIL = "admin@shop.com"
ADMIN_PASSWORD = "admin123"


@pytest.fixture(autouse=True)
def clean_db():
    for name in database.db.list_collection_names():
        database.db.drop_collection(name)
    yield


@pytest.fixture
def db():
    return database.db


@pytest.fixture
def make_client():
    """Factory for clients with independent cookie jars."""
    with contextlib.ExitStack() as stack:
        def _make():
            return stack.enter_context(TestClient(app))
        yield _make


@pytest.fixture
def client(make_client):
    return make_client()


def register(client, email="a@x.com", password="secret1", name="Alice", **extra):
    return client.post("/api/auth/register", json={"name": name, "email": email, "password": password, **extra})


def login(client, email, password):
    return client.post("/api/auth/login", json={"email": email, "password": password})


@pytest.fixture
def customer(make_client):
    c = make_client()
    resp = register(c)
    assert resp.status_code == 201
    c.user = resp.json()["user"]
    return c


@pytest.fixture
def admin(make_client):
    c = make_client()
    resp = login(c, ADMIN_EMAIL, ADMIN_PASSWORD)
    assert resp.status_code == 200
    c.user = resp.json()["user"]
    return c


@pytest.fixture
def product_id(client, db):
    return str(db["product"].find_one({"name": "Smart Fitness Watch"})["_id"])


def order_payload(product_id="p1", total=1000):
    return {
        "items": [{"productId": product_id, "name": "Widget", "price": 500, "quantity": 2}],
        "shippingInfo": {"name": "Alice", "phone": "555-0100", "address": "1 Main St", "paymentMethod": "cod"},
        "totalAmount": total,
    }

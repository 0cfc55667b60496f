"""Shared fixtures: in-memory database, stubbed catalog API, authenticated clients."""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["CSRF_ENABLED"] = "true"

import httpx
import pytest
from fastapi.testclient import TestClient

from config.database import Base, SessionLocal, engine
from main import app
from modules.auth.service import auth_service
from modules.catalog.service import CatalogClient, get_catalog_client
from modules.user.models import User


PRODUCTS = [
    {
        "id": 1,
        "title": "Backpack",
        "price": 109.95,
        "description": "Fits 15 inch laptops",
        "category": "men's clothing",
        "image": "https://fakestoreapi.com/img/1.jpg",
    },
    {
        "id": 2,
        "title": "Slim Fit T-Shirt",
        "price": 22.3,
        "description": "Slim-fitting style",
        "category": "men's clothing",
        "image": "https://fakestoreapi.com/img/2.jpg",
    },
]


def catalog_transport(status_code=200, payload=None):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/products"
        return httpx.Response(status_code, json=PRODUCTS if payload is None else payload)
    return httpx.MockTransport(handler)


def make_catalog(status_code=200, payload=None) -> CatalogClient:
    return CatalogClient(
        base_url="https://catalog.test",
        transport=catalog_transport(status_code, payload),
    )


@pytest.fixture(autouse=True)
def _tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    def _make(username="alice", password="secret", membership="bronze") -> User:
        user = auth_service.sign_up(db, username, password)
        user.membership = membership
        db.commit()
        return user
    return _make


@pytest.fixture
def client():
    app.dependency_overrides[get_catalog_client] = lambda: make_catalog()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def get_csrf(client: TestClient, url: str) -> str:
    """Visit a page that renders a form and return the CSRF cookie it sets."""
    client.get(url)
    return client.cookies.get("csrf_token")


def sign_in(client: TestClient, username="alice", password="secret"):
    token = get_csrf(client, "/auth/signin")
    return client.post(
        "/auth/signin",
        data={"username": username, "password": password, "csrf_token": token},
        follow_redirects=False,
    )


@pytest.fixture
def auth_client(client, make_user):
    """A client signed in as 'alice' (bronze)."""
    make_user("alice", "secret")
    resp = sign_in(client)
    assert resp.status_code == 303
    return client

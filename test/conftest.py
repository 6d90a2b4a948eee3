from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from shopmaster.config import Settings
from shopmaster.main import create_app
from shopmaster.storage import MemoryStorage, SqlStorage
from shopmaster.utils.database import create_tables, make_engine, make_session_factory


def make_settings(backend: str, **overrides) -> Settings:
    values = dict(
        database_url="sqlite://",
        storage_backend=backend,
        secret_key="test-secret",
        seed_demo_data=False,
        log_level="WARNING",
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture(params=["sql", "memory"])
def backend(request):
    return request.param


@pytest.fixture
def app(backend):
    return create_app(make_settings(backend))


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def storage(backend):
    """A bare storage of each backend, outside the API"""
    if backend == "memory":
        yield MemoryStorage()
        return
    engine = make_engine("sqlite://")
    create_tables(engine)
    db = make_session_factory(engine)()
    try:
        yield SqlStorage(db)
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def signup(client):
    """Register a user and leave the client logged in as them"""
    def _signup(username: str, password: str = "secret123", **extra):
        payload = {
            "username": username,
            "email": f"{username}@example.com",
            "password": password,
            "first_name": username.capitalize(),
            "last_name": "Tester",
        }
        payload.update(extra)
        response = client.post("/api/register", json=payload)
        assert response.status_code == 201, response.text
        return response.json()
    return _signup


@pytest.fixture
def login(client):
    def _login(username: str, password: str = "secret123"):
        response = client.post("/api/login", json={"username": username, "password": password})
        assert response.status_code == 200, response.text
        return response.json()
    return _login


@pytest.fixture
def as_admin(app, signup):
    """Log the client in as a freshly promoted admin"""
    def _as_admin(username: str = "boss"):
        user = signup(username)
        with app.state.storage_provider.open() as storage:
            storage.update_user(user["id"], {"is_admin": True})
        return user
    return _as_admin


@pytest.fixture
def catalog(app, client):
    """Two categories and three products written straight through storage"""
    with app.state.storage_provider.open() as storage:
        gadgets = storage.create_category({"name": "Gadgets", "description": "Small electronics"})
        books = storage.create_category({"name": "Books"})
        mug = storage.create_product({
            "name": "Coffee Mug", "description": "Ceramic mug", "price": Decimal("20.00"),
            "sku": "MUG-1", "stock": 10, "category_id": gadgets.id,
        })
        lamp = storage.create_product({
            "name": "Desk Lamp", "description": "LED lamp with dimmer", "price": Decimal("80.00"),
            "sale_price": Decimal("60.00"), "sku": "LAMP-1", "stock": 3, "category_id": gadgets.id,
        })
        novel = storage.create_product({
            "name": "Mystery Novel", "description": "Paperback", "price": Decimal("12.50"),
            "sku": "BOOK-1", "stock": 5, "category_id": books.id,
        })
        return {
            "gadgets": gadgets.id,
            "books": books.id,
            "mug": mug.id,
            "lamp": lamp.id,
            "novel": novel.id,
        }

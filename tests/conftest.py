"""Fixtures partagées: base Mongo simulée, profils, client HTTP."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from agrimart.api import admin, auth, cart, dashboard, orders, products, reviews, state
from agrimart.core import security
from agrimart.models.schemas import CartItem, Product
from agrimart.state import session as session_module

# Modules qui appellent get_database() directement
DB_MODULES = [admin, auth, cart, dashboard, orders, products, reviews, state, security, session_module]

USER_ID = ObjectId("64b000000000000000000001")
ADMIN_ID = ObjectId("64b000000000000000000002")
PRODUCT_ID = "64b0000000000000000000aa"


def make_cursor(rows):
    """Curseur Motor simulé: sort/skip/limit chaînables, to_list async"""
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.skip.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.to_list = AsyncMock(return_value=list(rows))
    return cursor


def make_collection(find_one=None, rows=()):
    collection = MagicMock()
    collection.find_one = AsyncMock(return_value=find_one)
    collection.find = MagicMock(return_value=make_cursor(rows))
    collection.aggregate = MagicMock(return_value=make_cursor([]))
    collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id=ObjectId()))
    collection.insert_many = AsyncMock()
    collection.update_one = AsyncMock(return_value=MagicMock(matched_count=1))
    collection.update_many = AsyncMock()
    collection.delete_one = AsyncMock(return_value=MagicMock(deleted_count=1))
    collection.count_documents = AsyncMock(return_value=0)
    return collection


@pytest.fixture
def db():
    fake = MagicMock()
    for name in ("products", "orders", "order_items", "profiles", "reviews", "sessions", "otps"):
        setattr(fake, name, make_collection())
    return fake


@pytest.fixture
def patch_db(db, monkeypatch):
    for module in DB_MODULES:
        monkeypatch.setattr(module, "get_database", lambda: db)
    return db


@pytest.fixture
def user_profile():
    return {
        "_id": USER_ID,
        "username": "ramesh",
        "email": "ramesh@example.com",
        "address": "12, Main Road, Nashik, Maharashtra, 422001",
        "phone_number": "9876543210",
        "is_admin": False,
    }


@pytest.fixture
def admin_profile():
    return {
        "_id": ADMIN_ID,
        "username": "admin",
        "email": "admin@example.com",
        "is_admin": True,
    }


@pytest.fixture
def product_doc():
    return {
        "_id": ObjectId(PRODUCT_ID),
        "name": "Mini Tractor 25HP",
        "description": "Compact tractor for small farms",
        "price": 350000.0,
        "images": ["tractor.jpg"],
        "category": "Tractors",
        "stock_quantity": 4,
        "colors": ["Red", "Blue"],
        "specifications": {"Power": "25 HP"},
        "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }


def make_product(product_id="p1", name="Rotavator", price=1000.0, category="Tillers",
                 colors=("Red",), specifications=None, description="Heavy duty"):
    return Product(
        id=product_id,
        name=name,
        description=description,
        price=price,
        category=category,
        colors=list(colors),
        specifications=specifications or {},
    )


def make_line(product_id="p1", color="Red", quantity=1, selected=True, price=1000.0):
    return CartItem(
        productId=product_id,
        product=make_product(product_id, price=price),
        quantity=quantity,
        color=color,
        selected=selected,
    )


@pytest.fixture
def app():
    from main import app as main_app
    yield main_app
    main_app.dependency_overrides.clear()


@pytest.fixture
def client(app, patch_db):
    return TestClient(app)


@pytest.fixture
def as_user(app, user_profile):
    app.dependency_overrides[security.get_optional_user] = lambda: user_profile
    app.dependency_overrides[security.get_current_user] = lambda: user_profile
    return user_profile


@pytest.fixture
def as_admin(app, admin_profile):
    app.dependency_overrides[security.get_optional_user] = lambda: admin_profile
    app.dependency_overrides[security.get_current_user] = lambda: admin_profile
    return admin_profile

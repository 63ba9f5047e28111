from decimal import Decimal
import itertools

import pytest

from shared_db.core.database import make_engine
from shared_db.models.definition import build_schema
from shared_db.models.sql_models import MenuCategory, MenuItem, Order, Restaurant, User
from shared_db.services.schema_store import SchemaStore

_counter = itertools.count(1)


@pytest.fixture
def schema():
    return build_schema()


@pytest.fixture
def store(tmp_path, schema):
    # File-backed so several threads can share it
    engine = make_engine(
        f"sqlite:///{tmp_path / 'schema_store.db'}",
        connect_args={"check_same_thread": False},
    )
    store = SchemaStore(engine, schema)
    store.create_all()
    yield store
    store.drop_all()
    engine.dispose()


@pytest.fixture
def make_user(store):
    def _make(**fields):
        n = next(_counter)
        data = {"full_name": f"User {n}", "email": f"user{n}@example.com", "password": "hashed"}
        data.update(fields)
        return store.insert(User, data)
    return _make


@pytest.fixture
def make_restaurant(store, make_user):
    def _make(owner=None, **fields):
        owner = owner or make_user(role="restaurant_owner")
        n = next(_counter)
        data = {"owner_id": owner.id, "name": f"Place {n}", "email": f"place{n}@example.com"}
        data.update(fields)
        return store.insert(Restaurant, data)
    return _make


@pytest.fixture
def menu(store, make_restaurant):
    """A restaurant with one category holding one item."""
    restaurant = make_restaurant()
    category = store.insert(MenuCategory, restaurant_id=restaurant.id, name="Mains")
    item = store.insert(
        MenuItem, restaurant_id=restaurant.id, category_id=category.id,
        name="Jollof Rice", price=Decimal("4.50"),
    )
    return restaurant, category, item


@pytest.fixture
def make_order(store, make_user):
    def _make(restaurant, customer=None, **fields):
        customer = customer or make_user()
        n = next(_counter)
        data = {
            "order_number": f"ORD-{n:06d}",
            "customer_id": customer.id,
            "restaurant_id": restaurant.id,
            "subtotal": Decimal("13.50"),
            "delivery_fee": Decimal("3.00"),
            "total_amount": Decimal("16.50"),
            "delivery_address": "12 Allen Avenue, Ikeja",
        }
        data.update(fields)
        return store.insert(Order, data)
    return _make

from __future__ import annotations

import os

# Must be set before config.settings is imported anywhere
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ORDER_TRANSITION_POLICY"] = "permissive"
os.environ["DELIVERY_FEE"] = "2.99"
os.environ["TAX_RATE"] = "0.10"
os.environ["CUSTOMER_SELF_CANCEL"] = "false"

from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from common.security import create_token  # noqa: E402
from config.database import Base, SessionLocal, engine  # noqa: E402
from main import app  # noqa: E402
from modules.catalog.models import FoodItem, MenuCategory  # noqa: E402
from modules.user.models import User  # noqa: E402


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def customer(db) -> User:
    user = User(name="Jamie Doe", email="jamie@example.com", phone="+15551230001")
    db.add(user)
    db.commit()
    return user


@pytest.fixture()
def other_customer(db) -> User:
    user = User(name="Sam Roe", email="sam@example.com", phone="+15551230002")
    db.add(user)
    db.commit()
    return user


@pytest.fixture()
def admin(db) -> User:
    user = User(name="Admin", email="admin@example.com", phone="+15551239999", is_admin=True)
    db.add(user)
    db.commit()
    return user


def _bearer(user: User) -> dict:
    return {"Authorization": f"Bearer {create_token({'sub': str(user.id)})}"}


@pytest.fixture()
def auth_headers():
    """Build an Authorization header for a user: `auth_headers(customer)`."""
    return _bearer


@pytest.fixture()
def menu(db) -> dict:
    """Two mains and a drink; prices chosen to match the checkout example."""
    mains = MenuCategory(name="Mains", sort_order=0)
    drinks = MenuCategory(name="Drinks", sort_order=1)
    db.add_all([mains, drinks])
    db.flush()

    burger = FoodItem(name="Burger", price=Decimal("5.00"), category_id=mains.id)
    salad = FoodItem(name="Salad", price=Decimal("3.50"), category_id=mains.id)
    soda = FoodItem(name="Soda", price=Decimal("1.25"), category_id=drinks.id)
    db.add_all([burger, salad, soda])
    db.commit()
    return {"burger": burger, "salad": salad, "soda": soda, "mains": mains, "drinks": drinks}


@pytest.fixture()
def checkout_body() -> dict:
    return {
        "delivery_address": {"street": "1 Main St", "city": "Springfield", "zip_code": "10001"},
        "contact_info": {"phone": "+15551230001"},
        "payment_method": "card",
    }

"""
Shared fixtures.

The settings object is built at import time, so the environment is prepared
before anything from ``app`` is imported. Every test gets a fresh in-memory
SQLite database wired into the app through ``dependency_overrides``.
"""
import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("SQLALCHEMY_URL", "sqlite://")
os.environ.setdefault("ENV", "test")
os.environ.setdefault("RAZORPAY_KEY_ID", "rzp_test_key")
os.environ.setdefault("RAZORPAY_KEY_SECRET", "rzp_test_secret")
os.environ.setdefault("RAZORPAY_WEBHOOK_SECRET", "whsec_test")

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, Session

from app.database import build_engine, get_session
from app.main import app
from app.models import Order, Product, Profile, User, UserRole
from app.utils.cache_helpers import catalog_cache
from app.utils.hash import hash_password
from app.utils.token import create_access_token

PASSWORD = "flowers123"


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest.fixture(name="engine")
def engine_fixture():
    engine = build_engine("sqlite://")
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session):
    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    catalog_cache.clear()

    yield TestClient(app)

    app.dependency_overrides.clear()
    catalog_cache.clear()


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------

def create_account(session, email, roles=("customer",), can_login=True):
    user = User(email=email, password=hash_password(PASSWORD), can_login=can_login)
    session.add(user)
    session.flush()

    session.add(Profile(id=user.id, email=email, full_name=email.split("@")[0].title()))
    for role in roles:
        session.add(UserRole(user_id=user.id, role=role))

    session.commit()
    session.refresh(user)
    return user


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def customer(session):
    return create_account(session, "rose@example.com")


@pytest.fixture
def admin(session):
    return create_account(session, "admin@example.com", roles=("customer", "admin"))


@pytest.fixture
def seller(session):
    return create_account(session, "seller@example.com", roles=("customer", "seller"))


@pytest.fixture
def customer_headers(customer):
    return auth_headers(customer)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def seller_headers(seller):
    return auth_headers(seller)


# ---------------------------------------------------------------------------
# Catalog and orders
# ---------------------------------------------------------------------------

@pytest.fixture
def make_product(session):
    def _make(name="Red Rose Bouquet", price=45.0, category="bouquet", is_active=True):
        product = Product(name=name, price=price, category=category, is_active=is_active)
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    return _make


@pytest.fixture
def make_order(session):
    def _make(status="pending", final_price=None, user=None, total_amount=99.0, **fields):
        order = Order(
            user_id=user.id if user else None,
            customer_name="Rose Tyler",
            customer_email="rose@example.com",
            delivery_address="12 Petal Lane",
            total_amount=total_amount,
            final_price=final_price,
            status=status,
            **fields,
        )
        session.add(order)
        session.commit()
        session.refresh(order)
        return order

    return _make

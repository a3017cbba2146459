import os

# settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("jwt_secret", "test-secret")
os.environ.setdefault("ENV", "test")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("ADMIN_EMAILS", '["owner@bazarika.test"]')

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

import bazarika.models  # noqa: F401
from bazarika.constants import roles
from bazarika.database import engine, get_session
from bazarika.main import app
from bazarika.models.address import Address
from bazarika.models.category import Category
from bazarika.models.coupon import Coupon
from bazarika.models.product import Product
from bazarika.models.profile import Profile
from bazarika.utils.token import create_access_token


@pytest.fixture()
def session():
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


@pytest.fixture()
def client(session):
    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    yield TestClient(app)
    app.dependency_overrides.clear()


def bearer(sub, email=None, full_name=None):
    claims = {"sub": sub}
    if email:
        claims["email"] = email
    if full_name:
        claims["user_metadata"] = {"full_name": full_name}
    return {"Authorization": f"Bearer {create_access_token(claims)}"}


@pytest.fixture()
def auth_headers():
    """Build headers for an arbitrary signed-in identity."""
    return bearer


@pytest.fixture()
def customer_headers():
    return bearer("user-1", "asha@example.com", "Asha Rahman")


@pytest.fixture()
def other_headers():
    return bearer("user-2", "karim@example.com", "Karim Uddin")


@pytest.fixture()
def admin_headers():
    # admin through the configured e-mail list
    return bearer("admin-1", "owner@bazarika.test", "Store Owner")


@pytest.fixture()
def make_category(session):
    def _make(name="Sarees", slug=None, **kwargs):
        category = Category(name=name, slug=slug or name.lower().replace(" ", "-"), **kwargs)
        session.add(category)
        session.commit()
        session.refresh(category)
        return category

    return _make


@pytest.fixture()
def make_product(session):
    def _make(name="Jamdani Saree", price=1500, stock_quantity=20, slug=None, **kwargs):
        product = Product(
            name=name,
            slug=slug or name.lower().replace(" ", "-"),
            price=price,
            stock_quantity=stock_quantity,
            **kwargs,
        )
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    return _make


@pytest.fixture()
def make_coupon(session):
    def _make(code="SAVE10", discount_type="percentage", discount_value=10, **kwargs):
        coupon = Coupon(code=code, discount_type=discount_type, discount_value=discount_value, **kwargs)
        session.add(coupon)
        session.commit()
        session.refresh(coupon)
        return coupon

    return _make


@pytest.fixture()
def make_profile(session):
    def _make(id="user-1", email="asha@example.com", full_name="Asha Rahman", role=roles.CUSTOMER, **kwargs):
        profile = Profile(id=id, email=email, full_name=full_name, role=role, **kwargs)
        session.add(profile)
        session.commit()
        session.refresh(profile)
        return profile

    return _make


@pytest.fixture()
def make_address(session):
    def _make(user_id="user-1", **kwargs):
        values = {
            "full_name": "Asha Rahman",
            "phone": "01711000000",
            "address_line1": "House 12, Road 5",
            "city": "Dhaka",
            "district": "Dhaka",
        }
        values.update(kwargs)
        address = Address(user_id=user_id, **values)
        session.add(address)
        session.commit()
        session.refresh(address)
        return address

    return _make

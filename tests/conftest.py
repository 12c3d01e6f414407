"""
Shared test fixtures for the Storefront service.

DATABASE_URL must point at SQLite before any storefront module is imported:
``storefront.database`` builds the engine at import time and ``storefront.main``
creates the tables. ``sqlite://`` with the StaticPool configured in
``database.py`` gives one in-memory database shared by the TestClient's
worker threads.
"""
import os
from decimal import Decimal

os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient

from storefront import crud, models
from storefront.database import Base, SessionLocal, engine
from storefront.main import app
from storefront.roles import Role
from storefront.security import hash_password
from storefront.tokens import issue_token

DEFAULT_PASSWORD = "secret-pass-123"


@pytest.fixture(autouse=True)
def reset_schema():
    """Give every test an empty schema."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(db_session):
    """Factory creating a user row directly through crud."""

    def _make_user(email="user@example.com", role=Role.CUSTOMER, password=DEFAULT_PASSWORD,
                   first_name="Test", last_name="User"):
        return crud.create_user(
            db_session,
            first_name=first_name,
            last_name=last_name,
            email=email,
            password_hash=hash_password(password),
            role=role.value,
        )

    return _make_user


@pytest.fixture
def make_product(db_session):
    """Factory creating a product row directly through the ORM."""

    def _make_product(name="Widget", description="A widget", stock=5, price=Decimal("9.99")):
        product = models.Product(name=name, description=description, stock=stock, price=price)
        db_session.add(product)
        db_session.commit()
        db_session.refresh(product)
        return product

    return _make_product


@pytest.fixture
def auth_header():
    """Build an Authorization header carrying a fresh token for an identity."""

    def _auth_header(user_id: int, role: Role) -> dict:
        return {"Authorization": f"Bearer {issue_token(user_id, role)}"}

    return _auth_header

"""Shared fixtures: a fresh SQLite database per test and API clients bound to it."""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from storefront.config import settings
from storefront.database import Base, get_db, init_db
from storefront.main import app
from storefront.models.product import Product
from storefront.models.users import User
from storefront.utils.hashing import get_password_hash

PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def fast_hashing(monkeypatch):
    monkeypatch.setattr(settings, "BCRYPT_ROUNDS", 4)


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'storefront_test.db'}",
        connect_args={"check_same_thread": False},
    )
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_client(session_factory):
    """Build API clients that already hold a CSRF token."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db

    def _make(with_csrf=True):
        client = TestClient(app)
        if with_csrf:
            token = client.get("/csrf-token").json()["csrfToken"]
            client.headers[settings.CSRF_HEADER_NAME] = token
        return client

    yield _make
    app.dependency_overrides.clear()


@pytest.fixture
def client(make_client):
    return make_client()


@pytest.fixture
def make_user(db):
    def _make(email="alice@example.com", name="Alice", password=PASSWORD, is_admin=False):
        user = User(name=name, email=email, password_hash=get_password_hash(password), is_admin=is_admin)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_product(db):
    def _make(name="Widget", price="10.00", category="Gadgets", image_url=None):
        product = Product(name=name, price=Decimal(price), category=category, image_url=image_url)
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make


def login(client, email, password=PASSWORD):
    response = client.post("/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response


@pytest.fixture
def user_client(make_client, make_user):
    user = make_user()
    client = make_client()
    login(client, user.email)
    client.user = user
    return client


@pytest.fixture
def admin_client(make_client, make_user):
    admin = make_user(email="root@shop.example", name="Root", is_admin=True)
    client = make_client()
    login(client, admin.email)
    client.user = admin
    return client

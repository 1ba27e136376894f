import os

os.environ["EXPENSE_DATABASE_URL"] = "sqlite://"
os.environ["EXPENSE_LOG_JSON"] = "false"
os.environ["EXPENSE_SECRET_KEY"] = "test-secret"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from main import app


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(client):
    """Registers a user and returns the Authorization headers for them."""

    def _make_user(email="alice@example.com", password="secret123"):
        response = client.post(
            "/auth/register", json={"email": email, "password": password}
        )
        assert response.status_code == 201, response.text
        token = response.json()["access_token"]
        return {"Authorization": f"Bearer {token}"}

    return _make_user


@pytest.fixture
def headers(make_user):
    return make_user()


@pytest.fixture
def food(client, headers):
    response = client.post(
        "/api/categories", json={"name": "Food", "color": "#22c55e"}, headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()

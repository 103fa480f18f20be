import mongomock
import pytest

from app import create_app
from config import TestConfig


@pytest.fixture
def mongo_client():
    return mongomock.MongoClient()


@pytest.fixture
def app(mongo_client):
    return create_app(TestConfig, mongo_client=mongo_client)


@pytest.fixture
def db(app):
    return app.extensions["mongo"].db


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def register(client):
    def _register(name="Ann", email="ann@x.com", password="pw1", **extra):
        return client.post("/api/auth/register", json={"name": name, "email": email, "password": password, **extra})
    return _register


@pytest.fixture
def login_as(app, register):
    """Register + log in a user on a fresh test client and return that client."""
    def _login_as(name="Ann", email="ann@x.com", password="pw1"):
        register(name=name, email=email, password=password)
        c = app.test_client()
        resp = c.post("/api/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.get_json()
        return c
    return _login_as

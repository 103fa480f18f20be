import pytest

from app import create_app
from auth import limiter
from config import ProdConfig, TestConfig, validate_required_secrets


class ProdCookieConfig(ProdConfig):
    TESTING = True
    JWT_SECRET_KEY = TestConfig.JWT_SECRET_KEY
    MONGO_DB = TestConfig.MONGO_DB
    CORS_ORIGINS = TestConfig.CORS_ORIGINS
    RATELIMIT_ENABLED = False


class RateLimitedConfig(TestConfig):
    RATELIMIT_ENABLED = True


@pytest.fixture
def limited_client(mongo_client):
    app = create_app(RateLimitedConfig, mongo_client=mongo_client)
    limiter.reset()
    yield app.test_client()
    limiter.reset()


def test_prod_cookie_is_secure_and_strict(mongo_client):
    app = create_app(ProdCookieConfig, mongo_client=mongo_client)
    c = app.test_client()
    c.post("/api/auth/register", json={"name": "Ann", "email": "ann@x.com", "password": "pw1"})
    resp = c.post("/api/auth/login", json={"email": "ann@x.com", "password": "pw1"})
    assert resp.status_code == 200

    set_cookie = resp.headers["Set-Cookie"]
    assert "Secure" in set_cookie
    assert "SameSite=Strict" in set_cookie
    assert "HttpOnly" in set_cookie
    assert "Max-Age=604800" in set_cookie


def test_dev_cookie_is_not_secure(client, register):
    register()
    resp = client.post("/api/auth/login", json={"email": "ann@x.com", "password": "pw1"})
    assert "Secure" not in resp.headers["Set-Cookie"]


def test_register_is_rate_limited(limited_client):
    codes = [
        limited_client.post(
            "/api/auth/register",
            json={"name": f"User {i}", "email": f"user{i}@x.com", "password": "pw1"},
        ).status_code
        for i in range(6)
    ]
    assert codes == [201] * 5 + [429]


def test_login_is_rate_limited(limited_client):
    codes = [
        limited_client.post("/api/auth/login", json={"email": "nobody@x.com", "password": "nope"}).status_code
        for _ in range(11)
    ]
    assert codes == [400] * 10 + [429]


def test_prod_requires_secrets(monkeypatch):
    monkeypatch.setenv("ENV", "prod")
    monkeypatch.delenv("APP_SECRET_KEY", raising=False)
    monkeypatch.setenv("JWT_SECRET_KEY", "set")
    with pytest.raises(RuntimeError):
        validate_required_secrets()

    monkeypatch.setenv("APP_SECRET_KEY", "set")
    validate_required_secrets()


def test_dev_does_not_require_secrets(monkeypatch):
    monkeypatch.setenv("ENV", "dev")
    monkeypatch.delenv("APP_SECRET_KEY", raising=False)
    monkeypatch.delenv("JWT_SECRET_KEY", raising=False)
    validate_required_secrets()

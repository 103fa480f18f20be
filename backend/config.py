# config.py
import os
from datetime import timedelta

def _csv_env(name: str, default: str = "") -> list[str]:
    val = os.getenv(name, default)
    # split only if non-empty; strip whitespace
    return [x.strip() for x in val.split(",") if x.strip()] if val else []

def _default_origins() -> list[str]:
    origins = ["http://localhost:5173", "http://localhost:3000"]
    frontend = (os.getenv("FRONTEND_URL") or "").strip().rstrip("/")
    if frontend:
        origins.append(frontend)
    return origins

class BaseConfig:
    DEBUG = False
    TESTING = False
    MAX_CONTENT_LENGTH = 2 * 1024 * 1024  # resumes are JSON only
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Secrets (must be set in env for prod)
    SECRET_KEY = os.getenv("APP_SECRET_KEY") or "dev-only-secret-change-me"
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY") or "dev-only-jwt-secret-change-me"

    # Mongo
    MONGO_URI = os.getenv("MONGO_URI") or os.getenv("MONGO_URL") or "mongodb://localhost:27017"
    MONGO_DB = os.getenv("MONGO_DB", "resume_builder")

    # CORS (exact allow-list; also read by flask_cors)
    CORS_ORIGINS = _csv_env("CORS_ORIGINS") or _default_origins()

    # Session cookie carrying the JWT
    JWT_TOKEN_LOCATION = ["cookies"]
    JWT_ACCESS_COOKIE_NAME = "token"
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=7)
    JWT_SESSION_COOKIE = False  # persistent cookie; login passes max_age = token expiry
    JWT_COOKIE_CSRF_PROTECT = False
    JWT_COOKIE_SECURE = False
    JWT_COOKIE_SAMESITE = "Lax"

    # Rate limits
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_ENABLED = True

class DevConfig(BaseConfig):
    DEBUG = True

class ProdConfig(BaseConfig):
    JWT_COOKIE_SECURE = True
    JWT_COOKIE_SAMESITE = os.getenv("COOKIE_SAMESITE", "Strict")

class TestConfig(BaseConfig):
    TESTING = True
    SECRET_KEY = "test-secret"
    JWT_SECRET_KEY = "test-jwt-secret-with-enough-length-for-hs256"
    MONGO_DB = "resume_builder_test"
    CORS_ORIGINS = ["http://localhost:5173", "http://localhost:3000"]
    RATELIMIT_ENABLED = False
    LOG_LEVEL = "WARNING"

def is_prod() -> bool:
    return os.getenv("ENV") == "prod"

def validate_required_secrets():
    if is_prod():
        if not os.getenv("APP_SECRET_KEY") or not os.getenv("JWT_SECRET_KEY"):
            raise RuntimeError("APP_SECRET_KEY and JWT_SECRET_KEY must be set in production")

# app.py
from __future__ import annotations
import logging
import os
from datetime import date, datetime, timezone
from pathlib import Path

from bson import ObjectId
from dotenv import load_dotenv
from flask import Flask, jsonify
from flask.json.provider import DefaultJSONProvider
from flask_cors import CORS
from flask_talisman import Talisman

# --- Load env BEFORE importing config (so config sees env) ---
ENV_PATH = Path(__file__).with_name(".env")
load_dotenv(ENV_PATH)

# --- Local modules ---
from config import DevConfig, ProdConfig, is_prod, validate_required_secrets
from auth import auth_bp, profile_bp, init_auth
from errors import register_error_handlers
from pipeline import PUBLIC_STAGES, install_stages
from resumes import resume_bp
from storage import MongoStorage

logger = logging.getLogger(__name__)


class MongoJSONProvider(DefaultJSONProvider):
    """ObjectId -> str, datetimes -> ISO-8601 in UTC."""

    @staticmethod
    def default(o):
        if isinstance(o, ObjectId):
            return str(o)
        if isinstance(o, datetime):
            if o.tzinfo is None:
                o = o.replace(tzinfo=timezone.utc)
            return o.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
        if isinstance(o, date):
            return o.isoformat()
        return DefaultJSONProvider.default(o)


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_app(config_object=None, mongo_client=None) -> Flask:
    """Build the API app.

    ``mongo_client`` lets callers (tests) hand in an already-built client;
    otherwise one is opened from MONGO_URI.
    """
    app = Flask(__name__)
    app.json = MongoJSONProvider(app)
    app.config.from_object(config_object or (ProdConfig if is_prod() else DevConfig))
    validate_required_secrets()  # raises only when ENV=prod and secrets missing
    configure_logging(app.config.get("LOG_LEVEL", "INFO"))
    app.url_map.strict_slashes = False

    # Storage handle: one client per process, closed at exit
    MongoStorage(app.config["MONGO_URI"], app.config["MONGO_DB"], client=mongo_client).init_app(app)

    CORS(
        app,
        resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}},
        supports_credentials=True,
        allow_headers=["Content-Type", "Authorization"],
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    )

    # Security headers; HTTPS only forced in prod
    Talisman(
        app,
        force_https=is_prod() and not app.config.get("TESTING", False),
        content_security_policy={"default-src": ["'none'"], "frame-ancestors": ["'none'"]},
        session_cookie_secure=app.config.get("JWT_COOKIE_SECURE", False),
        frame_options="DENY",
        referrer_policy="strict-origin-when-cross-origin",
    )

    # Pipeline: origin check -> body parse run for every request,
    # the auth gate is installed on the protected blueprints themselves
    install_stages(app, PUBLIC_STAGES)

    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(profile_bp, url_prefix="/api/auth")
    app.register_blueprint(resume_bp, url_prefix="/api/resume")
    init_auth(app)
    register_error_handlers(app)

    @app.get("/api")
    def health():
        return jsonify({"status": "API is running"})

    logger.info("API ready (debug=%s, origins=%s)", app.config.get("DEBUG"), app.config["CORS_ORIGINS"])
    return app


# ------------------------------
# Entrypoint
# ------------------------------
if __name__ == "__main__":
    application = create_app()
    application.run(host="0.0.0.0", port=int(os.getenv("PORT", "8000")), debug=application.config.get("DEBUG", False))

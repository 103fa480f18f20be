# auth.py
from __future__ import annotations
import logging

from flask import Blueprint, current_app, g, jsonify
from flask_jwt_extended import (
    JWTManager, create_access_token, set_access_cookies, unset_jwt_cookies
)
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from pydantic import ValidationError
from pymongo.errors import PyMongoError

from auth_store import create_user, find_user_by_email, find_user_by_id, public_user, verify_password
from errors import Internal, InvalidCredentials, NotFound, Unauthorized, ValidationFailed, error_response
from pipeline import PROTECTED_STAGES, install_stages
from schemas import LoginRequest, RegisterRequest
from storage import get_db

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)
# profile shares the /api/auth prefix but sits behind the auth gate
profile_bp = install_stages(Blueprint("profile", __name__), PROTECTED_STAGES)

# rate limiter; will be bound to app in init_auth()
limiter = Limiter(key_func=get_remote_address, default_limits=["200/hour"])

jwt = JWTManager()

@jwt.unauthorized_loader
def _missing_token(reason: str):
    return error_response(Unauthorized("Unauthorized - No token provided"))

@jwt.invalid_token_loader
def _invalid_token(reason: str):
    logger.warning("rejected session token: %s", reason)
    return error_response(Unauthorized("Unauthorized - Invalid token"))

@jwt.expired_token_loader
def _expired_token(jwt_header, jwt_payload):
    return error_response(Unauthorized("Unauthorized - Invalid token"))


@auth_bp.route("/register", methods=["POST"], strict_slashes=False)
@limiter.limit("5/minute")
def register():
    """
    Request: { "name": "...", "email": "...", "password": "...", "profileImageUrl"?: "..." }
    Response 201: { "message": "...", "user": { "id", "_id", "name", "email" } }
    """
    try:
        body = RegisterRequest.model_validate(g.body)
    except ValidationError as e:
        raise ValidationFailed.from_pydantic(e)

    try:
        user = create_user(get_db(), body.name, body.email, body.password, body.profileImageUrl)
    except PyMongoError as e:
        raise Internal("Error registering user", e)

    return jsonify({
        "message": "User registered successfully",
        "user": {"id": user["_id"], "_id": user["_id"], "name": user["name"], "email": user["email"]},
    }), 201


@auth_bp.route("/login", methods=["POST"], strict_slashes=False)
@limiter.limit("10/minute")
def login():
    """
    Request: { "email": "...", "password": "..." }
    Sets the `token` cookie (HTTP-only, 7 days). Unknown email and wrong
    password get the same answer.
    """
    try:
        body = LoginRequest.model_validate(g.body)
    except ValidationError:
        raise InvalidCredentials()

    try:
        user = find_user_by_email(get_db(), body.email)
    except PyMongoError as e:
        raise Internal("Error logging in", e)

    if not user or not verify_password(body.password, user.get("password", "")):
        logger.warning("failed login for %s", body.email)
        raise InvalidCredentials()

    token = create_access_token(identity=str(user["_id"]))
    resp = jsonify({
        "message": "Login successful",
        "user": {
            "id": user["_id"],
            "_id": user["_id"],
            "name": user["name"],
            "email": user["email"],
            "profileImageUrl": user.get("profileImageUrl"),
        },
    })
    # cookie lives exactly as long as the token inside it
    max_age = int(current_app.config["JWT_ACCESS_TOKEN_EXPIRES"].total_seconds())
    set_access_cookies(resp, token, max_age=max_age)
    logger.info("login %s", body.email)
    return resp, 200


@auth_bp.route("/logout", methods=["POST"], strict_slashes=False)
def logout():
    # stateless: the token stays valid until expiry, we only drop the cookie
    resp = jsonify({"message": "Logged out successfully"})
    unset_jwt_cookies(resp)
    return resp, 200


@profile_bp.route("/profile", methods=["GET"], strict_slashes=False)
def profile():
    try:
        user = find_user_by_id(get_db(), g.user_id)
    except PyMongoError as e:
        raise Internal("Error fetching profile", e)
    if not user:
        raise NotFound("User not found")
    return jsonify(public_user(user)), 200


def init_auth(app):
    """
    Call once from the app factory, after the blueprints are registered:
        app.register_blueprint(auth_bp, url_prefix="/api/auth")
        app.register_blueprint(profile_bp, url_prefix="/api/auth")
        init_auth(app)
    """
    jwt.init_app(app)
    limiter.init_app(app)

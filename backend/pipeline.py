"""Request pipeline stages.

Every stage is a ``before_request`` callable: it returns ``None`` to let the
request through, returns a response to short-circuit, or raises. Stages are
registered in the order given, app-level first, then blueprint-level:

    PUBLIC_STAGES     origin check -> body parse
    PROTECTED_STAGES  auth gate            (per protected blueprint)
"""
from __future__ import annotations
import logging
from typing import Callable, Iterable

from flask import current_app, g, request
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from errors import Forbidden, ValidationFailed, error_response

logger = logging.getLogger(__name__)

BODY_METHODS = {"POST", "PUT", "PATCH"}


def check_origin():
    origin = request.headers.get("Origin")
    if not origin:
        # non-browser clients (curl, mobile, server-to-server)
        return None
    if origin.rstrip("/") in current_app.config.get("CORS_ORIGINS", []):
        return None
    logger.warning("rejected origin %s for %s %s", origin, request.method, request.path)
    return error_response(Forbidden("Not allowed by CORS"))


def parse_body():
    g.body = {}
    if request.method not in BODY_METHODS:
        return None
    if not request.get_data(cache=True):
        return None
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        return error_response(ValidationFailed([], "Malformed JSON body"))
    g.body = data
    return None


def require_session():
    """Auth gate: the `token` cookie must carry a valid, unexpired JWT.

    Missing/invalid tokens raise inside flask_jwt_extended and are rendered
    by the loaders registered in ``auth.init_auth``.
    """
    if request.method == "OPTIONS":
        return None
    verify_jwt_in_request()
    g.user_id = get_jwt_identity()
    return None


PUBLIC_STAGES = (check_origin, parse_body)
PROTECTED_STAGES = (require_session,)


def install_stages(target, stages: Iterable[Callable]):
    """Register stages on an app or blueprint, preserving order."""
    for stage in stages:
        target.before_request(stage)
    return target

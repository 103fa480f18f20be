# errors.py
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

from flask import jsonify
from pydantic import ValidationError
from pymongo.errors import PyMongoError
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None, detail: Any = None):
        super().__init__(message or self.message)
        if message:
            self.message = message
        self.detail = detail

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"message": self.message}
        if self.detail is not None:
            body["error"] = str(self.detail)
        return body


class ValidationFailed(ApiError):
    status_code = 400
    message = "Invalid request body"

    def __init__(self, errors: List[Dict[str, str]], message: Optional[str] = None):
        super().__init__(message)
        self.errors = errors

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> "ValidationFailed":
        return cls([
            {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
            for err in exc.errors()
        ])

    def to_dict(self):
        body = super().to_dict()
        body["errors"] = self.errors
        return body


class Conflict(ApiError):
    status_code = 400
    message = "User already exists"


class InvalidCredentials(ApiError):
    status_code = 400
    message = "Invalid credentials"


class Unauthorized(ApiError):
    status_code = 401
    message = "Unauthorized"


class Forbidden(ApiError):
    status_code = 403
    message = "Forbidden"


class NotFound(ApiError):
    status_code = 404
    message = "Not found"


class Internal(ApiError):
    status_code = 500


def error_response(err: ApiError):
    return jsonify(err.to_dict()), err.status_code


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def _api_error(err: ApiError):
        if err.status_code >= 500:
            logger.error("%s: %s", err.message, err.detail)
        return error_response(err)

    @app.errorhandler(PyMongoError)
    def _storage_error(err: PyMongoError):
        logger.exception("Unhandled storage failure")
        return error_response(Internal("Database error", err))

    @app.errorhandler(HTTPException)
    def _http_error(err: HTTPException):
        return jsonify({"message": err.description or err.name}), err.code

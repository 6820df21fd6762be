from __future__ import annotations

import logging
from functools import wraps
from typing import Any

from flask import Flask, current_app, g, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import AuthenticationError, DomainError, ValidationError
from ..users.model import Identity

logger = logging.getLogger(__name__)


def _bearer_token() -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Access token is required")
    return token.strip()


def login_required(view):
    """Resolve the caller identity from the bearer token before running the view."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        tokens = current_app.extensions["smartkid"].token_service
        g.identity = tokens.verify_token(_bearer_token())
        return view(*args, **kwargs)

    return wrapper


def current_identity() -> Identity:
    return g.identity


def json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(err: DomainError):
        logger.info("%s %s -> %d %s", request.method, request.path, err.status_code, err)
        body: dict[str, Any] = {"message": str(err)}
        if isinstance(err, ValidationError) and err.errors:
            body["errors"] = err.errors
        return jsonify(body), err.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(err: HTTPException):
        return jsonify({"message": err.description}), err.code

    @app.errorhandler(Exception)
    def handle_unexpected(err: Exception):
        # Never leak internals to the client.
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"message": "Internal server error"}), 500

from __future__ import annotations

import logging
from dataclasses import fields, is_dataclass
from datetime import date, datetime, time
from enum import Enum
from functools import wraps

from flask import Flask, jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthorizationError,
    DependencyFailure,
    DomainError,
    NotFoundError,
    StateConflictError,
    ValidationError,
)
from ..core.scope import Viewer

log = logging.getLogger(__name__)


def ok(data=None, status=200, **meta):
    payload = {"success": True, "data": data}
    if meta:
        payload["meta"] = meta
    return jsonify(payload), status


def fail(message="Bad Request", status=400, code=None, detail=None):
    err = {"message": message}
    if code:
        err["code"] = code
    if detail:
        err["detail"] = detail
    return jsonify({"success": False, "error": err}), status


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return fail("Authentication required", status=401, code="UNAUTHENTICATED")
        return view(*args, **kwargs)

    return wrapper


def current_viewer() -> Viewer:
    team_id = session.get("team_id")
    return Viewer(
        user_id=int(session["user_id"]),
        company_id=int(session["company_id"]),
        role=Role(session.get("role", Role.WORKER.value)),
        team_id=int(team_id) if team_id is not None else None,
    )


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def _validation(e: ValidationError):
        return fail(str(e), status=400, code="VALIDATION_ERROR")

    @app.errorhandler(NotFoundError)
    def _not_found(e: NotFoundError):
        return fail(str(e), status=404, code="NOT_FOUND")

    @app.errorhandler(StateConflictError)
    def _conflict(e: StateConflictError):
        detail = {"current_status": e.current_status} if e.current_status else None
        return fail(str(e), status=409, code="STATE_CONFLICT", detail=detail)

    @app.errorhandler(AuthorizationError)
    def _forbidden(e: AuthorizationError):
        return fail(str(e), status=403, code="FORBIDDEN")

    @app.errorhandler(DependencyFailure)
    def _dependency(e: DependencyFailure):
        log.warning("Dependency failure surfaced to request: %s", e)
        return fail(str(e), status=502, code="DEPENDENCY_FAILURE")

    @app.errorhandler(DomainError)
    def _domain(e: DomainError):
        return fail(str(e), status=400, code="DOMAIN_ERROR")


def to_payload(value):
    """Dataclasses, enums and dates -> JSON-ready structures."""
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_payload(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: to_payload(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_payload(v) for v in value]
    return value


def body_json() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data

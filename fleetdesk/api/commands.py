"""Command endpoints invoked by the desktop shell.

Each route runs one provisioning orchestrator and reports success or a
single error message. Platform errors become text only here.

Routes:
    POST /commands/create_user  {username, password, display_name?, role}
    POST /commands/update_user  {id, display_name?, role, password?}
    POST /commands/delete_user  {id}

Bodies may be wrapped as {"payload": {...}}.
"""
from __future__ import annotations
import logging
from typing import Any, Callable

from flask import Blueprint, abort, current_app, jsonify, request

from fleetdesk.core import audit, provisioning_service
from fleetdesk.core.platform import (
    ConfigError,
    PlatformError,
    ReconciliationError,
    RemoteApiError,
    TransportError,
)
from fleetdesk.core.provisioning_service import (
    UserCreationRequest,
    UserDeletionRequest,
    UserUpdateRequest,
)
from fleetdesk.core.validators import unwrap_payload

bp = Blueprint("commands", __name__)

logger = logging.getLogger(__name__)

OPERATOR = "desktop-app"

# HTTP status reported to the shell for each error kind
ERROR_STATUS = (
    (ReconciliationError, 409),
    (ConfigError, 500),
    (TransportError, 502),
    (RemoteApiError, 502),
)


def _error_status(exc: PlatformError) -> int:
    for error_type, status in ERROR_STATUS:
        if isinstance(exc, error_type):
            return status
    return 500


def _parse(request_type):
    """Build a command request from the JSON body or abort with 400."""
    try:
        return request_type.from_payload(unwrap_payload(request.get_json(silent=True)))
    except ValueError as exc:
        abort(400, description=str(exc))


def _execute(event_type: audit.EventType, target: str, details: dict, operation: Callable[[], Any]):
    """Run an orchestrator, audit the outcome, and format platform errors.
    
    Returns:
        (result, None) on success, (None, error response) on failure
    """
    try:
        result = operation()
    except PlatformError as exc:
        logger.warning(f"{event_type} failed for {target}: {exc}")
        audit.safe_log_event(
            event_type,
            target,
            operator=OPERATOR,
            details={**details, "error": str(exc)},
            success=False,
        )
        return None, (jsonify({"error": str(exc)}), _error_status(exc))
    except Exception as exc:
        # Audited here, answered by the generic 500 handler
        audit.safe_log_event(
            event_type,
            target,
            operator=OPERATOR,
            details={**details, "error": f"unexpected {type(exc).__name__}"},
            success=False,
        )
        raise

    audit.safe_log_event(event_type, target, operator=OPERATOR, details=details, success=True)
    return result, None


@bp.post("/create_user")
def create_user():
    """Create a user (or adopt an existing identity) and set its profile."""
    cfg = current_app.config["APP_CONFIG"]
    payload = _parse(UserCreationRequest)
    
    user_id, error = _execute(
        "create_user",
        payload.username,
        {"role": payload.role},
        lambda: provisioning_service.create_user(cfg, payload),
    )
    if error:
        return error
    return jsonify({"ok": True, "id": user_id})


@bp.post("/update_user")
def update_user():
    """Update identity credentials/metadata and the profile of a user."""
    cfg = current_app.config["APP_CONFIG"]
    payload = _parse(UserUpdateRequest)
    
    details = {
        "role": payload.role,
        "password_changed": bool(payload.password and payload.password.strip()),
    }
    _, error = _execute(
        "update_user",
        payload.id,
        details,
        lambda: provisioning_service.update_user(cfg, payload),
    )
    if error:
        return error
    return jsonify({"ok": True})


@bp.post("/delete_user")
def delete_user():
    """Delete the identity and profile of a user."""
    cfg = current_app.config["APP_CONFIG"]
    payload = _parse(UserDeletionRequest)
    
    _, error = _execute(
        "delete_user",
        payload.id,
        {},
        lambda: provisioning_service.delete_user(cfg, payload),
    )
    if error:
        return error
    return jsonify({"ok": True})

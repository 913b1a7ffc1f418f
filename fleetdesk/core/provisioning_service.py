"""
Provisioning Service Layer: user create/update/delete orchestration

This module keeps the platform identity record and the application profile
row of each user consistent. It is used by the HTTP command surface and by
the admin bootstrap script.

Architecture:
    Desktop shell ──> /commands/* ──┐
                                    ├──> provisioning_service.py ──> core.platform ──> platform API
    scripts/create_admin.py ────────┘

Features:
    - Deterministic email derivation from usernames
    - Creation that reconciles "user already exists" conflicts
    - Partial identity updates (only non-blank fields are sent)
    - Idempotent deletion (404 tolerated on both records)
"""

from __future__ import annotations
import datetime
import logging
import secrets
import string
from dataclasses import dataclass
from typing import Any, Dict, Optional

from fleetdesk.config.settings import AppConfig
from fleetdesk.core.platform import (
    IdentityService,
    PlatformClient,
    ProfileService,
    ReconciliationError,
    RemoteIdentity,
    error_message_from_body,
    identity_from_creation,
    is_success,
    parse_json,
    remote_error,
)
from fleetdesk.core.validators import is_blank, optional_text, require_text

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Configuration
# ─────────────────────────────────────────────────────────────────────────────

# Domain appended to usernames that are not already email addresses
PLACEHOLDER_EMAIL_DOMAIN = "app.local"

# Creation statuses that may mean "identity already exists"
CONFLICT_STATUSES = frozenset({400, 409, 422})

# Substring marking a duplicate-identity message (case-insensitive)
DUPLICATE_MARKER = "already"


# ─────────────────────────────────────────────────────────────────────────────
# Requests
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class UserCreationRequest:
    username: str
    password: str
    role: str
    display_name: Optional[str] = None
    
    @classmethod
    def from_payload(cls, payload: dict) -> "UserCreationRequest":
        return cls(
            username=require_text(payload, "username"),
            password=require_text(payload, "password"),
            role=require_text(payload, "role"),
            display_name=optional_text(payload, "display_name"),
        )


@dataclass(frozen=True)
class UserUpdateRequest:
    id: str
    role: str
    display_name: Optional[str] = None
    password: Optional[str] = None
    
    @classmethod
    def from_payload(cls, payload: dict) -> "UserUpdateRequest":
        return cls(
            id=require_text(payload, "id"),
            role=require_text(payload, "role"),
            display_name=optional_text(payload, "display_name"),
            password=optional_text(payload, "password"),
        )


@dataclass(frozen=True)
class UserDeletionRequest:
    id: str
    
    @classmethod
    def from_payload(cls, payload: dict) -> "UserDeletionRequest":
        return cls(id=require_text(payload, "id"))


# ─────────────────────────────────────────────────────────────────────────────
# Policies and Builders
# ─────────────────────────────────────────────────────────────────────────────

def derive_email(username: str) -> str:
    """Derive the canonical login email for a username.
    
    Usernames are lowercased; those without "@" get the placeholder domain.
    
    Examples:
        "Bob"       -> "bob@app.local"
        "Bob@X.com" -> "bob@x.com"
    """
    lowered = username.lower()
    if "@" in lowered:
        return lowered
    return f"{lowered}@{PLACEHOLDER_EMAIL_DOMAIN}"


def indicates_existing_identity(message: Optional[str]) -> bool:
    """Decide whether a conflict response means the identity already exists.
    
    The platform exposes no structured code for duplicates, so this matches
    on message text. A missing message is treated as a possible duplicate.
    Replace with an error-code check if the platform starts sending one.
    """
    if message is None:
        return True
    return DUPLICATE_MARKER in message.lower()


class IdentityUpdate:
    """Builder for partial admin updates; blank values are never sent.
    
    Usage:
        changes = IdentityUpdate().password(" s3cret ").display_name("")
        changes.to_body()  # {"password": "s3cret"}
    """
    
    def __init__(self):
        self._fields: Dict[str, Any] = {}
    
    def password(self, value: Optional[str]) -> "IdentityUpdate":
        if not is_blank(value):
            self._fields["password"] = value.strip()
        return self
    
    def display_name(self, value: Optional[str]) -> "IdentityUpdate":
        if not is_blank(value):
            self._fields["user_metadata"] = {"display_name": value.strip()}
        return self
    
    def __bool__(self) -> bool:
        return bool(self._fields)
    
    def to_body(self) -> Dict[str, Any]:
        return dict(self._fields)


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _audit_stamp(actor_id: str) -> Dict[str, str]:
    """updated_at/updated_by pair written on every profile change."""
    return {"updated_at": _utcnow().isoformat(), "updated_by": actor_id}


def generate_temp_password(length: int = 16) -> str:
    """
    Generate a secure temporary password.
    
    Args:
        length: Password length (default: 16)
    
    Returns:
        Random password containing letters, digits, and special chars
    """
    alphabet = string.ascii_letters + string.digits + "!@#$%^&*"
    return ''.join(secrets.choice(alphabet) for _ in range(length))


# ─────────────────────────────────────────────────────────────────────────────
# Core Service Functions
# ─────────────────────────────────────────────────────────────────────────────

def create_user(cfg: AppConfig, request: UserCreationRequest) -> str:
    """Create (or adopt) an identity and align its profile row.
    
    Args:
        cfg: Application configuration
        request: Creation request
    
    Returns:
        Identity id the profile was written for
    
    Raises:
        ConfigError: Platform URL or service key missing (before any request)
        TransportError: Network failure on any call
        RemoteApiError: Unexpected status, or a conflict that is not a duplicate
        ReconciliationError: Duplicate reported but its id could not be found
    """
    with PlatformClient.from_config(cfg) as client:
        identities = IdentityService(client)
        email = derive_email(request.username)
        
        display_name = None if is_blank(request.display_name) else request.display_name
        resp = identities.create_identity(email, request.password, display_name)
        
        if is_success(resp):
            identity = identity_from_creation(parse_json(resp))
            if identity is None:
                logger.warning("Creation response for %s carried no id; looking it up", email)
                identity = _lookup_or_fail(identities, email)
        elif resp.status_code in CONFLICT_STATUSES:
            message = error_message_from_body(parse_json(resp))
            if not indicates_existing_identity(message):
                raise remote_error(resp, message)
            logger.warning("User %s already exists (status=%s); reconciling", email, resp.status_code)
            identity = _lookup_or_fail(identities, email)
        else:
            raise remote_error(resp)
        
        ProfileService(client).update_profile(
            identity.id,
            {
                "username": request.username,
                "display_name": request.username if display_name is None else display_name,
                "role": request.role,
                **_audit_stamp(identity.id),
            },
        )
    
    logger.info("User %s provisioned (id=%s, role=%s)", email, identity.id, request.role)
    return identity.id


def _lookup_or_fail(identities: IdentityService, email: str) -> RemoteIdentity:
    identity = identities.find_identity_by_email(email)
    if identity is None:
        raise ReconciliationError(email)
    return identity


def update_user(cfg: AppConfig, request: UserUpdateRequest) -> None:
    """Update identity credentials/metadata and the profile row.
    
    The identity is patched only when a password or display name is given;
    the profile is always patched.
    
    Raises:
        ConfigError: Platform URL or service key missing (before any request)
        TransportError: Network failure on any call
        RemoteApiError: Unexpected status on any call
    """
    changes = IdentityUpdate().password(request.password).display_name(request.display_name)
    
    with PlatformClient.from_config(cfg) as client:
        if changes:
            IdentityService(client).update_identity(request.id, changes.to_body())
        else:
            logger.info("No identity changes for %s; skipping admin update", request.id)
        
        ProfileService(client).update_profile(
            request.id,
            {
                "display_name": request.display_name,
                "role": request.role,
                **_audit_stamp(request.id),
            },
        )


def delete_user(cfg: AppConfig, request: UserDeletionRequest) -> None:
    """Delete the identity and then the profile row of a user.
    
    Both deletions are always attempted; records already gone (404) are
    not errors.
    
    Raises:
        ConfigError: Platform URL or service key missing (before any request)
        TransportError: Network failure on any call
        RemoteApiError: Status other than success/404 on any call
    """
    with PlatformClient.from_config(cfg) as client:
        if not IdentityService(client).delete_identity(request.id):
            logger.warning("Identity %s not found; deleting profile anyway", request.id)
        if not ProfileService(client).delete_profile(request.id):
            logger.warning("Profile %s not found", request.id)
    
    logger.info("User %s deleted", request.id)

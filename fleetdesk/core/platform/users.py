"""Identity (admin users) operations on the platform auth API."""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from .client import PlatformClient, is_success, parse_json
from .exceptions import RemoteApiError

ADMIN_USERS_PATH = "/auth/v1/admin/users"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RemoteIdentity:
    """Identity record owned by the platform, referenced by its opaque id."""
    id: str
    email: Optional[str] = None


def identity_from_payload(payload: Any) -> Optional[RemoteIdentity]:
    """Extract an identity from a user representation, if it carries an id."""
    if not isinstance(payload, dict):
        return None
    user_id = payload.get("id")
    if not isinstance(user_id, str) or not user_id:
        return None
    email = payload.get("email")
    return RemoteIdentity(id=user_id, email=email if isinstance(email, str) else None)


def identity_from_creation(body: Any) -> Optional[RemoteIdentity]:
    """Identity returned by a creation call.
    
    Accepts both ``{"user": {...}}`` and a bare user object; returns None for
    empty or unrecognised bodies.
    """
    if isinstance(body, dict) and "user" in body:
        return identity_from_payload(body.get("user"))
    return identity_from_payload(body)


def _identity_path(user_id: str) -> str:
    """Admin path of one identity; the id is escaped as a single path segment."""
    return f"{ADMIN_USERS_PATH}/{quote(user_id, safe='')}"


class IdentityService:
    """Service for managing platform identities."""
    
    def __init__(self, client: PlatformClient):
        """Initialize identity service.
        
        Args:
            client: Platform client for the current operation
        """
        self.client = client
    
    def find_identity_by_email(self, email: str) -> Optional[RemoteIdentity]:
        """Return the first identity listed for an email.
        
        Only the first page is read; when the platform lists several
        identities for one email the first one wins.
        
        Args:
            email: Canonical email address
            
        Returns:
            Matching identity or None when the listing is empty
            
        Raises:
            TransportError: On network failure
            RemoteApiError: On non-success status or unparseable listing
        """
        resp = self.client.get(
            ADMIN_USERS_PATH,
            action="listing users by email",
            params={"email": f"eq.{email}"},
        )
        self.client.handle_error(resp)
        
        body = parse_json(resp)
        users = body.get("users") if isinstance(body, dict) else None
        if not isinstance(users, list):
            raise RemoteApiError(resp.status_code, "unexpected user listing format", ADMIN_USERS_PATH)
        
        if not users:
            return None
        identity = identity_from_payload(users[0])
        if identity is None:
            raise RemoteApiError(resp.status_code, "user listing entry without id", ADMIN_USERS_PATH)
        return identity
    
    def create_identity(self, email: str, password: str, display_name: Optional[str]) -> requests.Response:
        """Submit an identity creation request and return the raw response.
        
        The caller decides how to treat conflict statuses.
        
        Raises:
            TransportError: On network failure
        """
        payload = {
            "email": email,
            "password": password,
            "email_confirm": True,
            "user_metadata": {"display_name": display_name},
        }
        resp = self.client.post(ADMIN_USERS_PATH, action="creating user", json=payload)
        logger.info("Identity creation for %s returned %s", email, resp.status_code)
        return resp
    
    def update_identity(self, user_id: str, changes: Dict[str, Any]) -> None:
        """Apply a partial admin update to an identity.
        
        Raises:
            TransportError: On network failure
            RemoteApiError: On non-success status
        """
        resp = self.client.patch(
            _identity_path(user_id),
            action="updating user (admin)",
            json=changes,
        )
        self.client.handle_error(resp)
        logger.info("Identity %s updated (fields=%s)", user_id, sorted(changes))
    
    def delete_identity(self, user_id: str) -> bool:
        """Delete an identity; a missing identity is not an error.
        
        Returns:
            True if deleted, False if the platform reported 404
            
        Raises:
            TransportError: On network failure
            RemoteApiError: On any other non-success status
        """
        resp = self.client.delete(_identity_path(user_id), action="deleting user (admin)")
        self.client.handle_error(resp, allowed=(404,))
        return is_success(resp)

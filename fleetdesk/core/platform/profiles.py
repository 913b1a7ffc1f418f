"""Profile table operations on the platform REST API."""
from __future__ import annotations
import logging
from typing import Any, Dict

from .client import PlatformClient, is_success

PROFILES_PATH = "/rest/v1/profiles"
RETURN_MINIMAL = "return=minimal"

logger = logging.getLogger(__name__)


class ProfileService:
    """Service for the application-owned profile rows keyed by identity id."""
    
    def __init__(self, client: PlatformClient):
        self.client = client
    
    def update_profile(self, user_id: str, fields: Dict[str, Any]) -> None:
        """Patch the profile row of an identity.
        
        Raises:
            TransportError: On network failure
            RemoteApiError: On non-success status
        """
        resp = self.client.patch(
            PROFILES_PATH,
            action="updating profile",
            params={"id": f"eq.{user_id}"},
            json=fields,
            prefer=RETURN_MINIMAL,
        )
        self.client.handle_error(resp)
        logger.info("Profile %s updated (role=%s)", user_id, fields.get("role"))
    
    def delete_profile(self, user_id: str) -> bool:
        """Delete the profile row of an identity; 404 counts as already gone.
        
        Returns:
            True if deleted, False if the platform reported 404
        """
        resp = self.client.delete(
            PROFILES_PATH,
            action="deleting profile",
            params={"id": f"eq.{user_id}"},
            prefer=RETURN_MINIMAL,
        )
        self.client.handle_error(resp, allowed=(404,))
        return is_success(resp)

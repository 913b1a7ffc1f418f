"""Low-level HTTP client for the identity/database platform API.

Handles service credential headers, transport errors and error-body parsing.
"""
from __future__ import annotations
from typing import TYPE_CHECKING, Any, Dict, Iterable, Optional

import requests

from .exceptions import RemoteApiError, TransportError

if TYPE_CHECKING:
    from fleetdesk.config.settings import AppConfig

# Response fields that may carry the platform's error text, in priority order
ERROR_MESSAGE_FIELDS = ("error_description", "error", "msg")


def error_message_from_body(body: Any, fields: Iterable[str] = ERROR_MESSAGE_FIELDS) -> Optional[str]:
    """Return the first non-empty error message field of a decoded body.
    
    Args:
        body: Decoded JSON body (anything; non-dicts yield None)
        fields: Candidate field names, highest priority first
        
    Returns:
        Message text or None when no field carries one
    """
    if not isinstance(body, dict):
        return None
    for field in fields:
        value = body.get(field)
        if isinstance(value, str) and value.strip():
            return value
    return None


def is_success(resp: requests.Response) -> bool:
    """True for 2xx responses."""
    return 200 <= resp.status_code < 300


def parse_json(resp: requests.Response) -> Any:
    """Decode a JSON response body, returning None for empty or invalid bodies."""
    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError:
        return None


class PlatformClient:
    """HTTP client for the platform admin and REST APIs.
    
    Every request carries the service credential both as ``apikey`` and as a
    Bearer token. One client (and one HTTP session) is built per logical
    operation; nothing is shared between operations.
    
    Usage:
        with PlatformClient.from_config(cfg) as client:
            resp = client.get("/auth/v1/admin/users", params={"email": "eq.bob@app.local"})
    """
    
    def __init__(
        self,
        base_url: str,
        service_role_key: str,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        """Initialize platform client.
        
        Args:
            base_url: Platform base URL (e.g. https://xyz.example.co)
            service_role_key: Privileged service credential
            timeout: Per-request timeout in seconds (None = no timeout)
            session: Optional pre-built requests session
        """
        self.base_url = base_url.rstrip("/")
        self._service_role_key = service_role_key
        self.timeout = timeout
        self.session = session or requests.Session()
    
    @classmethod
    def from_config(cls, cfg: "AppConfig") -> "PlatformClient":
        """Build a client from configuration, failing fast on missing values.
        
        Raises:
            ConfigError: If the platform URL or service credential is missing
        """
        base_url = cfg.require("platform_url")
        service_role_key = cfg.require("service_role_key")
        return cls(base_url, service_role_key, timeout=cfg.request_timeout)
    
    def __enter__(self) -> "PlatformClient":
        return self
    
    def __exit__(self, *exc_info) -> None:
        self.close()
    
    def close(self) -> None:
        self.session.close()
    
    def _headers(self, prefer: Optional[str] = None) -> Dict[str, str]:
        headers = {
            "apikey": self._service_role_key,
            "Authorization": f"Bearer {self._service_role_key}",
            "Accept": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers
    
    def request(
        self,
        method: str,
        path: str,
        *,
        action: str,
        params: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
        prefer: Optional[str] = None,
    ) -> requests.Response:
        """Execute a request and return the response whatever its status.
        
        Args:
            method: HTTP method
            path: API endpoint path (e.g. "/rest/v1/profiles")
            action: Description used in error messages (e.g. "creating user")
            params: Query parameters
            json: JSON payload (sets Content-Type: application/json)
            prefer: Value for the Prefer header (e.g. "return=minimal")
            
        Returns:
            Response object
            
        Raises:
            TransportError: When no response was received
        """
        url = f"{self.base_url}{path}"
        try:
            return self.session.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._headers(prefer),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise TransportError(action, exc) from exc
    
    def get(self, path: str, *, action: str, params: Optional[Dict[str, str]] = None) -> requests.Response:
        return self.request("GET", path, action=action, params=params)
    
    def post(self, path: str, *, action: str, json: Optional[Dict[str, Any]] = None) -> requests.Response:
        return self.request("POST", path, action=action, json=json)
    
    def patch(
        self,
        path: str,
        *,
        action: str,
        params: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
        prefer: Optional[str] = None,
    ) -> requests.Response:
        return self.request("PATCH", path, action=action, params=params, json=json, prefer=prefer)
    
    def delete(
        self,
        path: str,
        *,
        action: str,
        params: Optional[Dict[str, str]] = None,
        prefer: Optional[str] = None,
    ) -> requests.Response:
        return self.request("DELETE", path, action=action, params=params, prefer=prefer)
    
    def handle_error(self, resp: requests.Response, allowed: Iterable[int] = ()) -> None:
        """Centralized error handling for HTTP responses.
        
        Args:
            resp: Response object to check
            allowed: Non-success statuses to tolerate (e.g. 404 on delete)
            
        Raises:
            RemoteApiError: If response status indicates error
        """
        if is_success(resp) or resp.status_code in allowed:
            return
        raise remote_error(resp)


def remote_error(resp: requests.Response, message: Optional[str] = None) -> RemoteApiError:
    """Build the RemoteApiError describing an unexpected response.
    
    Args:
        resp: Response with an unexpected status
        message: Explicit message; defaults to the body's error text or the reason phrase
    """
    if message is None:
        body = parse_json(resp)
        message = error_message_from_body(body, ERROR_MESSAGE_FIELDS + ("message",)) or resp.reason or ""
    return RemoteApiError(resp.status_code, message, _endpoint(resp))


def _endpoint(resp: requests.Response) -> str:
    """URL of the request that produced ``resp``, without the query string."""
    url = resp.url or (resp.request.url if resp.request is not None else "")
    return (url or "").split("?", 1)[0]

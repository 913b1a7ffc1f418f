"""Identity/database platform API client library.

Architecture:
- client.py: HTTP client with service credential headers and error parsing
- users.py: Identity operations (lookup by email, create, update, delete)
- profiles.py: Profile row operations (update, delete)
- exceptions.py: Typed exceptions for error handling

Usage:
    from fleetdesk.core.platform import PlatformClient, IdentityService

    with PlatformClient.from_config(cfg) as client:
        identity = IdentityService(client).find_identity_by_email("bob@app.local")
"""
from .client import (
    PlatformClient,
    ERROR_MESSAGE_FIELDS,
    error_message_from_body,
    remote_error,
    is_success,
    parse_json,
)
from .exceptions import (
    PlatformError,
    ConfigError,
    TransportError,
    RemoteApiError,
    ReconciliationError,
)
from .users import (
    IdentityService,
    RemoteIdentity,
    identity_from_creation,
)
from .profiles import ProfileService

__all__ = [
    # Client
    "PlatformClient",
    "ERROR_MESSAGE_FIELDS",
    "error_message_from_body",
    "remote_error",
    "is_success",
    "parse_json",
    
    # Exceptions
    "PlatformError",
    "ConfigError",
    "TransportError",
    "RemoteApiError",
    "ReconciliationError",
    
    # Services
    "IdentityService",
    "ProfileService",
    "RemoteIdentity",
    "identity_from_creation",
]

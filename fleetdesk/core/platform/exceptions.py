"""Platform-specific exceptions for error handling."""
from __future__ import annotations


class PlatformError(Exception):
    """Base exception for all identity/database platform operations."""
    pass


class ConfigError(PlatformError):
    """A required configuration value is missing.
    
    Attributes:
        variable: Environment variable (or variables) that must be set
    """
    
    def __init__(self, variable: str):
        self.variable = variable
        super().__init__(f"Environment variable {variable} is not configured")


class TransportError(PlatformError):
    """The request never produced an HTTP response (DNS, connect, TLS, reset).
    
    Attributes:
        action: Human-readable description of the failed call
        cause: Underlying requests exception
    """
    
    def __init__(self, action: str, cause: BaseException):
        self.action = action
        self.cause = cause
        super().__init__(f"Network error while {action}: {cause}")


class RemoteApiError(PlatformError):
    """HTTP error from the platform API.
    
    Attributes:
        status_code: HTTP status code
        message: Error message from response (may be empty)
        endpoint: API endpoint that failed
    """
    
    def __init__(self, status_code: int, message: str, endpoint: str):
        self.status_code = status_code
        self.message = message
        self.endpoint = endpoint
        detail = f": {message}" if message else ""
        super().__init__(f"[{status_code}] {endpoint}{detail}")


class ReconciliationError(PlatformError):
    """Creation reported an existing identity, but its id could not be resolved."""
    
    def __init__(self, email: str):
        self.email = email
        super().__init__(
            f"User already present but id could not be retrieved (email={email})"
        )

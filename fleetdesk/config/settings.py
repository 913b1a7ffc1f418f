"""Settings loader with environment variable and secret file integration."""
from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fleetdesk.core.platform.exceptions import ConfigError

# Environment variable names for each required field
_REQUIRED_VARIABLES = {
    "platform_url": "PLATFORM_URL (or VITE_PLATFORM_URL)",
    "service_role_key": "PLATFORM_SERVICE_ROLE_KEY",
}


def _load_secret(env_var: str) -> str | None:
    """
    Load a secret from a file or from the environment.
    
    Priority:
    1. File named by {env_var}_FILE (e.g. a mounted secret)
    2. Environment variable {env_var}
    
    Args:
        env_var: Environment variable name holding the secret
    
    Returns:
        Secret value or None if not found
    """
    file_var = f"{env_var}_FILE"
    secret_path = os.environ.get(file_var)
    
    # Priority 1: Read from the secret file
    if secret_path:
        secret_file = Path(secret_path)
        if secret_file.is_file():
            try:
                secret_value = secret_file.read_text(encoding="utf-8").strip()
                if secret_value:
                    print(f"[settings] ✓ Loaded {env_var} from {file_var}")
                    return secret_value
            except OSError as e:
                print(f"[settings] ✗ Failed to read {file_var}: {e}")
    
    # Priority 2: Fallback to environment variable
    secret_value = os.environ.get(env_var, "").strip()
    return secret_value or None


def _parse_timeout(raw: str | None) -> Optional[float]:
    """Parse PLATFORM_REQUEST_TIMEOUT; empty or non-positive means no timeout."""
    if not raw or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        print(f"[settings] ✗ Ignoring invalid PLATFORM_REQUEST_TIMEOUT={raw!r}")
        return None
    return value if value > 0 else None


@dataclass
class AppConfig:
    """Application configuration container."""
    # Identity/database platform
    platform_url: str = ""
    service_role_key: str = ""
    request_timeout: Optional[float] = None
    
    # Local command server
    server_host: str = "127.0.0.1"
    server_port: int = 5000
    
    def require(self, field_name: str) -> str:
        """Return a required setting, failing when it was not configured.
        
        Args:
            field_name: Attribute name (platform_url, service_role_key)
            
        Returns:
            Non-empty setting value
            
        Raises:
            ConfigError: Naming the environment variable to set
        """
        value = getattr(self, field_name)
        if not value:
            raise ConfigError(_REQUIRED_VARIABLES.get(field_name, field_name.upper()))
        return value


def load_settings() -> AppConfig:
    """Load application settings from the environment and secret files.
    
    Missing platform values are kept empty: they fail the operation that
    needs them, not the process.
    """
    platform_url = (
        os.environ.get("PLATFORM_URL", "").strip()
        or os.environ.get("VITE_PLATFORM_URL", "").strip()
    )
    service_role_key = _load_secret("PLATFORM_SERVICE_ROLE_KEY") or ""
    request_timeout = _parse_timeout(os.environ.get("PLATFORM_REQUEST_TIMEOUT"))
    
    server_host = os.environ.get("COMMAND_SERVER_HOST", "127.0.0.1").strip() or "127.0.0.1"
    try:
        server_port = int(os.environ.get("COMMAND_SERVER_PORT", "5000"))
    except ValueError:
        raise RuntimeError("COMMAND_SERVER_PORT must be an integer.")
    
    print(
        f"[settings] platform_url={platform_url or 'UNSET'}; "
        f"service_role_key={'***' if service_role_key else 'UNSET'}"
    )
    
    return AppConfig(
        platform_url=platform_url.rstrip("/"),
        service_role_key=service_role_key,
        request_timeout=request_timeout,
        server_host=server_host,
        server_port=server_port,
    )

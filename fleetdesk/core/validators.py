"""Input validation helpers for command payloads."""
from __future__ import annotations
from typing import Any, Optional


def unwrap_payload(body: Any) -> dict:
    """Return the command payload from a request body.
    
    The desktop shell sends ``{"payload": {...}}``; a bare object is
    accepted as well.
    
    Raises:
        ValueError: If no JSON object payload is present
    """
    if isinstance(body, dict) and isinstance(body.get("payload"), dict):
        return body["payload"]
    if isinstance(body, dict) and "payload" not in body:
        return body
    raise ValueError("Request body must be a JSON object")


def require_text(payload: dict, field: str) -> str:
    """Return a required string field.
    
    Args:
        payload: Command payload
        field: Field name
        
    Returns:
        Field value, unmodified
        
    Raises:
        ValueError: If the field is missing, not a string, or blank
    """
    value = payload.get(field)
    if value is None:
        raise ValueError(f"{field} is required")
    if not isinstance(value, str):
        raise ValueError(f"{field} must be a string")
    if not value.strip():
        raise ValueError(f"{field} is required")
    return value


def optional_text(payload: dict, field: str) -> Optional[str]:
    """Return an optional string field (None when absent or null).
    
    Raises:
        ValueError: If the field is present but not a string
    """
    value = payload.get(field)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{field} must be a string")
    return value


def is_blank(value: Optional[str]) -> bool:
    """True for None, empty or whitespace-only strings."""
    return value is None or not value.strip()

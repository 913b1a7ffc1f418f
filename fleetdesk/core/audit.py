"""Audit logging utilities for user provisioning commands."""

from __future__ import annotations
import datetime
import hashlib
import hmac
import json
import os
import sys
from pathlib import Path
from typing import Any, Literal

AUDIT_LOG_DIR = Path(os.environ.get("AUDIT_LOG_DIR", ".runtime/audit"))
AUDIT_LOG_FILE = AUDIT_LOG_DIR / "provisioning-events.jsonl"

EventType = Literal["create_user", "update_user", "delete_user", "create_admin"]


def _get_signing_key() -> bytes:
    """Get the audit signing key from the environment (empty = unsigned events)."""
    return os.environ.get("AUDIT_LOG_SIGNING_KEY", "").strip().encode("utf-8")


def _ensure_audit_dir() -> None:
    """Create audit directory with restricted permissions."""
    AUDIT_LOG_DIR.mkdir(parents=True, exist_ok=True)
    AUDIT_LOG_DIR.chmod(0o700)


def _sign_event(event: dict[str, Any]) -> str:
    """Generate HMAC-SHA256 signature for audit event."""
    signing_key = _get_signing_key()
    if not signing_key:
        return ""
    canonical = json.dumps(event, sort_keys=True, separators=(",", ":"))
    return hmac.new(signing_key, canonical.encode("utf-8"), hashlib.sha256).hexdigest()


def log_event(
    event_type: EventType,
    target: str,
    *,
    operator: str = "system",
    details: dict[str, Any] | None = None,
    success: bool = True,
) -> None:
    """Append a provisioning event to the audit trail.
    
    Args:
        event_type: Command that ran (create_user, update_user, ...)
        target: Username or identity id affected by the command
        operator: Who issued the command (desktop-app, create-admin, ...)
        details: Additional context (role, error text, ...); never passwords
        success: Whether the command succeeded
    """
    _ensure_audit_dir()
    
    event = {
        "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        "event_type": event_type,
        "target": target,
        "operator": operator,
        "success": success,
        "details": details or {},
    }
    
    signature = _sign_event(event)
    if signature:
        event["signature"] = signature
    
    # One JSON object per line
    with AUDIT_LOG_FILE.open("a", encoding="utf-8") as f:
        f.write(json.dumps(event, ensure_ascii=False) + "\n")
    
    AUDIT_LOG_FILE.chmod(0o600)


def safe_log_event(
    event_type: EventType,
    target: str,
    *,
    operator: str = "system",
    details: dict[str, Any] | None = None,
    success: bool = True,
) -> bool:
    """Log an event without ever raising.
    
    Audit failures must not turn a completed command into an error; they are
    reported on stderr instead.
    
    Returns:
        True if event was logged successfully, False if logging failed
    """
    try:
        log_event(event_type, target, operator=operator, details=details, success=success)
        return True
    except (OSError, TypeError, ValueError) as e:
        print(
            f"[audit] Warning: Failed to log {event_type} event for {target}: {e}",
            file=sys.stderr
        )
        return False


def verify_audit_log() -> tuple[int, int]:
    """Verify all signatures in the audit log.
    
    Returns:
        Tuple of (total_events, valid_signatures)
    """
    if not AUDIT_LOG_FILE.exists():
        return 0, 0
    
    total = 0
    valid = 0
    
    with AUDIT_LOG_FILE.open("r", encoding="utf-8") as f:
        for line in f:
            if not line.strip():
                continue
            total += 1
            try:
                event = json.loads(line)
            except json.JSONDecodeError:
                continue
            stored_sig = event.pop("signature", "")
            if not stored_sig:
                continue
            computed_sig = _sign_event(event)
            if computed_sig and hmac.compare_digest(stored_sig, computed_sig):
                valid += 1
    
    return total, valid


if __name__ == "__main__":
    total, valid = verify_audit_log()
    print(f"Audit log: {valid}/{total} events with valid signatures")
    sys.exit(0 if total == valid else 1)

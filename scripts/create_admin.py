"""Bootstrap an administrator account on the platform.

Creates the identity (or adopts an existing one) and promotes its profile
to the admin role. Reads PLATFORM_URL / PLATFORM_SERVICE_ROLE_KEY from the
environment or a .env file.

Usage:
    python scripts/create_admin.py --username alice --display-name "Alice Rossi"
"""
from __future__ import annotations
import argparse
import sys
from pathlib import Path

SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from dotenv import load_dotenv

from fleetdesk.config import load_settings
from fleetdesk.core import audit
from fleetdesk.core.platform import PlatformError
from fleetdesk.core.provisioning_service import (
    UserCreationRequest,
    create_user,
    derive_email,
    generate_temp_password,
)

ADMIN_ROLE = "admin"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create or promote an admin account")
    parser.add_argument("--username", default="admin")
    parser.add_argument("--password", default=None,
                        help="Initial password (default: randomly generated)")
    parser.add_argument("--display-name", default="Administrator")
    parser.add_argument("--operator", default="create-admin",
                        help="Operator identifier for audit logs (default: create-admin)")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Command-line entry point."""
    args = parse_args(argv)
    
    username = args.username.strip().lower()
    if not username:
        print("[create-admin] Error: --username must not be blank", file=sys.stderr)
        sys.exit(1)
    password = args.password or generate_temp_password()
    email = derive_email(username)
    
    load_dotenv()
    cfg = load_settings()
    
    print(f"[create-admin] Creating admin '{username}' ({email})...")
    request = UserCreationRequest(
        username=username,
        password=password,
        role=ADMIN_ROLE,
        display_name=args.display_name,
    )
    try:
        user_id = create_user(cfg, request)
    except PlatformError as e:
        print(f"[create-admin] Error: {e}", file=sys.stderr)
        audit.safe_log_event(
            "create_admin",
            username,
            operator=args.operator,
            details={"email": email, "error": str(e)},
            success=False,
        )
        sys.exit(1)
    
    audit.safe_log_event(
        "create_admin",
        username,
        operator=args.operator,
        details={"email": email, "user_id": user_id, "role": ADMIN_ROLE},
        success=True,
    )
    
    print("[create-admin] Profile promoted to admin.")
    print("Credentials:")
    print(f"    username: {username}")
    print(f"    email:    {email}")
    print(f"    password: {password}")
    print("Change the password at first login.")


if __name__ == "__main__":
    main()

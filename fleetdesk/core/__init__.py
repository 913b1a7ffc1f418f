"""Core Business Logic Module

User administration logic, independent of the HTTP command surface.

Module Structure:
    - platform/         : Low-level identity/database platform API client
    - provisioning_service.py : create/update/delete orchestration
    - validators.py     : Command payload validation
    - audit.py          : Signed audit trail of provisioning commands

Usage Pattern:
    Import explicitly when needed:
        from fleetdesk.core.provisioning_service import create_user, UserCreationRequest
        from fleetdesk.core.platform import PlatformError
"""

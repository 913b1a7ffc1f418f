"""fleetdesk user administration backend.

To use the command server:
    from fleetdesk.flask_app import create_app

To use provisioning service:
    from fleetdesk.core.provisioning_service import create_user, update_user, delete_user
"""
# Note: flask_app is not imported here so scripts can use fleetdesk.core
# without building the web application

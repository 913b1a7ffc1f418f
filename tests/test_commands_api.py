"""Tests for the /commands/* routes served to the desktop shell."""
import json
from unittest.mock import MagicMock

import pytest
import requests

from fleetdesk.config.settings import AppConfig
from fleetdesk.core import provisioning_service
from fleetdesk.core.provisioning_service import UserUpdateRequest
from fleetdesk.flask_app import create_app

USERS = "/auth/v1/admin/users"
PROFILES = "/rest/v1/profiles"


@pytest.fixture()
def client(cfg):
    flask_app = create_app(cfg)
    flask_app.config.update(TESTING=True)
    with flask_app.test_client() as client:
        yield client


def _events(audit_file):
    return [json.loads(line) for line in audit_file.read_text(encoding="utf-8").splitlines()]


def test_create_user_command_success(client, fake_session, isolated_audit_log):
    fake_session.queue("POST", USERS, 200, {"id": "uid-1"})
    fake_session.queue("PATCH", PROFILES, 204)
    
    response = client.post("/commands/create_user", json={
        "payload": {"username": "mario", "password": "Secret123!", "display_name": "Mario", "role": "operatore"},
    })
    
    assert response.status_code == 200
    assert response.get_json() == {"ok": True, "id": "uid-1"}
    
    events = _events(isolated_audit_log)
    assert events[-1]["event_type"] == "create_user"
    assert events[-1]["target"] == "mario"
    assert events[-1]["success"] is True
    assert "Secret123!" not in isolated_audit_log.read_text(encoding="utf-8")


def test_create_user_command_accepts_bare_payload(client, fake_session):
    fake_session.queue("POST", USERS, 200, {"id": "uid-2"})
    fake_session.queue("PATCH", PROFILES, 204)
    
    response = client.post("/commands/create_user", json={
        "username": "luca", "password": "Secret123!", "role": "solo_lettura",
    })
    
    assert response.status_code == 200
    assert response.get_json()["id"] == "uid-2"


def test_create_user_command_validation_error(client, fake_session):
    response = client.post("/commands/create_user", json={"payload": {"username": "luca", "role": "admin"}})
    
    assert response.status_code == 400
    assert response.get_json() == {"error": "password is required"}
    assert fake_session.calls == []


def test_create_user_command_rejects_non_string_fields(client, fake_session):
    response = client.post("/commands/create_user", json={
        "username": "luca", "password": "pw123456", "role": "admin", "display_name": 42,
    })
    
    assert response.status_code == 400
    assert "display_name" in response.get_json()["error"]


def test_command_rejects_non_json_body(client, fake_session):
    response = client.post("/commands/delete_user", data="id=uid", content_type="text/plain")
    
    assert response.status_code == 400
    assert "JSON object" in response.get_json()["error"]


def test_create_user_command_remote_error_message(client, fake_session, isolated_audit_log):
    fake_session.queue("POST", USERS, 422, {"msg": "Invalid password"})
    
    response = client.post("/commands/create_user", json={
        "username": "luca", "password": "x", "role": "admin",
    })
    
    assert response.status_code == 502
    assert "Invalid password" in response.get_json()["error"]
    events = _events(isolated_audit_log)
    assert events[-1]["success"] is False
    assert "Invalid password" in events[-1]["details"]["error"]


def test_create_user_command_reconciliation_error(client, fake_session):
    fake_session.queue("POST", USERS, 422, {"msg": "User already registered"})
    fake_session.queue("GET", USERS, 200, {"users": []})
    
    response = client.post("/commands/create_user", json={
        "username": "luca", "password": "pw123456", "role": "admin",
    })
    
    assert response.status_code == 409
    assert "could not be retrieved" in response.get_json()["error"]


def test_update_user_command(client, fake_session):
    fake_session.queue("PATCH", f"{USERS}/uid-3", 200, {})
    fake_session.queue("PATCH", PROFILES, 204)
    
    response = client.post("/commands/update_user", json={
        "payload": {"id": "uid-3", "role": "admin", "password": "NewPass!1", "display_name": None},
    })
    
    assert response.status_code == 200
    assert response.get_json() == {"ok": True}
    assert fake_session.calls_to("PATCH", f"{USERS}/uid-3")[0].json == {"password": "NewPass!1"}


def test_delete_user_command_tolerates_missing_records(client, fake_session, isolated_audit_log):
    fake_session.queue("DELETE", f"{USERS}/uid-4", 404)
    fake_session.queue("DELETE", PROFILES, 404)
    
    response = client.post("/commands/delete_user", json={"payload": {"id": "uid-4"}})
    
    assert response.status_code == 200
    assert _events(isolated_audit_log)[-1]["event_type"] == "delete_user"


def test_delete_user_command_transport_error(client, fake_session):
    fake_session.queue("DELETE", f"{USERS}/uid-5", error=requests.ConnectionError("no route to host"))
    
    response = client.post("/commands/delete_user", json={"id": "uid-5"})
    
    assert response.status_code == 502
    assert "no route to host" in response.get_json()["error"]


def test_commands_report_missing_configuration(fake_session):
    flask_app = create_app(AppConfig(platform_url="https://platform.test", service_role_key=""))
    
    with flask_app.test_client() as client:
        response = client.post("/commands/delete_user", json={"id": "uid-6"})
    
    assert response.status_code == 500
    assert "PLATFORM_SERVICE_ROLE_KEY" in response.get_json()["error"]
    assert fake_session.calls == []


def test_unknown_command_is_json_404(client):
    response = client.post("/commands/open_devtools", json={})
    
    assert response.status_code == 404
    assert "error" in response.get_json()


def test_command_routes_reject_get(client):
    response = client.get("/commands/create_user")
    
    assert response.status_code == 405


def test_update_user_command_passes_request_to_orchestrator(client, cfg, monkeypatch, isolated_audit_log):
    orchestrator = MagicMock(return_value=None)
    monkeypatch.setattr(provisioning_service, "update_user", orchestrator)
    
    response = client.post("/commands/update_user", json={
        "payload": {"id": "uid-9", "role": "admin", "display_name": None, "password": "N3w!"},
    })
    
    assert response.status_code == 200
    orchestrator.assert_called_once_with(
        cfg, UserUpdateRequest(id="uid-9", role="admin", display_name=None, password="N3w!")
    )
    event = _events(isolated_audit_log)[-1]
    assert event["details"] == {"role": "admin", "password_changed": True}
    assert "N3w!" not in isolated_audit_log.read_text(encoding="utf-8")


def test_unexpected_failure_is_audited_and_reaches_error_handler(client, monkeypatch, isolated_audit_log):
    monkeypatch.setattr(provisioning_service, "delete_user", MagicMock(side_effect=RuntimeError("bug")))
    
    with pytest.raises(RuntimeError):
        client.post("/commands/delete_user", json={"id": "uid-20"})
    
    event = _events(isolated_audit_log)[-1]
    assert event["event_type"] == "delete_user"
    assert event["target"] == "uid-20"
    assert event["success"] is False
    assert event["details"] == {"error": "unexpected RuntimeError"}


def test_unexpected_failure_returns_generic_500(cfg, monkeypatch, isolated_audit_log):
    monkeypatch.setattr(provisioning_service, "delete_user", MagicMock(side_effect=RuntimeError("bug")))
    flask_app = create_app(cfg)
    
    response = flask_app.test_client().post("/commands/delete_user", json={"id": "uid-21"})
    
    assert response.status_code == 500
    assert response.get_json() == {"error": "An unexpected error occurred"}
    assert _events(isolated_audit_log)[-1]["success"] is False

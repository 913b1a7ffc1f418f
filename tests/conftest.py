"""Pytest shared fixtures: recording HTTP session, config, isolated audit dir."""
import json
import pathlib
import sys
from types import SimpleNamespace
from typing import Any, Optional

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
import requests

from fleetdesk.config.settings import AppConfig
from fleetdesk.core import audit

BASE_URL = "https://platform.test"
SERVICE_KEY = "service-role-key"


def make_response(status: int, body: Any = None, *, raw: Optional[str] = None, url: str = "") -> requests.Response:
    """Build a real requests.Response with a JSON (or raw) body."""
    resp = requests.Response()
    resp.status_code = status
    resp.url = url
    resp.reason = "Stub"
    if raw is not None:
        resp._content = raw.encode("utf-8")
    elif body is not None:
        resp._content = json.dumps(body).encode("utf-8")
        resp.headers["Content-Type"] = "application/json"
    else:
        resp._content = b""
    resp.encoding = "utf-8"
    return resp


class FakeSession:
    """Stand-in for requests.Session replaying queued responses in order.
    
    Each queued entry matches on method and path; unexpected calls fail the
    test instead of reaching the network.
    """
    
    def __init__(self):
        self.calls: list[SimpleNamespace] = []
        self._queue: list[tuple[str, str, Any]] = []
        self.closed = False
    
    def queue(self, method: str, path: str, status: int = 200, body: Any = None, *,
              raw: Optional[str] = None, error: Optional[Exception] = None) -> None:
        outcome = error if error is not None else (status, body, raw)
        self._queue.append((method, path, outcome))
    
    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        self.calls.append(SimpleNamespace(
            method=method, url=url, params=params, json=json, headers=headers or {}, timeout=timeout,
        ))
        for index, (q_method, q_path, outcome) in enumerate(self._queue):
            if q_method == method and url == f"{BASE_URL}{q_path}":
                del self._queue[index]
                if isinstance(outcome, Exception):
                    raise outcome
                status, body, raw = outcome
                return make_response(status, body, raw=raw, url=url)
        raise AssertionError(f"Unexpected HTTP {method} {url}")
    
    def calls_to(self, method: str, path: str) -> list[SimpleNamespace]:
        return [c for c in self.calls if c.method == method and c.url == f"{BASE_URL}{path}"]
    
    def close(self):
        self.closed = True


@pytest.fixture
def fake_session(monkeypatch):
    """Replace requests.Session for the code under test."""
    session = FakeSession()
    monkeypatch.setattr(requests, "Session", lambda: session)
    return session


@pytest.fixture
def cfg():
    return AppConfig(platform_url=BASE_URL, service_role_key=SERVICE_KEY)


@pytest.fixture(autouse=True)
def isolated_audit_log(monkeypatch, tmp_path):
    """Keep audit events of every test inside tmp_path."""
    audit_dir = tmp_path / "audit"
    audit_file = audit_dir / "provisioning-events.jsonl"
    monkeypatch.setattr(audit, "AUDIT_LOG_DIR", audit_dir)
    monkeypatch.setattr(audit, "AUDIT_LOG_FILE", audit_file)
    monkeypatch.delenv("AUDIT_LOG_SIGNING_KEY", raising=False)
    return audit_file

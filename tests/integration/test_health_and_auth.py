"""Integration tests for health checks and authentication.

This module verifies:
- Health endpoints `/livez` and `/readyz` respond without a key.
- Blend endpoints reject requests without (or with a wrong) `x-api-key`.
- Bearer tokens are accepted as an alternative to `x-api-key`.
"""

from __future__ import annotations

import os

from fastapi.testclient import TestClient

from fertiblend_engine.api.app import create_app
from fertiblend_engine.settings import Settings


def _client_with_key() -> TestClient:
    os.environ["FERTIBLEND_API_KEY"] = "test-key"
    return TestClient(create_app(Settings()))


def test_health_endpoints():
    client = _client_with_key()
    r1 = client.get("/livez")
    r2 = client.get("/readyz")
    assert r1.status_code == 200 and r1.json().get("status") == "ok"
    assert r2.status_code == 200 and r2.json().get("status") == "ready"


def test_auth_missing_or_wrong_key_rejected():
    client = _client_with_key()
    assert client.post("/v1/blend/solve", json={}).status_code == 401
    assert client.post("/v1/blend/solve", json={}, headers={"x-api-key": "nope"}).status_code == 401


def test_bearer_token_accepted():
    client = _client_with_key()
    payload = client.get("/v1/blend/example").json()
    r = client.post("/v1/blend/solve", json=payload, headers={"Authorization": "Bearer test-key"})
    assert r.status_code == 200


def test_unconfigured_key_rejects_everything(monkeypatch):
    monkeypatch.delenv("FERTIBLEND_API_KEY", raising=False)
    client = TestClient(create_app(Settings(_env_file=None)))
    r = client.post("/v1/blend/solve", json={}, headers={"x-api-key": "anything"})
    assert r.status_code == 401

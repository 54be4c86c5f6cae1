from __future__ import annotations

import pytest

from app.core import config

from factories import auth_headers


def test_dev_login_disabled_by_default(client, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(config, "ENABLE_DEV_LOGIN", False)

    r = client.post("/auth/session", json={"email": "carol@example.com"})

    assert r.status_code == 404


def test_dev_login_issues_a_working_token(client, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(config, "ENABLE_DEV_LOGIN", True)

    r = client.post("/auth/session", json={"email": "Carol@Example.com", "name": "Carol"})

    assert r.status_code == 200
    body = r.json()
    headers = {"Authorization": f"Bearer {body['token']}"}
    me = client.get("/auth/me", headers=headers).json()
    assert me["_id"] == body["user"]["_id"]
    assert me["email"] == "carol@example.com"


def test_logout_invalidates_token(client, alice):
    headers = auth_headers(alice)

    assert client.delete("/auth/session", headers=headers).status_code == 200
    assert client.get("/auth/me", headers=headers).status_code == 401


def test_health_endpoints(client):
    assert client.get("/health").json()["status"] == "ok"
    assert "version" in client.get("/version").json()

    ready = client.get("/health/ready")
    assert ready.status_code == 200
    assert ready.json()["checks"]["db"]["status"] == "ok"

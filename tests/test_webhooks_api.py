from __future__ import annotations

import logging
import sqlite3

import pytest
from fastapi.testclient import TestClient

from conftest import FIXED_NOW, INTEGRATION_ID, ORG_ID, WORKSPACE_ID, connection_dict, fixed_clock
from config.settings import Settings
from db.connection import get_connection
from db.repos.activities_repo import ActivitiesRepo
from db.repos.contacts_repo import ContactsRepo


SECRET = "s3cret-value"


def _settings(tmp_path, secret=SECRET, run_env="test"):
    return Settings(webhook_secret=secret, db_path=str(tmp_path / "api.db"), run_env=run_env, log_level="INFO")


@pytest.fixture
def settings(tmp_path):
    return _settings(tmp_path)


@pytest.fixture
def client(settings):
    from api.app import create_app

    with TestClient(create_app(settings, clock=fixed_clock)) as c:
        yield c


@pytest.fixture
def store(settings):
    conn = get_connection(settings.db_path)
    try:
        yield conn
    finally:
        conn.close()


def _event(**overrides):
    data = {
        "webhook_secret": SECRET,
        "event_type": "CONNECTION_ACCEPTED",
        "timestamp": "2024-05-01T10:00:05Z",
        "source": {
            "organization_id": ORG_ID,
            "workspace_id": WORKSPACE_ID,
            "integration_id": INTEGRATION_ID,
        },
        "connection": connection_dict(),
    }
    data.update(overrides)
    return data


def test_connection_accepted_creates_then_updates(client, store):
    first = client.post("/webhooks/outreach/connection-accepted", json=_event())
    assert first.status_code == 200
    body = first.json()
    assert body["success"] is True
    assert body["action"] == "created"
    assert body["match_type"] == "NEW"
    assert "error" not in body

    second = client.post("/webhooks/outreach/connection-accepted", json=_event())
    assert second.status_code == 200
    assert second.json()["action"] == "updated"
    assert second.json()["match_type"] == "URN_ID"
    assert second.json()["contact_id"] == body["contact_id"]

    contacts = ContactsRepo(store)
    assert contacts.count(ORG_ID) == 1
    contact = contacts.get_contact(body["contact_id"])
    assert contact.custom_fields["lastSyncedAt"] == FIXED_NOW
    activity = ActivitiesRepo(store).list_for_contact(body["contact_id"])[0]
    assert activity["custom_fields"]["integrationId"] == INTEGRATION_ID
    assert activity["custom_fields"]["eventTimestamp"] == "2024-05-01T10:00:05Z"


@pytest.mark.parametrize("secret", ["wrong", "", None, 12345, "s3cret-valuE"])
def test_wrong_or_missing_secret_is_401(client, store, secret):
    payload = _event()
    if secret is None:
        payload.pop("webhook_secret")
    else:
        payload["webhook_secret"] = secret
    resp = client.post("/webhooks/outreach/connection-accepted", json=payload)
    assert resp.status_code == 401
    assert ContactsRepo(store).count(ORG_ID) == 0


def test_secret_is_checked_before_schema(client):
    resp = client.post("/webhooks/outreach/connection-accepted", json={"webhook_secret": "wrong"})
    assert resp.status_code == 401


def test_schema_failure_is_400_with_errors(client, store):
    resp = client.post("/webhooks/outreach/connection-accepted", json=_event(connection=connection_dict(urn_id="")))
    assert resp.status_code == 400
    detail = resp.json()["detail"]
    assert detail["message"] == "Invalid webhook payload"
    assert ["connection", "urn_id"] in [e["loc"] for e in detail["errors"]]
    assert ContactsRepo(store).count(ORG_ID) == 0


def test_wrong_event_type_is_400(client):
    resp = client.post("/webhooks/outreach/connection-accepted", json=_event(event_type="MESSAGE_RECEIVED"))
    assert resp.status_code == 400


@pytest.mark.parametrize("body", [b"[1, 2]", b"\"text\"", b"not json", b""])
def test_non_object_bodies_are_400(client, body):
    resp = client.post(
        "/webhooks/outreach/connection-accepted",
        content=body,
        headers={"content-type": "application/json"},
    )
    assert resp.status_code == 400


def test_batch_sync_reports_per_item_results(client, store):
    payload = {
        "webhook_secret": SECRET,
        "organization_id": ORG_ID,
        "connections": [
            connection_dict(),
            connection_dict(urn_id="u2", name="Grace Hopper", profile_url="https://www.linkedin.com/in/grace", email="grace@x.com"),
            connection_dict(urn_id="u1"),
            {"urn_id": "broken"},
        ],
    }
    resp = client.post("/webhooks/outreach/batch-sync", json=payload)
    assert resp.status_code == 200
    body = resp.json()
    assert (body["total"], body["created"], body["updated"], body["skipped"]) == (4, 2, 1, 1)
    assert [r["action"] for r in body["results"]] == ["created", "created", "updated", "skipped"]
    assert body["results"][3]["error"].startswith("Invalid connection:")
    assert ContactsRepo(store).count(ORG_ID) == 2


@pytest.mark.parametrize("connections", [None, "u1", {"urn_id": "u1"}])
def test_batch_sync_requires_connections_list(client, connections):
    payload = {"webhook_secret": SECRET, "organization_id": ORG_ID}
    if connections is not None:
        payload["connections"] = connections
    resp = client.post("/webhooks/outreach/batch-sync", json=payload)
    assert resp.status_code == 400


def test_batch_sync_rejects_bad_secret(client):
    resp = client.post("/webhooks/outreach/batch-sync", json={"webhook_secret": "nope", "organization_id": ORG_ID, "connections": []})
    assert resp.status_code == 401


def test_batch_sync_empty_list(client):
    resp = client.post("/webhooks/outreach/batch-sync", json={"webhook_secret": SECRET, "organization_id": ORG_ID, "connections": []})
    assert resp.status_code == 200
    assert resp.json() == {"total": 0, "created": 0, "updated": 0, "skipped": 0, "results": []}


def test_manual_sync_force_overwrites_basic_fields(client, store):
    cid = ContactsRepo(store).create_contact(
        ORG_ID,
        {"first_name": "Augusta", "last_name": "King", "linkedin_urn_id": "u1", "lead_status": "QUALIFIED", "custom_fields": {}},
    )
    base = {"webhook_secret": SECRET, "organization_id": ORG_ID, "workspace_id": WORKSPACE_ID, "connection": connection_dict()}

    resp = client.post("/webhooks/outreach/manual-sync", json=base)
    assert resp.status_code == 200
    assert resp.json()["action"] == "updated"
    assert ContactsRepo(store).get_contact(cid).first_name == "Augusta"

    resp = client.post("/webhooks/outreach/manual-sync", json={**base, "force_update": True})
    assert resp.status_code == 200
    contact = ContactsRepo(store).get_contact(cid)
    assert (contact.first_name, contact.last_name) == ("Ada", "Lovelace")
    assert contact.lead_status == "QUALIFIED"


def test_manual_sync_rejects_bad_secret(client):
    resp = client.post(
        "/webhooks/outreach/manual-sync",
        json={"webhook_secret": "x", "organization_id": ORG_ID, "workspace_id": WORKSPACE_ID, "connection": connection_dict()},
    )
    assert resp.status_code == 401


def test_disabled_secret_accepts_any_request(tmp_path, caplog):
    from api.app import create_app

    with caplog.at_level(logging.WARNING, logger="services.auth"):
        app = create_app(_settings(tmp_path, secret=""), clock=fixed_clock)
    assert any("authentication disabled" in r.getMessage() for r in caplog.records)

    with TestClient(app) as c:
        resp = c.post("/webhooks/outreach/connection-accepted", json=_event(webhook_secret="anything"))
    assert resp.status_code == 200
    assert resp.json()["action"] == "created"


def test_disabled_secret_in_production_logs_error(tmp_path, caplog):
    from api.app import create_app

    with caplog.at_level(logging.WARNING, logger="services.auth"):
        create_app(_settings(tmp_path, secret="", run_env="production"))
    assert any(r.levelno == logging.ERROR for r in caplog.records if r.name == "services.auth")


def test_health_endpoints(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["checks"] == {"database": "healthy"}
    assert client.get("/health/live").json() == {"status": "ok"}
    assert client.get("/health/ready").json() == {"status": "ready"}


def test_readiness_reports_database_failure(tmp_path):
    from api.app import create_app

    settings = _settings(tmp_path)
    healthy = {"value": True}

    def _factory():
        if not healthy["value"]:
            raise sqlite3.OperationalError("unable to open database file")
        return get_connection(settings.db_path)

    with TestClient(create_app(settings, connection_factory=_factory)) as c:
        healthy["value"] = False
        ready = c.get("/health/ready").json()
        assert ready == {"status": "not_ready", "error": "Database connection failed"}
        assert c.get("/health").json()["checks"]["database"] == "unhealthy"


@pytest.fixture
def store_down_client(tmp_path):
    """App whose store becomes unreachable once startup has bootstrapped it."""
    from api.app import create_app

    settings = _settings(tmp_path)
    state = {"up": True}

    def _factory():
        if not state["up"]:
            raise sqlite3.OperationalError("unable to open database file")
        return get_connection(settings.db_path)

    with TestClient(create_app(settings, connection_factory=_factory, clock=fixed_clock)) as c:
        state["up"] = False
        yield c


def test_store_down_still_rejects_bad_secret(store_down_client):
    resp = store_down_client.post("/webhooks/outreach/connection-accepted", json=_event(webhook_secret="wrong"))
    assert resp.status_code == 401
    resp = store_down_client.post(
        "/webhooks/outreach/batch-sync",
        json={"webhook_secret": "wrong", "organization_id": ORG_ID, "connections": []},
    )
    assert resp.status_code == 401


def test_store_down_still_rejects_bad_schema(store_down_client):
    resp = store_down_client.post("/webhooks/outreach/connection-accepted", json=_event(event_type="OTHER"))
    assert resp.status_code == 400


def test_store_down_event_is_skipped(store_down_client):
    resp = store_down_client.post("/webhooks/outreach/connection-accepted", json=_event())
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is False
    assert body["action"] == "skipped"
    assert body["error"] == "unable to open database file"

    manual = store_down_client.post(
        "/webhooks/outreach/manual-sync",
        json={"webhook_secret": SECRET, "organization_id": ORG_ID, "workspace_id": WORKSPACE_ID, "connection": connection_dict()},
    )
    assert manual.status_code == 200
    assert manual.json()["action"] == "skipped"


def test_store_down_batch_skips_every_item(store_down_client):
    payload = {
        "webhook_secret": SECRET,
        "organization_id": ORG_ID,
        "connections": [connection_dict(), connection_dict(urn_id="u2")],
    }
    resp = store_down_client.post("/webhooks/outreach/batch-sync", json=payload)
    assert resp.status_code == 200
    body = resp.json()
    assert (body["total"], body["created"], body["updated"], body["skipped"]) == (2, 0, 0, 2)
    assert all(r["error"] == "unable to open database file" for r in body["results"])

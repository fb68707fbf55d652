"""API tests for clients, events, stats and export."""

from __future__ import annotations

from datetime import date

import pytest
from fastapi.testclient import TestClient

from territory.domain.models import Client, ClientStatus
from territory.main import app, client_repo, event_repo


@pytest.fixture(autouse=True)
def _clear_repos():
    client_repo._store.clear()
    event_repo._store.clear()
    client_repo.add(
        Client(id="X", name="Client X", assigned_postal_codes=["10001", "10002"])
    )
    client_repo.add(Client(id="Y", name="Client Y", assigned_postal_codes=["10004"]))
    yield
    client_repo._store.clear()
    event_repo._store.clear()


@pytest.fixture()
def client():
    return TestClient(app)


def _event_payload(**overrides) -> dict:
    payload = {
        "client_id": "X",
        "event_name": "Corporate Gala",
        "postal_code": "10001",
        "start_date": "2024-03-15",
        "end_date": "2024-03-15",
    }
    payload.update(overrides)
    return payload


def test_health(client: TestClient):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


def test_create_event(client: TestClient):
    resp = client.post("/events", json=_event_payload(end_date=None))
    assert resp.status_code == 201
    body = resp.json()

    assert body["end_date"] == "2024-03-15"
    assert body["status"] == "active"
    assert body["conflicts"] == []
    assert event_repo.get(body["id"]) is not None


def test_create_event_requires_postal_code(client: TestClient):
    resp = client.post("/events", json=_event_payload(postal_code=""))
    assert resp.status_code == 422


def test_create_event_rejects_malformed_postal_code(client: TestClient):
    resp = client.post("/events", json=_event_payload(postal_code="1000A"))
    assert resp.status_code == 422


def test_create_event_rejects_end_before_start(client: TestClient):
    resp = client.post(
        "/events", json=_event_payload(start_date="2024-03-15", end_date="2024-03-14")
    )
    assert resp.status_code == 422


def test_territory_violation_is_409(client: TestClient):
    resp = client.post(
        "/events?confirm=true", json=_event_payload(client_id="Y", postal_code="10001")
    )
    assert resp.status_code == 409
    body = resp.json()
    assert body["code"] == "TERRITORY_VIOLATION"
    assert "10001" in body["error"]
    assert event_repo.list_all() == []


def test_inactive_holder_does_not_block(client: TestClient):
    x = client_repo.get("X")
    client_repo.add(x.model_copy(update={"status": ClientStatus.INACTIVE}))

    resp = client.post("/events", json=_event_payload(client_id="Y"))
    assert resp.status_code == 201


def test_unknown_client_is_404(client: TestClient):
    resp = client.post("/events", json=_event_payload(client_id="nobody"))
    assert resp.status_code == 404
    assert resp.json()["code"] == "NOT_FOUND"


def test_conflict_warning_then_override(client: TestClient):
    first = client.post("/events", json=_event_payload(event_name="Gala")).json()

    warned = client.post(
        "/events", json=_event_payload(event_name="Expo", postal_code="10002")
    )
    assert warned.status_code == 409
    assert warned.json()["code"] == "SCHEDULING_CONFLICT"
    assert warned.json()["details"] == ["Gala (10001)"]

    confirmed = client.post(
        "/events?confirm=true",
        json=_event_payload(event_name="Expo", postal_code="10002"),
    )
    assert confirmed.status_code == 201
    second = confirmed.json()
    assert second["conflicts"] == [first["id"]]

    refreshed = client.get(f"/events/{first['id']}").json()
    assert refreshed["conflicts"] == [second["id"]]

    stats = client.get("/stats").json()
    assert stats["conflict_pairs"] == 1
    assert stats["active_events"] == 2


def test_check_endpoint_does_not_mutate(client: TestClient):
    client.post("/events", json=_event_payload())

    resp = client.post("/events/check", json=_event_payload(client_id="Y"))
    assert resp.status_code == 200
    body = resp.json()
    assert body["may_assign"] is False
    assert [c["postal_code"] for c in body["conflicts"]] == ["10001"]
    assert len(event_repo.list_all()) == 1


def test_check_endpoint_reports_missing_client_and_event(client: TestClient):
    missing_client = client.post(
        "/events/check", json=_event_payload(client_id="nobody")
    )
    assert missing_client.status_code == 404
    assert missing_client.json()["code"] == "NOT_FOUND"

    missing_event = client.post(
        "/events/check", params={"event_id": "missing"}, json=_event_payload()
    )
    assert missing_event.status_code == 404


def test_update_and_delete_event(client: TestClient):
    created = client.post("/events", json=_event_payload()).json()

    updated = client.put(
        f"/events/{created['id']}",
        json=_event_payload(event_name="Renamed", status="completed"),
    )
    assert updated.status_code == 200
    assert updated.json()["event_name"] == "Renamed"
    assert updated.json()["status"] == "completed"

    assert client.delete(f"/events/{created['id']}").status_code == 200
    assert client.get(f"/events/{created['id']}").status_code == 404


def test_list_events_filters(client: TestClient):
    client.post("/events", json=_event_payload(event_name="Gala"))
    client.post(
        "/events?confirm=true",
        json=_event_payload(event_name="Expo", postal_code="10002", status="cancelled"),
    )

    def names(resp):
        return [e["event_name"] for e in resp.json()]

    assert names(client.get("/events")) == ["Gala", "Expo"]
    assert names(client.get("/events", params={"q": "EXPO"})) == ["Expo"]
    assert names(client.get("/events", params={"active_only": True})) == ["Gala"]
    assert names(client.get("/events", params={"status": "cancelled"})) == ["Expo"]


def test_create_client_normalizes_postal_codes(client: TestClient):
    resp = client.post(
        "/clients",
        json={"name": "Fresh", "assigned_postal_codes": "20001, bad, 20002"},
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["assigned_postal_codes"] == ["20001", "20002"]
    assert body["color"].startswith("#")
    assert body["created_date"] == date.today().isoformat()


def test_create_client_without_postal_codes(client: TestClient):
    resp = client.post("/clients", json={"name": "Empty", "assigned_postal_codes": None})
    assert resp.status_code == 201
    assert resp.json()["assigned_postal_codes"] == []


def test_create_client_rejects_non_list_postal_codes(client: TestClient):
    resp = client.post("/clients", json={"name": "Bad", "assigned_postal_codes": 5})
    assert resp.status_code == 422
    assert len(client_repo.list_all()) == 2


def test_create_client_with_claimed_code_is_409(client: TestClient):
    resp = client.post(
        "/clients", json={"name": "Poacher", "assigned_postal_codes": ["10004"]}
    )
    assert resp.status_code == 409
    assert resp.json()["code"] == "TERRITORY_VIOLATION"


def test_delete_client_cascades(client: TestClient):
    x_event = client.post("/events", json=_event_payload()).json()
    y_event = client.post(
        "/events?confirm=true",
        json=_event_payload(client_id="Y", postal_code="10004"),
    ).json()
    assert y_event["conflicts"] == [x_event["id"]]

    resp = client.delete("/clients/X")
    assert resp.status_code == 200
    assert resp.json()["deleted_event_ids"] == [x_event["id"]]

    remaining = client.get("/events").json()
    assert [e["id"] for e in remaining] == [y_event["id"]]
    assert remaining[0]["conflicts"] == []
    assert client.get("/clients/X").status_code == 404


def test_import_template_and_upload(client: TestClient):
    template = client.get("/clients/import-template")
    assert template.status_code == 200
    assert template.text.startswith("Client Name,")

    client_repo._store.clear()
    resp = client.post(
        "/clients/import",
        files={"file": ("clients.csv", template.content, "text/csv")},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert [c["name"] for c in body["imported"]] == [
        "Acme Events",
        "Premier Productions",
    ]
    assert body["errors"] == []
    assert len(client_repo.list_all()) == 2


def test_export(client: TestClient):
    client.post("/events", json=_event_payload())

    resp = client.get("/export")
    assert resp.status_code == 200
    assert "territory-data-" in resp.headers["content-disposition"]
    body = resp.json()
    assert {c["id"] for c in body["clients"]} == {"X", "Y"}
    assert len(body["events"]) == 1
    assert "export_date" in body

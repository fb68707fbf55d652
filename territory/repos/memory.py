"""In-memory repositories for clients and events."""

from __future__ import annotations

from datetime import date

from territory.domain.models import Client, ClientStatus, Event, EventStatus


class EventRepository:
    """Dict-backed store for Event instances, keyed by id.

    Insertion order is kept so conflict lists come out in a stable order.
    """

    def __init__(self) -> None:
        self._store: dict[str, Event] = {}

    def add(self, event: Event) -> None:
        self._store[event.id] = event

    def get(self, event_id: str) -> Event | None:
        return self._store.get(event_id)

    def list_all(self) -> list[Event]:
        return list(self._store.values())

    def list_for_client(self, client_id: str) -> list[Event]:
        return [e for e in self._store.values() if e.client_id == client_id]

    def replace_all(self, events: list[Event]) -> None:
        self._store = {e.id: e for e in events}

    def delete(self, event_id: str) -> bool:
        return self._store.pop(event_id, None) is not None

    def delete_for_client(self, client_id: str) -> list[str]:
        """Delete every event owned by *client_id* (cascade); return their ids."""
        to_remove = [e.id for e in self.list_for_client(client_id)]
        for eid in to_remove:
            del self._store[eid]
        return to_remove


class ClientRepository:
    """Dict-backed store for Client instances, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[str, Client] = {}

    def add(self, client: Client) -> None:
        self._store[client.id] = client

    def get(self, client_id: str) -> Client | None:
        return self._store.get(client_id)

    def list_all(self) -> list[Client]:
        return list(self._store.values())

    def list_active(self) -> list[Client]:
        return [c for c in self._store.values() if c.status == ClientStatus.ACTIVE]

    def delete(self, client_id: str) -> bool:
        return self._store.pop(client_id, None) is not None


# ---------------------------------------------------------------------------
# Seed data – two clients and one event matching the reference workspace
# ---------------------------------------------------------------------------


def seed(clients: ClientRepository, events: EventRepository) -> None:
    clients.add(
        Client(
            id="1",
            name="Acme Events",
            contact_email="contact@acme.com",
            contact_phone="555-0101",
            assigned_postal_codes=["10001", "10002", "10003"],
            color="#3b82f6",
            status=ClientStatus.ACTIVE,
            created_date=date(2024, 1, 15),
        )
    )
    clients.add(
        Client(
            id="2",
            name="Premier Productions",
            contact_email="info@premier.com",
            contact_phone="555-0102",
            assigned_postal_codes=["10004", "10005"],
            color="#10b981",
            status=ClientStatus.ACTIVE,
            created_date=date(2024, 1, 20),
        )
    )
    events.add(
        Event(
            id="1",
            client_id="1",
            event_name="Corporate Gala 2024",
            postal_code="10001",
            address="123 Main St, New York, NY 10001",
            latitude=40.7489,
            longitude=-73.9680,
            start_date=date(2024, 3, 15),
            end_date=date(2024, 3, 15),
            status=EventStatus.ACTIVE,
            notes="Annual corporate event",
        )
    )

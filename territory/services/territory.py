"""Postal-code exclusivity among active clients."""

from __future__ import annotations

from territory.domain.errors import TerritoryViolation
from territory.domain.models import Client


def owner_of(
    postal_code: str, clients: list[Client], exclude_id: str | None = None
) -> Client | None:
    """Return the first active client (other than *exclude_id*) claiming the code."""
    for client in clients:
        if client.id != exclude_id and client.is_active and client.owns(postal_code):
            return client
    return None


def may_assign(client_id: str, postal_code: str, clients: list[Client]) -> bool:
    """Return whether *client_id* may operate in *postal_code*.

    Allowed when the client already owns the code, or when no other active
    client claims it. Inactive clients never block. Unknown clients are
    refused.
    """
    client = next((c for c in clients if c.id == client_id), None)
    if client is None:
        return False
    if client.owns(postal_code):
        return True
    return owner_of(postal_code, clients, exclude_id=client_id) is None


def ensure_assignable(client_id: str, postal_code: str, clients: list[Client]) -> None:
    """Raise TerritoryViolation naming the code when ``may_assign`` fails."""
    if may_assign(client_id, postal_code, clients):
        return
    owner = owner_of(postal_code, clients, exclude_id=client_id)
    raise TerritoryViolation(postal_code, owner.name if owner else None)

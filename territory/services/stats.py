"""Summary counts over the current events and clients."""

from __future__ import annotations

from territory.domain.models import Client, ClientStatus, Event, EventStatus, Stats


def aggregate_stats(events: list[Event], clients: list[Client]) -> Stats:
    # Conflict lists are symmetric, so every pair is counted from both sides.
    total_entries = sum(len(e.conflicts) for e in events)
    return Stats(
        active_events=sum(1 for e in events if e.status == EventStatus.ACTIVE),
        conflict_pairs=total_entries // 2,
        active_clients=sum(1 for c in clients if c.status == ClientStatus.ACTIVE),
        claimed_postal_codes=len(
            {code for c in clients for code in c.assigned_postal_codes}
        ),
    )

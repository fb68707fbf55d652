"""Verbatim dump of the current clients and events."""

from __future__ import annotations

from datetime import datetime, timezone

from territory.domain.models import Client, Event, ExportBundle


def build_export(
    clients: list[Client], events: list[Event], now: datetime | None = None
) -> ExportBundle:
    current_time = now or datetime.now(timezone.utc)
    return ExportBundle(
        clients=clients,
        events=events,
        export_date=current_time.isoformat(),
    )


def export_filename(now: datetime | None = None) -> str:
    current_time = now or datetime.now(timezone.utc)
    return f"territory-data-{current_time.date().isoformat()}.json"

"""Service for detecting scheduling conflicts between events.

Two events conflict when their date ranges overlap and their coordinates lie
within ``CONFLICT_RADIUS_MILES`` of each other. Status and owning client are
ignored: cancelled, completed and same-client events all participate.
"""

from __future__ import annotations

import logging
from datetime import date

from territory.core.config import CONFLICT_RADIUS_MILES
from territory.domain.models import ConflictCandidate, Event
from territory.services.geo import distance

logger = logging.getLogger(__name__)


def overlaps(start_a: date, end_a: date, start_b: date, end_b: date) -> bool:
    """Closed-interval overlap: touching endpoints count as overlapping."""
    return start_a <= end_b and end_a >= start_b


def _in_conflict(
    lat_a: float,
    lon_a: float,
    start_a: date,
    end_a: date,
    other: Event,
    radius_miles: float,
) -> bool:
    if not overlaps(start_a, end_a, other.start_date, other.end_date):
        return False
    return distance(lat_a, lon_a, other.latitude, other.longitude) <= radius_miles


def compute_conflicts(
    events: list[Event],
    radius_miles: float = CONFLICT_RADIUS_MILES,
) -> list[Event]:
    """Return copies of *events* with ``conflicts`` rebuilt from scratch.

    Input order is preserved and the input events are not modified. Each
    unordered pair is tested once and recorded on both sides, so the result
    is symmetric and never self-referencing.
    """
    found: dict[str, list[str]] = {event.id: [] for event in events}

    for i, event in enumerate(events):
        for other in events[i + 1 :]:
            if other.id == event.id:
                continue
            if _in_conflict(
                event.latitude,
                event.longitude,
                event.start_date,
                event.end_date,
                other,
                radius_miles,
            ):
                found[event.id].append(other.id)
                found[other.id].append(event.id)

    # Restore per-event ordering to match the input sequence.
    position = {event.id: idx for idx, event in enumerate(events)}
    result = [
        event.model_copy(
            update={"conflicts": sorted(found[event.id], key=position.__getitem__)}
        )
        for event in events
    ]
    logger.debug(
        "Recomputed conflicts for %d events (%d entries)",
        len(result),
        sum(len(e.conflicts) for e in result),
    )
    return result


recompute_conflicts = compute_conflicts


def would_conflict(
    candidate: ConflictCandidate,
    existing: list[Event],
    radius_miles: float = CONFLICT_RADIUS_MILES,
) -> list[str]:
    """Return ids of *existing* events the candidate would conflict with.

    A missing ``end_date`` is treated as a single-day event. When the
    candidate carries an id, the stored event with that id is skipped.
    """
    end_date = candidate.end_date or candidate.start_date
    return [
        other.id
        for other in existing
        if other.id != candidate.id
        and _in_conflict(
            candidate.latitude,
            candidate.longitude,
            candidate.start_date,
            end_date,
            other,
            radius_miles,
        )
    ]

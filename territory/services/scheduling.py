"""Write path for clients and events.

Every mutation validates, persists, and then rebuilds conflict lists for the
whole event collection before returning. Nothing recomputes in the background.
"""

from __future__ import annotations

import logging
from datetime import datetime

from territory.domain.errors import (
    NotFound,
    SchedulingConflict,
    TerritoryError,
    ValidationFailure,
)
from territory.domain.models import (
    Client,
    ClientRequest,
    ClientStatus,
    ConflictCandidate,
    ConflictSummary,
    Event,
    EventRequest,
    EventStatus,
    ExportBundle,
    ImportReport,
    ImportRowError,
    PreCommitCheck,
    Stats,
)
from territory.repos.memory import ClientRepository, EventRepository
from territory.services.conflicts import recompute_conflicts, would_conflict
from territory.services.export import build_export
from territory.services.geo import resolve
from territory.services.importer import parse_client_csv
from territory.services.stats import aggregate_stats
from territory.services.territory import ensure_assignable, may_assign

logger = logging.getLogger(__name__)


class SchedulingService:
    """Owns the client and event repositories for one workspace.

    Not thread-safe: callers sharing one instance must serialize writes.
    """

    def __init__(self, clients: ClientRepository, events: EventRepository) -> None:
        self.clients = clients
        self.events = events

    # ------------------------------------------------------------------
    # Recompute
    # ------------------------------------------------------------------

    def recompute(self) -> list[Event]:
        updated = recompute_conflicts(self.events.list_all())
        self.events.replace_all(updated)
        return updated

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def _require_client(self, client_id: str) -> Client:
        client = self.clients.get(client_id)
        if client is None:
            raise NotFound(f"Client not found: {client_id}")
        return client

    def _require_event(self, event_id: str) -> Event:
        event = self.events.get(event_id)
        if event is None:
            raise NotFound(f"Event not found: {event_id}")
        return event

    def _candidate(self, request: EventRequest, event_id: str | None) -> ConflictCandidate:
        location = resolve(request.postal_code)
        return ConflictCandidate(
            id=event_id,
            latitude=location.latitude,
            longitude=location.longitude,
            start_date=request.start_date,
            end_date=request.end_date,
        )

    def _summaries(self, event_ids: list[str]) -> list[ConflictSummary]:
        summaries = []
        for eid in event_ids:
            other = self.events.get(eid)
            if other is not None:
                summaries.append(
                    ConflictSummary(
                        id=other.id,
                        event_name=other.event_name,
                        postal_code=other.postal_code,
                    )
                )
        return summaries

    def check_event(
        self, request: EventRequest, event_id: str | None = None
    ) -> PreCommitCheck:
        """Run both pre-commit checks without changing any state."""
        self._require_client(request.client_id)
        if event_id is not None:
            self._require_event(event_id)
        allowed = may_assign(
            request.client_id, request.postal_code, self.clients.list_all()
        )
        conflict_ids = would_conflict(
            self._candidate(request, event_id), self.events.list_all()
        )
        return PreCommitCheck(
            may_assign=allowed, conflicts=self._summaries(conflict_ids)
        )

    def submit_event(
        self,
        request: EventRequest,
        event_id: str | None = None,
        confirm: bool = False,
    ) -> Event:
        """Create (or, with *event_id*, replace) an event.

        Territory violations always block. Scheduling conflicts block unless
        *confirm* is true.
        """
        self._require_client(request.client_id)
        if event_id is not None:
            self._require_event(event_id)

        try:
            ensure_assignable(
                request.client_id, request.postal_code, self.clients.list_all()
            )
        except TerritoryError as exc:
            logger.warning("Rejected event %r: %s", request.event_name, exc.message)
            raise

        candidate = self._candidate(request, event_id)
        conflict_ids = would_conflict(candidate, self.events.list_all())
        if conflict_ids:
            descriptions = [
                f"{s.event_name} ({s.postal_code})"
                for s in self._summaries(conflict_ids)
            ]
            if not confirm:
                raise SchedulingConflict(conflict_ids, descriptions)
            logger.warning(
                "Event %r saved despite %d conflict(s): %s",
                request.event_name,
                len(conflict_ids),
                ", ".join(descriptions),
            )

        fields = dict(
            client_id=request.client_id,
            event_name=request.event_name,
            postal_code=request.postal_code,
            address=request.address,
            latitude=candidate.latitude,
            longitude=candidate.longitude,
            start_date=request.start_date,
            end_date=request.end_date,
            status=request.status,
            notes=request.notes,
        )
        event = Event(id=event_id, **fields) if event_id else Event(**fields)
        self.events.add(event)
        self.recompute()

        logger.info(
            "%s event %s (%s) for client %s",
            "Updated" if event_id else "Created",
            event.id,
            event.postal_code,
            event.client_id,
        )
        return self.events.get(event.id)

    def delete_event(self, event_id: str) -> None:
        if not self.events.delete(event_id):
            raise NotFound(f"Event not found: {event_id}")
        self.recompute()
        logger.info("Deleted event %s", event_id)

    def search_events(
        self,
        query: str = "",
        client_id: str | None = None,
        status: EventStatus | None = None,
        active_only: bool = False,
    ) -> list[Event]:
        """Filter events by name/postal code text, client and status."""
        needle = query.lower()
        results = []
        for event in self.events.list_all():
            if needle and not (
                needle in event.event_name.lower() or query in event.postal_code
            ):
                continue
            if client_id is not None and event.client_id != client_id:
                continue
            if status is not None and event.status != status:
                continue
            if active_only and event.status != EventStatus.ACTIVE:
                continue
            results.append(event)
        return results

    # ------------------------------------------------------------------
    # Clients
    # ------------------------------------------------------------------

    def save_client(self, request: ClientRequest, client_id: str | None = None) -> Client:
        """Create (or, with *client_id*, replace) a client.

        An active client may only list postal codes no other active client
        claims, apart from codes it already held while active. Edits keep the
        original color and creation date.
        """
        existing = self._require_client(client_id) if client_id else None

        if request.status == ClientStatus.ACTIVE:
            # An inactive record reserves nothing, so reactivation is checked
            # as if the client owned no codes yet.
            if existing is not None and existing.is_active:
                current = existing
            else:
                current = Client(id=client_id or "", name=request.name)
            roster = [current] + [
                c for c in self.clients.list_active() if c.id != current.id
            ]
            for code in request.assigned_postal_codes:
                try:
                    ensure_assignable(current.id, code, roster)
                except TerritoryError as exc:
                    logger.warning("Rejected client %r: %s", request.name, exc.message)
                    raise

        fields = request.model_dump()
        if existing is not None:
            client = existing.model_copy(update=fields)
        else:
            client = Client(**fields)
        self.clients.add(client)

        logger.info(
            "%s client %s with %d postal code(s)",
            "Updated" if existing is not None else "Created",
            client.id,
            len(client.assigned_postal_codes),
        )
        return client

    def delete_client(self, client_id: str) -> list[str]:
        """Delete a client and every event it owns; return the removed event ids."""
        if not self.clients.delete(client_id):
            raise NotFound(f"Client not found: {client_id}")
        removed = self.events.delete_for_client(client_id)
        self.recompute()
        logger.info("Deleted client %s and %d event(s)", client_id, len(removed))
        return removed

    def import_clients(self, text: str) -> ImportReport:
        """Import clients from CSV; bad rows are reported, good rows are kept."""
        parsed, errors = parse_client_csv(text)
        if not parsed and errors and errors[0].row == 1:
            raise ValidationFailure(errors[0].reason)

        report = ImportReport(errors=list(errors))
        for row_number, request in parsed:
            try:
                report.imported.append(self.save_client(request))
            except TerritoryError as exc:
                report.errors.append(ImportRowError(row=row_number, reason=exc.message))

        report.errors.sort(key=lambda e: e.row)
        logger.info(
            "Imported %d client(s), %d row(s) rejected",
            len(report.imported),
            len(report.errors),
        )
        return report

    # ------------------------------------------------------------------
    # Read models
    # ------------------------------------------------------------------

    def stats(self) -> Stats:
        return aggregate_stats(self.events.list_all(), self.clients.list_all())

    def export(self, now: datetime | None = None) -> ExportBundle:
        return build_export(self.clients.list_all(), self.events.list_all(), now)

"""FastAPI application — entry point for the territory scheduling service."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import FastAPI, File, Request, UploadFile
from fastapi.responses import JSONResponse, PlainTextResponse

from territory.core.config import API_DEBUG, API_VERSION, LOG_LEVEL, SEED_DATA
from territory.core.logging import setup_logging
from territory.domain.errors import (
    NotFound,
    SchedulingConflict,
    TerritoryError,
    TerritoryViolation,
    ValidationFailure,
)
from territory.domain.models import (
    Client,
    ClientRequest,
    Event,
    EventRequest,
    EventStatus,
    ImportReport,
    PreCommitCheck,
    Stats,
)
from territory.repos.memory import ClientRepository, EventRepository, seed
from territory.services.export import export_filename
from territory.services.importer import IMPORT_TEMPLATE
from territory.services.scheduling import SchedulingService

setup_logging(LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Territory Scheduling Service",
    version=API_VERSION,
    debug=API_DEBUG,
)

# ── Singletons (created at import time for simplicity) ────────────────
client_repo = ClientRepository()
event_repo = EventRepository()
if SEED_DATA:
    seed(client_repo, event_repo)

service = SchedulingService(clients=client_repo, events=event_repo)
service.recompute()

_STATUS_CODES = {
    ValidationFailure: 422,
    NotFound: 404,
    TerritoryViolation: 409,
    SchedulingConflict: 409,
}


# ── Error mapping ─────────────────────────────────────────────────────


@app.exception_handler(TerritoryError)
async def territory_error_handler(request: Request, exc: TerritoryError):
    """Render refused writes as ``{"error", "code", "details"}``."""
    return JSONResponse(
        status_code=_STATUS_CODES.get(type(exc), 400),
        content={"error": exc.message, "code": exc.code, "details": exc.details},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "code": "INTERNAL_ERROR", "details": []},
    )


# ── Routes ────────────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict:
    return {
        "status": "healthy",
        "version": API_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/clients", response_model=list[Client])
def list_clients() -> list[Client]:
    return client_repo.list_all()


@app.post("/clients", response_model=Client, status_code=201)
def create_client(payload: ClientRequest) -> Client:
    return service.save_client(payload)


@app.get("/clients/import-template", response_class=PlainTextResponse)
def client_import_template() -> PlainTextResponse:
    """Return the CSV layout accepted by ``POST /clients/import``."""
    return PlainTextResponse(
        IMPORT_TEMPLATE,
        media_type="text/csv",
        headers={
            "Content-Disposition": 'attachment; filename="client-import-template.csv"'
        },
    )


@app.post("/clients/import", response_model=ImportReport)
async def import_clients(
    file: Annotated[UploadFile, File(description="Client CSV")],
) -> ImportReport:
    content = await file.read()
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise ValidationFailure("Client import must be UTF-8 encoded CSV")
    return service.import_clients(text)


@app.get("/clients/{client_id}", response_model=Client)
def get_client(client_id: str) -> Client:
    client = client_repo.get(client_id)
    if client is None:
        raise NotFound("Client not found")
    return client


@app.put("/clients/{client_id}", response_model=Client)
def update_client(client_id: str, payload: ClientRequest) -> Client:
    return service.save_client(payload, client_id=client_id)


@app.delete("/clients/{client_id}")
def delete_client(client_id: str) -> dict:
    """Delete a client together with all of its events."""
    removed = service.delete_client(client_id)
    return {"status": "deleted", "deleted_event_ids": removed}


@app.get("/events", response_model=list[Event])
def list_events(
    q: str = "",
    client_id: str | None = None,
    status: EventStatus | None = None,
    active_only: bool = False,
) -> list[Event]:
    return service.search_events(
        query=q, client_id=client_id, status=status, active_only=active_only
    )


@app.post("/events/check", response_model=PreCommitCheck)
def check_event(payload: EventRequest, event_id: str | None = None) -> PreCommitCheck:
    """Dry-run the territory and conflict checks for a pending submission."""
    return service.check_event(payload, event_id=event_id)


@app.post("/events", response_model=Event, status_code=201)
def create_event(payload: EventRequest, confirm: bool = False) -> Event:
    """Create an event.

    Responds 409 on a territory violation (no override) or on a scheduling
    conflict; resubmit with ``confirm=true`` to accept the conflict.
    """
    return service.submit_event(payload, confirm=confirm)


@app.get("/events/{event_id}", response_model=Event)
def get_event(event_id: str) -> Event:
    event = event_repo.get(event_id)
    if event is None:
        raise NotFound("Event not found")
    return event


@app.put("/events/{event_id}", response_model=Event)
def update_event(event_id: str, payload: EventRequest, confirm: bool = False) -> Event:
    return service.submit_event(payload, event_id=event_id, confirm=confirm)


@app.delete("/events/{event_id}")
def delete_event(event_id: str) -> dict:
    service.delete_event(event_id)
    return {"status": "deleted"}


@app.get("/stats", response_model=Stats)
def stats() -> Stats:
    return service.stats()


@app.get("/export")
def export() -> JSONResponse:
    now = datetime.now(timezone.utc)
    bundle = service.export(now)
    return JSONResponse(
        content=bundle.model_dump(mode="json"),
        headers={"Content-Disposition": f'attachment; filename="{export_filename(now)}"'},
    )


if __name__ == "__main__":
    import uvicorn

    from territory.core.config import API_HOST, API_PORT

    uvicorn.run("territory.main:app", host=API_HOST, port=API_PORT, reload=API_DEBUG)

"""Domain models for territory assignment and event scheduling."""

from __future__ import annotations

import random
import re
import uuid
from datetime import date
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator

from territory.core.config import POSTAL_CODE_PATTERN

try:
    from enum import StrEnum
except ImportError:  # pragma: no cover - fallback for older Python runtimes

    class StrEnum(str, Enum):
        pass


_POSTAL_CODE_RE = re.compile(POSTAL_CODE_PATTERN)


class EventStatus(StrEnum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ClientStatus(StrEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"


def _new_id() -> str:
    return str(uuid.uuid4())


def _random_color() -> str:
    return f"#{random.randrange(0x1000000):06x}"


def is_valid_postal_code(postal_code: str) -> bool:
    return bool(_POSTAL_CODE_RE.match(postal_code))


def split_postal_codes(raw: str | list[str] | None) -> list[str]:
    """Split a comma-delimited string (or list) into trimmed, well-formed codes.

    Malformed entries are dropped rather than rejected. ``None`` means no codes.
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        parts = raw.split(",")
    elif isinstance(raw, (list, tuple)):
        parts = raw
    else:
        raise ValueError(
            "assigned_postal_codes must be a comma-delimited string or list"
        )
    codes = [str(p).strip() for p in parts]
    return [c for c in codes if is_valid_postal_code(c)]


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class Client(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str
    contact_email: str = ""
    contact_phone: str = ""
    assigned_postal_codes: list[str] = Field(default_factory=list)
    color: str = Field(default_factory=_random_color)
    status: ClientStatus = ClientStatus.ACTIVE
    created_date: date = Field(default_factory=date.today)

    @property
    def is_active(self) -> bool:
        return self.status == ClientStatus.ACTIVE

    def owns(self, postal_code: str) -> bool:
        return postal_code in self.assigned_postal_codes


class Event(BaseModel):
    id: str = Field(default_factory=_new_id)
    client_id: str
    event_name: str
    postal_code: str
    address: str | None = None
    latitude: float
    longitude: float
    start_date: date
    end_date: date
    status: EventStatus = EventStatus.ACTIVE
    notes: str = ""
    conflicts: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _end_not_before_start(self) -> Event:
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class PostalCodeLocation(BaseModel):
    """Placeholder geocoding result for a postal code."""

    postal_code: str
    latitude: float
    longitude: float
    city: str
    state: str


class ConflictCandidate(BaseModel):
    """An event that has not been committed yet.

    ``id`` is set when the candidate is an edit of a stored event so the
    stored copy is not reported as conflicting with itself.
    """

    id: str | None = None
    latitude: float
    longitude: float
    start_date: date
    end_date: date | None = None


class Stats(BaseModel):
    active_events: int
    conflict_pairs: int
    active_clients: int
    claimed_postal_codes: int


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class EventRequest(BaseModel):
    client_id: str
    event_name: str
    postal_code: str
    address: str | None = None
    start_date: date
    end_date: date | None = None
    status: EventStatus = EventStatus.ACTIVE
    notes: str = ""

    @field_validator("postal_code")
    @classmethod
    def _postal_code_well_formed(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Postal code is required")
        if not is_valid_postal_code(value):
            raise ValueError(f"Malformed postal code: {value!r}")
        return value

    @model_validator(mode="after")
    def _default_end_date(self) -> EventRequest:
        if self.end_date is None:
            self.end_date = self.start_date
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class ClientRequest(BaseModel):
    name: str
    contact_email: str = ""
    contact_phone: str = ""
    assigned_postal_codes: list[str] = Field(default_factory=list)
    status: ClientStatus = ClientStatus.ACTIVE

    @field_validator("name")
    @classmethod
    def _name_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Client name is required")
        return value

    @field_validator("assigned_postal_codes", mode="before")
    @classmethod
    def _normalize_postal_codes(cls, value: str | list[str] | None) -> list[str]:
        return split_postal_codes(value)


class ConflictSummary(BaseModel):
    id: str
    event_name: str
    postal_code: str


class PreCommitCheck(BaseModel):
    may_assign: bool
    conflicts: list[ConflictSummary] = Field(default_factory=list)


class ImportRowError(BaseModel):
    row: int
    reason: str


class ImportReport(BaseModel):
    imported: list[Client] = Field(default_factory=list)
    errors: list[ImportRowError] = Field(default_factory=list)


class ExportBundle(BaseModel):
    clients: list[Client]
    events: list[Event]
    export_date: str

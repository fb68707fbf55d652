"""Parse the client bulk-import CSV into ClientRequest records."""

from __future__ import annotations

import csv
import io

from pydantic import ValidationError

from territory.domain.models import ClientRequest, ImportRowError

IMPORT_TEMPLATE = """\
Client Name,Contact Email,Contact Phone,Assigned Zip Codes (comma-separated),Status
Acme Events,contact@acme.com,555-0101,"10001,10002,10003",active
Premier Productions,info@premier.com,555-0102,"10004,10005",active
"""

# Header -> ClientRequest field. Matching is case-insensitive on the prefix so
# "Assigned Zip Codes" and "Assigned Zip Codes (comma-separated)" both work.
_COLUMNS = {
    "client name": "name",
    "contact email": "contact_email",
    "contact phone": "contact_phone",
    "assigned zip codes": "assigned_postal_codes",
    "status": "status",
}


def _field_for(header: str) -> str | None:
    normalized = header.strip().lower()
    for prefix, field in _COLUMNS.items():
        if normalized.startswith(prefix):
            return field
    return None


def parse_client_csv(
    text: str,
) -> tuple[list[tuple[int, ClientRequest]], list[ImportRowError]]:
    """Return ``(row_number, request)`` pairs and per-row errors.

    Row numbers count the header as row 1. Blank status defaults to active.
    """
    reader = csv.reader(io.StringIO(text))
    try:
        header = next(reader)
    except StopIteration:
        return [], []

    fields = [_field_for(h) for h in header]
    if "name" not in fields:
        return [], [ImportRowError(row=1, reason="Missing 'Client Name' column")]

    parsed: list[tuple[int, ClientRequest]] = []
    errors: list[ImportRowError] = []
    for row_number, row in enumerate(reader, start=2):
        if not any(cell.strip() for cell in row):
            continue
        data = {
            field: cell.strip()
            for field, cell in zip(fields, row)
            if field is not None and cell.strip()
        }
        if "status" in data:
            data["status"] = data["status"].lower()
        try:
            parsed.append((row_number, ClientRequest(**data)))
        except ValidationError as exc:
            reason = "; ".join(err["msg"] for err in exc.errors())
            errors.append(ImportRowError(row=row_number, reason=reason))

    return parsed, errors

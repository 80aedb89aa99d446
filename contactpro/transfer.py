"""CSV and JSON import/export for the contact list.

CSV layout::

    "Name","Email","Phone","Address","Tags"
    "Ada Lovelace","ada@example.com","","London","math;history"

Every cell is quoted, tags are joined with ``;`` and rows are separated by a
bare ``\\n`` with no trailing newline. Imports use a quote-aware reader, so
commas inside quoted cells survive. A CSV row without exactly five cells is
skipped and reported in ``ImportResult.warnings``; the rest of the file is
still imported.
"""
from __future__ import annotations

import csv
import io
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import List, Sequence, Set, Union

from .contacts.models import Contact, new_contact_id
from .errors import ParseError

logger = logging.getLogger(__name__)

CSV_HEADER = ["Name", "Email", "Phone", "Address", "Tags"]
TAG_SEPARATOR = ";"


class ExportFormat(str, Enum):
    CSV = "csv"
    JSON = "json"


@dataclass
class ImportResult:
    """Contacts parsed from an import file plus per-row warnings."""
    contacts: List[Contact]
    warnings: List[str] = field(default_factory=list)


def resolve_format(value: Union[str, ExportFormat]) -> ExportFormat:
    try:
        return ExportFormat(str(getattr(value, "value", value)).strip().lower())
    except ValueError as exc:
        raise ParseError(f"Unsupported format {value!r}. Use csv or json.") from exc


def detect_format(filename: Union[str, Path]) -> ExportFormat:
    """Pick the format from a file extension (``.csv`` or ``.json``)."""
    suffix = Path(filename).suffix.lower().lstrip(".")
    if not suffix:
        raise ParseError(f"Cannot tell the format of {filename!s}: no extension.")
    return resolve_format(suffix)


def export_filename(fmt: Union[str, ExportFormat]) -> str:
    return f"contacts.{resolve_format(fmt).value}"


# --- Export ---

def export_contacts(contacts: Sequence[Contact], fmt: Union[str, ExportFormat]) -> str:
    fmt = resolve_format(fmt)
    if fmt is ExportFormat.JSON:
        return json.dumps([c.to_dict() for c in contacts], indent=2, ensure_ascii=False)
    return _export_csv(contacts)


def _export_csv(contacts: Sequence[Contact]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for c in contacts:
        writer.writerow([c.name, c.email, c.phone, c.address, TAG_SEPARATOR.join(c.tags)])
    return buffer.getvalue()[:-1]


# --- Import ---

def import_contacts(text: str, fmt: Union[str, ExportFormat]) -> ImportResult:
    """Parse ``text`` into a fresh contact list.

    Raises:
        ParseError: if the payload cannot be parsed as a whole.
    """
    fmt = resolve_format(fmt)
    if fmt is ExportFormat.JSON:
        return _import_json(text)
    return _import_csv(text)


def _import_json(text: str) -> ImportResult:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Invalid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise ParseError("JSON import must be an array of contacts.")
    contacts = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise ParseError(f"JSON item {index} is not an object.")
        contacts.append(Contact.from_dict(item))
    return ImportResult(contacts=contacts)


def _import_csv(text: str) -> ImportResult:
    now = datetime.now(timezone.utc).isoformat()
    contacts: List[Contact] = []
    warnings: List[str] = []
    seen_ids: Set[str] = set()

    reader = csv.reader(io.StringIO(text, newline=""), skipinitialspace=True)
    rows = []
    last_line = 0
    try:
        for row in reader:
            rows.append((last_line + 1, row))
            last_line = reader.line_num
    except csv.Error as exc:
        raise ParseError(f"Invalid CSV near line {reader.line_num}: {exc}") from exc

    # The first row is the header.
    for line_no, row in rows[1:]:
        if not any(cell.strip() for cell in row):
            continue
        if len(row) != len(CSV_HEADER):
            message = f"Line {line_no}: expected {len(CSV_HEADER)} cells, found {len(row)}; skipped."
            logger.warning("CSV import: %s", message)
            warnings.append(message)
            continue
        name, email, phone, address, tags = (cell.strip() for cell in row)
        contact_id = new_contact_id(seen_ids)
        seen_ids.add(contact_id)
        contacts.append(
            Contact(
                id=contact_id,
                name=name,
                email=email,
                phone=phone,
                address=address,
                tags=[t.strip() for t in tags.split(TAG_SEPARATOR) if t.strip()],
                created=now,
                updated=now,
            )
        )
    return ImportResult(contacts=contacts, warnings=warnings)

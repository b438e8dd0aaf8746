"""CSV export/import of application records.

Two dialects share the same 13 columns:

* ``standard`` quotes any field that needs it, so everything round-trips.
* ``legacy`` reproduces the format of older exports: only Notes is quoted,
  and import splits on commas and drops quote characters. Fields containing
  commas or quotes do not survive it.
"""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Iterable, Sequence
from datetime import date
from typing import Literal

from jobtracker.models.application import DEFAULT_PLATFORM, Application, generate_id

logger = logging.getLogger(__name__)

Dialect = Literal["standard", "legacy"]

_FIELD_SIZE_LIMIT = 2**31 - 1

HEADERS = [
    "Company",
    "Position",
    "Platform",
    "Location",
    "Date Applied",
    "Status",
    "Salary",
    "Job URL",
    "Contact Person",
    "CV Version",
    "Follow-up Date",
    "Notes",
    "Last Update",
]

# Column order on import. The trailing Last Update column is not read back.
IMPORT_FIELDS = [
    "company",
    "position",
    "platform",
    "location",
    "date_applied",
    "status",
    "salary",
    "job_url",
    "contact_person",
    "cv_version",
    "follow_up_date",
    "notes",
]


def _date_text(value: date | None) -> str:
    return value.isoformat() if value else ""


def application_to_row(app: Application) -> list[str]:
    return [
        app.company,
        app.position,
        app.resolved_platform,
        app.location,
        _date_text(app.date_applied),
        app.status,
        app.salary,
        app.job_url,
        app.contact_person,
        app.cv_version,
        _date_text(app.follow_up_date),
        app.notes,
        _date_text(app.last_update),
    ]


def row_to_application(values: Sequence[str], today: date | None = None) -> Application:
    """Map columns positionally; short rows leave the remaining fields empty."""
    data = {name: (values[i] if i < len(values) else "") for i, name in enumerate(IMPORT_FIELDS)}
    data["platform"] = data["platform"] or DEFAULT_PLATFORM
    data["id"] = generate_id()
    data["last_update"] = today or date.today()
    return Application.model_validate(data)


def _encode_legacy(applications: Iterable[Application]) -> str:
    notes_index = HEADERS.index("Notes")
    lines = [",".join(HEADERS)]
    for app in applications:
        row = application_to_row(app)
        row[notes_index] = '"%s"' % row[notes_index].replace('"', '""')
        lines.append(",".join(row))
    return "\n".join(lines)


def _encode_standard(applications: Iterable[Application]) -> str:
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(HEADERS)
    for app in applications:
        writer.writerow(application_to_row(app))
    csv_string = output.getvalue()
    output.close()
    return csv_string


def encode(applications: Iterable[Application], dialect: Dialect = "standard") -> str:
    if dialect == "legacy":
        return _encode_legacy(applications)
    return _encode_standard(applications)


def _decode_legacy(text: str, today: date | None) -> list[Application]:
    records = []
    for line in text.splitlines()[1:]:
        if not line.strip():
            continue
        values = [value.replace('"', "").strip() for value in line.split(",")]
        records.append(row_to_application(values, today))
    return records


def _decode_standard(text: str, today: date | None) -> list[Application]:
    # Long notes exceed the csv module's default 128 KiB field limit.
    if csv.field_size_limit() < _FIELD_SIZE_LIMIT:
        csv.field_size_limit(_FIELD_SIZE_LIMIT)

    reader = csv.reader(io.StringIO(text))
    records = []
    header_seen = False
    while True:
        line_before = reader.line_num
        try:
            row = next(reader)
        except StopIteration:
            break
        except csv.Error as e:
            logger.warning("Skipping unreadable CSV row at line %d: %s", reader.line_num, e)
            if reader.line_num == line_before:
                break
            continue
        if not header_seen:
            header_seen = True
            continue
        if not any(cell.strip() for cell in row):
            continue
        records.append(row_to_application(row, today))
    return records


def decode(text: str, dialect: Dialect = "standard", today: date | None = None) -> list[Application]:
    """Parse CSV text into fresh records. Best effort: odd rows are imported as far as they go."""
    if dialect == "legacy":
        return _decode_legacy(text, today)
    return _decode_standard(text, today)


def export_filename(today: date | None = None) -> str:
    return f"job_applications_{(today or date.today()).isoformat()}.csv"

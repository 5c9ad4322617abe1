import csv
import io
from typing import Iterable

from datasprint.clock import as_utc
from datasprint.models.user import UserEntry

EXPORT_FILENAME = "DATASPRINT_REGISTRATIONS.csv"
EXPORT_HEADERS = (
    "ID",
    "TEAM_NAME",
    "LEAD_NAME",
    "LEAD_EMAIL",
    "LEAD_PHONE",
    "COLLEGE",
    "DEPT",
    "YEAR",
    "MEMBER_1",
    "MEMBER_2",
    "MEMBER_3",
    "REGISTERED_AT",
)
MISSING_MEMBER = "---"


def _row(entry: UserEntry) -> list[str]:
    registered_at = as_utc(entry.created_at)
    return [
        entry.id,
        entry.team_name,
        entry.name,
        entry.email,
        entry.phone or "",
        entry.college or "",
        entry.dept or "",
        entry.year or "",
        entry.m1_name or MISSING_MEMBER,
        entry.m2_name or MISSING_MEMBER,
        entry.m3_name or MISSING_MEMBER,
        registered_at.isoformat() if registered_at else "",
    ]


def render_registrations_csv(entries: Iterable[UserEntry]) -> str:
    buffer = io.StringIO()
    buffer.write(",".join(EXPORT_HEADERS) + "\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    for entry in entries:
        writer.writerow(_row(entry))
    return buffer.getvalue()

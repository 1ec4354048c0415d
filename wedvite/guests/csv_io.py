"""Guest list CSV import and export.

Import is forgiving about headers: any column whose header contains
"name", "email" or "phone" is used for that field. Only a name column is
required. Rows are validated independently and reported by their 1-based
line number in the file (the header is row 1).
"""
import csv
import io
import re
from dataclasses import dataclass, field
from datetime import date, datetime

from wedvite.core.clock import as_utc
from wedvite.models import Invite
from wedvite.rsvp.validation import is_valid_email

EXPORT_COLUMNS = [
    "invite_id",
    "guest_name",
    "email",
    "guest_count",
    "rsvp_status",
    "sent_at",
    "viewed_at",
    "rsvp_at",
]


class CsvFormatError(ValueError):
    """The file as a whole cannot be imported."""


@dataclass
class GuestRow:
    row: int
    name: str
    email: str | None = None
    phone: str | None = None


@dataclass
class ParsedGuestList:
    guests: list[GuestRow] = field(default_factory=list)
    errors: list[dict] = field(default_factory=list)


def _find_column(headers: list[str], needle: str) -> int | None:
    for index, header in enumerate(headers):
        if needle in header:
            return index
    return None


def _cell(row: list[str], index: int | None) -> str:
    if index is None or index >= len(row):
        return ""
    return row[index].strip()


def parse_guest_csv(text: str) -> ParsedGuestList:
    """
    Parse an uploaded guest list.

    Raises:
        CsvFormatError: If the file is empty or has no name column.
    """
    text = text.lstrip("\ufeff")
    reader = csv.reader(io.StringIO(text))
    try:
        header = next(reader)
    except StopIteration:
        raise CsvFormatError("CSV file is empty")

    headers = [h.strip().lower() for h in header]
    if not any(headers):
        raise CsvFormatError("CSV file is empty")

    name_index = _find_column(headers, "name")
    email_index = _find_column(headers, "email")
    phone_index = _find_column(headers, "phone")
    if name_index is None:
        raise CsvFormatError("CSV must contain a name column")

    result = ParsedGuestList()
    for line_number, row in enumerate(reader, start=2):
        if not any(cell.strip() for cell in row):
            continue

        name = _cell(row, name_index)
        email = _cell(row, email_index)
        phone = _cell(row, phone_index)

        problems = []
        if not name:
            problems.append("Guest name is required")
        if email and not is_valid_email(email):
            problems.append("Invalid email address")
        if problems:
            result.errors.append({"row": line_number, "details": problems})
            continue

        result.guests.append(
            GuestRow(row=line_number, name=name, email=email or None, phone=phone or None)
        )

    return result


def _timestamp(value: datetime | None) -> str:
    return as_utc(value).isoformat() if value else ""


def export_invites_csv(invites: list[Invite]) -> str:
    """Render invites as CSV; fields containing commas, quotes or newlines are quoted."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_COLUMNS)
    for invite in invites:
        writer.writerow(
            [
                invite.id,
                invite.guest_name,
                invite.email or "",
                invite.guest_count,
                invite.status.value,
                _timestamp(invite.sent_at),
                _timestamp(invite.viewed_at),
                _timestamp(invite.rsvp_at),
            ]
        )
    return buffer.getvalue()


def export_filename(event_title: str, today: date) -> str:
    """e.g. ``wedvite-invites-anna-tom-s-wedding-2027-06-12.csv``"""
    slug = re.sub(r"[^a-z0-9]+", "-", event_title.lower()).strip("-") or "event"
    return f"wedvite-invites-{slug}-{today.isoformat()}.csv"

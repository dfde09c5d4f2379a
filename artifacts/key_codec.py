"""Artifact key derivation.

Maps interview metadata to the deterministic filename prefix used for
scheduled resume artifacts:

    schedule_{YYYY-MM-DD}_{title<=30}_{company<=20}

The prefix is never a complete filename; the store appends a uniqueness
suffix at write time. Distinct inputs that sanitize to the same string
collide on purpose (e.g. "Phone Screen" and "Phone/Screen").

Every caller (write path, read path, reconciliation, CLI diagnostics) goes
through build_prefix.
"""

import re
from datetime import date, datetime, timezone

PREFIX_HEAD = "schedule"
TITLE_MAX_LEN = 30
COMPANY_MAX_LEN = 20
DEFAULT_TITLE = "Interview"
DEFAULT_COMPANY = "Unknown"

_DISALLOWED = re.compile(r"[^A-Za-z0-9.\-]")


def sanitize(value: str, limit: int) -> str:
    """Replace every character outside [A-Za-z0-9.-] with '_' and truncate."""
    return _DISALLOWED.sub("_", value or "")[:limit]


def parse_meeting_date(value):
    """Parse an ISO-8601 string into a date or datetime; other values pass through."""
    if not isinstance(value, str):
        return value
    text = value.strip()
    if not text:
        raise ValueError("meeting date is empty")
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def format_meeting_date(meeting_date) -> str:
    """Render a meeting date as YYYY-MM-DD in UTC.

    Accepts a date, a datetime (naive values are taken as UTC) or an ISO-8601
    string. The server's local timezone never participates.
    """
    meeting_date = parse_meeting_date(meeting_date)
    if isinstance(meeting_date, datetime):
        if meeting_date.tzinfo is not None:
            meeting_date = meeting_date.astimezone(timezone.utc)
        return meeting_date.date().isoformat()
    if isinstance(meeting_date, date):
        return meeting_date.isoformat()
    raise ValueError(f"unsupported meeting date: {meeting_date!r}")


def build_prefix(meeting_date, meeting_title: str, company: str) -> str:
    """Return the artifact key prefix for an interview and its selected resume."""
    # Blank values take the defaults; otherwise the raw text is sanitized as-is.
    title = meeting_title if (meeting_title or "").strip() else DEFAULT_TITLE
    company = company if (company or "").strip() else DEFAULT_COMPANY
    return "_".join((
        PREFIX_HEAD,
        format_meeting_date(meeting_date),
        sanitize(title, TITLE_MAX_LEN),
        sanitize(company, COMPANY_MAX_LEN),
    ))


def prefix_for(interview: dict, resume: dict) -> str:
    """build_prefix over stored interview / saved resume records."""
    return build_prefix(
        interview.get("meeting_date"),
        interview.get("meeting_title"),
        (resume or {}).get("company"),
    )

"""Best-effort hints pulled from job-description text.

These guesses are lossy and only ever stored in the ``inferred_*`` fields of a
saved resume. The artifact key always uses the explicit ``company`` field.
"""

import re

ROLE_KEYWORDS = ("developer", "engineer", "manager", "specialist", "analyst", "coordinator")

_COMPANY_PATTERNS = (
    re.compile(r"^\s*company\s*[:\-]\s*(?P<name>.+?)\s*$", re.I | re.M),
    re.compile(r"\b(?:at|join)\s+(?P<name>[A-Z][\w&.\-]*(?:\s+[A-Z][\w&.\-]*){0,4})"),
)


def guess_job_title(job_description: str):
    """First line mentioning a role keyword, or None."""
    for line in (job_description or "").splitlines():
        lower = line.lower()
        if any(k in lower for k in ROLE_KEYWORDS):
            return line.strip()[:120] or None
    return None


def guess_company(job_description: str):
    """A 'Company: X' line, else the capitalized phrase after 'at'/'join', or None."""
    text = job_description or ""
    for pattern in _COMPANY_PATTERNS:
        m = pattern.search(text)
        if m:
            return m.group("name").strip().rstrip(".,;:")[:100] or None
    return None

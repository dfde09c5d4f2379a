"""Interview create/update with best-effort resume artifact linking.

Scheduling the resume artifact is a post-step: if it fails, the interview is
still saved, ``resume_link`` is left unset ("resume pending") and the failure
is logged and reported back in the result.
"""

import datetime
import logging

from artifacts.errors import ForbiddenError, NotFoundError
from artifacts.key_codec import parse_meeting_date

logger = logging.getLogger(__name__)

INTERVIEW_FIELDS = (
    "meeting_title", "meeting_date", "meeting_link", "interviewer", "progress",
    "notes", "feedback", "job_description", "selected_resume_id",
)


def is_admin(user: dict) -> bool:
    return (user or {}).get("role") == "admin"


def can_access(user: dict, record: dict) -> bool:
    """Owners and admins may see and change a record."""
    return is_admin(user) or record.get("user_id") == user.get("id")


def normalize_meeting_date(value) -> str:
    """Validate a meeting date and store it as a UTC ISO-8601 timestamp."""
    parsed = parse_meeting_date(value)
    if isinstance(parsed, datetime.datetime):
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=datetime.timezone.utc)
        return parsed.astimezone(datetime.timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    if isinstance(parsed, datetime.date):
        return f"{parsed.isoformat()}T00:00:00Z"
    raise ValueError(f"Invalid meeting date: {value!r}")


def _clean_fields(fields: dict) -> dict:
    changes = {k: fields[k] for k in INTERVIEW_FIELDS if k in fields}
    if "meeting_title" in changes:
        changes["meeting_title"] = (changes["meeting_title"] or "").strip()
        if not changes["meeting_title"]:
            raise ValueError("Meeting title is required")
    if "meeting_date" in changes:
        changes["meeting_date"] = normalize_meeting_date(changes["meeting_date"])
    if "selected_resume_id" in changes:
        changes["selected_resume_id"] = changes["selected_resume_id"] or None
    return changes


def _check_resume_selection(records, user: dict, resume_id):
    """A user may only attach their own saved resumes (admins any)."""
    if not resume_id:
        return
    resume = records.get_saved_resume(resume_id)
    if resume is not None and not can_access(user, resume):
        raise ForbiddenError(
            f"User {user.get('id')} selected saved resume {resume_id} owned by {resume.get('user_id')}",
            public_message="Invalid resume selection",
        )


def _link_resume(records, scheduler, interview_id: str) -> dict:
    try:
        link = scheduler.ensure_artifact(interview_id)
    except Exception as e:
        logger.exception("Failed to schedule resume for interview %s; saved without resume link", interview_id)
        records.set_resume_link(interview_id, None)
        return {"status": "failed", "error": str(e)}
    return {"status": "linked", "resumeLink": link}


def create_interview(records, scheduler, user: dict, fields: dict) -> dict:
    """Create an interview for user; returns {"interview", "resume_artifact"}."""
    changes = _clean_fields(fields)
    if "meeting_title" not in changes or "meeting_date" not in changes:
        raise ValueError("Meeting title and meeting date are required")
    _check_resume_selection(records, user, changes.get("selected_resume_id"))

    changes.setdefault("selected_resume_id", None)
    changes.update({"user_id": user["id"], "resume_link": None})
    interview = records.add_interview(changes)
    logger.info("Created interview %s for user %s", interview["id"], user["id"])

    artifact = None
    if interview.get("selected_resume_id"):
        artifact = _link_resume(records, scheduler, interview["id"])
    return {"interview": records.get_interview(interview["id"]), "resume_artifact": artifact}


def update_interview(records, scheduler, user: dict, interview_id: str, fields: dict) -> dict:
    """Apply changes to an interview the user owns (or any, for admins)."""
    interview = records.get_interview(interview_id)
    if interview is None:
        raise NotFoundError("interview", interview_id, public_message="Interview not found")
    if not can_access(user, interview):
        raise ForbiddenError(
            f"User {user.get('id')} may not update interview {interview_id}",
            public_message="Access denied",
        )
    changes = _clean_fields(fields)
    _check_resume_selection(records, user, changes.get("selected_resume_id"))
    if "selected_resume_id" in changes and not changes["selected_resume_id"]:
        changes["resume_link"] = None
    records.update_interview(interview_id, changes)

    artifact = None
    if records.get_interview(interview_id).get("selected_resume_id"):
        artifact = _link_resume(records, scheduler, interview_id)
    return {"interview": records.get_interview(interview_id), "resume_artifact": artifact}

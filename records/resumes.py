"""Saved resume creation."""

import logging

from records.heuristics import guess_company, guess_job_title

logger = logging.getLogger(__name__)

SAVED_RESUME_FIELDS = (
    "company", "job_description", "original_resume", "modified_resume",
    "resume_json", "job_link",
)


def create_saved_resume(records, user_id: str, fields: dict, resume_pdf_path: str = None) -> dict:
    """Store a saved resume owned by user_id.

    ``resume_pdf_path`` is set only by the server-side upload step (relative
    to the uploads root); it is never read from client fields.

    ``company`` is taken only from the explicit field. Guesses from the job
    description land in ``inferred_company`` / ``inferred_job_title``.
    """
    record = {k: fields.get(k) for k in SAVED_RESUME_FIELDS}
    record["user_id"] = user_id
    record["resume_pdf_path"] = resume_pdf_path or None
    if isinstance(record["company"], str):
        record["company"] = record["company"].strip() or None

    description = record.get("job_description") or ""
    record["inferred_job_title"] = guess_job_title(description)
    record["inferred_company"] = None if record["company"] else guess_company(description)
    if record["inferred_company"]:
        logger.info("No company given; inferred hint %r (not used for artifact keys)", record["inferred_company"])

    if not any(record.get(k) for k in ("modified_resume", "original_resume", "resume_json", "resume_pdf_path")):
        raise ValueError("A saved resume needs resume text, resume_json or an uploaded PDF")
    return records.add_saved_resume(record)

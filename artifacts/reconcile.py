"""Reconciliation: repair artifact linkage for every scheduled interview.

Walks interviews with a selected resume one at a time (bounded disk I/O) and
runs ensure_artifact on each. A failing interview is logged and recorded in
the summary; the batch always runs to the end.

Also migrates resume links written in the legacy ``/scheduled-resume`` form
to the current ``/scheduled-resume-pdf`` path.
"""

from __future__ import annotations

import logging
from typing import Callable

from artifacts.scheduling import resume_link_for

logger = logging.getLogger(__name__)

LEGACY_LINK_SUFFIX = "/scheduled-resume"


def reconcile_all(records, scheduler, regenerate: bool = False,
                  progress_cb: Callable[[str], None] | None = None) -> dict:
    """Run ensure_artifact for every interview with a selected resume.

    Returns a summary: {"total", "linked", "failed": [{"interview_id", "error"}]}.
    """
    def _notify(msg):
        logger.info("[Reconcile] %s", msg)
        if progress_cb:
            progress_cb(msg)

    interviews = records.interviews_with_selected_resume()
    summary = {"total": len(interviews), "linked": 0, "failed": []}
    _notify(f"Found {len(interviews)} interviews with selected resumes")

    for interview in interviews:
        interview_id = interview["id"]
        try:
            link = scheduler.ensure_artifact(interview_id, regenerate=regenerate)
        except Exception as e:
            logger.exception("Reconcile failed for interview %s", interview_id)
            summary["failed"].append({"interview_id": interview_id, "error": str(e)})
            _notify(f"FAILED {interview_id} ({interview.get('meeting_title')}): {e}")
            continue
        summary["linked"] += 1
        _notify(f"OK {interview_id} ({interview.get('meeting_title')}) -> {link}")

    _notify(
        f"Done: {summary['linked']}/{summary['total']} linked, {len(summary['failed'])} failed"
    )
    return summary


def fix_legacy_links(records) -> list[str]:
    """Rewrite legacy ``.../scheduled-resume`` links; returns the ids changed."""
    fixed = []
    for interview in records.list_interviews():
        link = interview.get("resume_link") or ""
        if not link.endswith(LEGACY_LINK_SUFFIX):
            continue
        new_link = resume_link_for(interview["id"])
        records.set_resume_link(interview["id"], new_link)
        logger.info("Updated resume link for interview %s: %s -> %s", interview["id"], link, new_link)
        fixed.append(interview["id"])
    return fixed

"""Scheduling service: keeps each interview's resume artifact current.

ensure_artifact is the single entry point used by interview create/update,
explicit regeneration and reconciliation. The link it stores on the
interview is a stable retrieval path, never a filesystem path; the file
behind it is re-derived on every read from the interview's business fields.
"""

import logging

from artifacts.errors import ArtifactInternalError, NotFoundError
from artifacts.generator import ArtifactGenerator
from artifacts.key_codec import prefix_for
from artifacts.store import ArtifactStore

logger = logging.getLogger(__name__)

RESUME_LINK_TEMPLATE = "/api/interviews/{interview_id}/scheduled-resume-pdf"


def resume_link_for(interview_id: str) -> str:
    return RESUME_LINK_TEMPLATE.format(interview_id=interview_id)


class SchedulingService:

    def __init__(self, records, store: ArtifactStore, generator: ArtifactGenerator):
        self.records = records
        self.store = store
        self.generator = generator

    def _load(self, interview_id: str):
        interview = self.records.get_interview(interview_id)
        if interview is None:
            raise NotFoundError("interview", interview_id)
        resume_id = interview.get("selected_resume_id")
        if not resume_id:
            return interview, None
        resume = self.records.get_saved_resume(resume_id)
        if resume is None:
            raise NotFoundError("saved resume", resume_id)
        return interview, resume

    def _prefix(self, interview: dict, resume: dict) -> str:
        try:
            return prefix_for(interview, resume)
        except ValueError as e:
            raise ArtifactInternalError(
                f"Interview {interview.get('id')} has an unusable meeting date: {e}"
            ) from e

    def _is_current(self, interview_id: str, prefix: str, fingerprint: str) -> bool:
        entry = self.store.index_entry(interview_id)
        if not entry or entry.get("fingerprint") != fingerprint:
            return False
        return self.store.current_name_for_interview(interview_id, prefix) == entry.get("file")

    def ensure_artifact(self, interview_id: str, regenerate: bool = False):
        """Make sure the interview's selected resume has a current artifact.

        Returns the stored resume link, or None when no resume is selected.
        Without ``regenerate`` an existing artifact built from identical
        source content is reused instead of written again.

        Raises:
            NotFoundError: interview or selected saved resume missing.
            ArtifactInternalError: generation or storage failed.
        """
        interview, resume = self._load(interview_id)
        if resume is None:
            logger.debug("Interview %s has no selected resume; nothing to do", interview_id)
            return None

        prefix = self._prefix(interview, resume)
        source = self.generator.source_for(resume)
        fingerprint = self.generator.fingerprint(source)

        if not regenerate and self._is_current(interview_id, prefix, fingerprint):
            logger.info("Artifact for interview %s is current (%s)", interview_id, prefix)
        else:
            data = self.generator.render(source)
            name = self.store.write(prefix, data, interview_id=interview_id, fingerprint=fingerprint)
            logger.info(
                "Scheduled resume %s for interview %s as %s (%s)",
                resume["id"], interview_id, name, type(source).__name__,
            )

        link = resume_link_for(interview_id)
        if interview.get("resume_link") != link:
            self.records.set_resume_link(interview_id, link)
        return link

    def load_artifact(self, interview: dict):
        """Current artifact bytes for an interview, or None if there is none."""
        resume = self.records.get_saved_resume(interview.get("selected_resume_id"))
        if resume is None:
            logger.info("Interview %s has no resolvable selected resume", interview.get("id"))
            return None
        prefix = self._prefix(interview, resume)
        return self.store.resolve_for_interview(interview["id"], prefix)

    def describe(self, interview_id: str) -> dict:
        """Scheduled resume metadata for an interview (no PDF bytes)."""
        interview, resume = self._load(interview_id)
        if resume is None:
            raise NotFoundError("selected resume", interview_id)
        prefix = self._prefix(interview, resume)
        current = self.store.current_name_for_interview(interview_id, prefix)
        return {
            "interviewId": interview_id,
            "selectedResumeId": resume["id"],
            "meetingTitle": interview.get("meeting_title"),
            "meetingDate": interview.get("meeting_date"),
            "resumeLink": interview.get("resume_link"),
            "artifactPrefix": prefix,
            "artifactFile": current,
            "artifactAvailable": current is not None,
            "indexEntry": self.store.index_entry(interview_id),
            "candidates": self.store.matches(prefix),
            "resume": {
                "id": resume["id"],
                "company": resume.get("company"),
                "jobDescription": resume.get("job_description"),
                "jobLink": resume.get("job_link"),
                "hasOriginalPdf": bool(resume.get("resume_pdf_path")),
                "createdAt": resume.get("created_at"),
            },
        }

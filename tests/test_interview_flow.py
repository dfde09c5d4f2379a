"""Tests for interview create/update with best-effort artifact linking."""

import pytest

from artifacts.config import ArtifactConfig
from artifacts.errors import ForbiddenError, NotFoundError
from artifacts.generator import ArtifactGenerator
from artifacts.scheduling import SchedulingService, resume_link_for
from artifacts.store import ArtifactStore
from records.interviews import create_interview, normalize_meeting_date, update_interview
from records.resumes import create_saved_resume

from conftest import SAMPLE_TEXT_RESUME, UPLOADED_PDF


@pytest.fixture
def broken_scheduler(tmp_path, records, artifact_config):
    """Scheduler whose schedule directory can never be created."""
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory")
    config = ArtifactConfig(schedule_dir=blocker / "resumes", uploads_root=artifact_config.uploads_root)
    return SchedulingService(records, ArtifactStore(config.schedule_dir), ArtifactGenerator(config))


class TestCreateInterview:

    def test_links_selected_resume(self, records, scheduler, owner, pdf_resume):
        result = create_interview(records, scheduler, owner, {
            "meeting_title": "Phone Screen",
            "meeting_date": "2025-08-21",
            "selected_resume_id": pdf_resume["id"],
        })
        interview = result["interview"]
        assert result["resume_artifact"]["status"] == "linked"
        assert interview["resume_link"] == resume_link_for(interview["id"])
        assert scheduler.load_artifact(interview) == UPLOADED_PDF

    def test_without_resume(self, records, scheduler, owner):
        result = create_interview(records, scheduler, owner, {
            "meeting_title": "Intro", "meeting_date": "2025-08-21",
        })
        assert result["resume_artifact"] is None
        assert result["interview"]["resume_link"] is None

    def test_unwritable_directory_still_saves(self, records, broken_scheduler, owner, pdf_resume):
        result = create_interview(records, broken_scheduler, owner, {
            "meeting_title": "Phone Screen",
            "meeting_date": "2025-08-21",
            "selected_resume_id": pdf_resume["id"],
        })
        assert result["resume_artifact"]["status"] == "failed"
        stored = records.get_interview(result["interview"]["id"])
        assert stored is not None
        assert stored["resume_link"] is None

    def test_missing_title(self, records, scheduler, owner):
        with pytest.raises(ValueError):
            create_interview(records, scheduler, owner, {"meeting_title": " ", "meeting_date": "2025-08-21"})

    def test_bad_date(self, records, scheduler, owner):
        with pytest.raises(ValueError):
            create_interview(records, scheduler, owner, {"meeting_title": "Intro", "meeting_date": "next week"})

    def test_other_users_resume_rejected(self, records, scheduler, other_user, pdf_resume):
        with pytest.raises(ForbiddenError):
            create_interview(records, scheduler, other_user, {
                "meeting_title": "Intro", "meeting_date": "2025-08-21",
                "selected_resume_id": pdf_resume["id"],
            })


class TestUpdateInterview:

    def test_clearing_resume_clears_link(self, records, scheduler, owner, interview):
        scheduler.ensure_artifact(interview["id"])
        result = update_interview(records, scheduler, owner, interview["id"], {"selected_resume_id": None})
        assert result["interview"]["resume_link"] is None
        assert result["resume_artifact"] is None

    def test_changing_title_relinks(self, records, scheduler, owner, interview):
        result = update_interview(records, scheduler, owner, interview["id"], {"meeting_title": "Final Round"})
        assert result["resume_artifact"]["status"] == "linked"
        assert scheduler.load_artifact(result["interview"]) == UPLOADED_PDF

    def test_non_owner_forbidden(self, records, scheduler, other_user, interview):
        with pytest.raises(ForbiddenError):
            update_interview(records, scheduler, other_user, interview["id"], {"notes": "mine now"})

    def test_admin_may_update(self, records, scheduler, admin, interview):
        result = update_interview(records, scheduler, admin, interview["id"], {"notes": "checked"})
        assert result["interview"]["notes"] == "checked"

    def test_missing_interview(self, records, scheduler, owner):
        with pytest.raises(NotFoundError):
            update_interview(records, scheduler, owner, "nope", {"notes": "x"})


class TestMeetingDateNormalization:

    def test_offset_converted_to_utc(self):
        assert normalize_meeting_date("2025-08-21T23:30:00-07:00") == "2025-08-22T06:30:00Z"

    def test_date_only(self):
        assert normalize_meeting_date("2025-08-21") == "2025-08-21T00:00:00Z"


class TestSavedResumes:

    def test_company_only_from_explicit_field(self, records, owner):
        resume = create_saved_resume(records, owner["id"], {
            "job_description": "Support Engineer\nCome join Phoenix Support Services today.",
            "modified_resume": SAMPLE_TEXT_RESUME,
        })
        assert resume["company"] is None
        assert resume["inferred_company"] == "Phoenix Support Services"
        assert resume["inferred_job_title"] == "Support Engineer"

    def test_explicit_company_kept(self, records, owner):
        resume = create_saved_resume(records, owner["id"], {
            "company": "  Acme Corp ", "modified_resume": SAMPLE_TEXT_RESUME,
        })
        assert resume["company"] == "Acme Corp"
        assert resume["inferred_company"] is None

    def test_requires_content(self, records, owner):
        with pytest.raises(ValueError):
            create_saved_resume(records, owner["id"], {"company": "Acme"})


class TestArtifactReuse:

    def test_notes_only_update_writes_nothing(self, records, scheduler, store, owner, interview):
        scheduler.ensure_artifact(interview["id"])
        prefix = "schedule_2025-08-21_Phone_Screen_Phoenix_Support_Serv"
        update_interview(records, scheduler, owner, interview["id"], {"notes": "bring portfolio"})
        update_interview(records, scheduler, owner, interview["id"], {"feedback": "positive"})
        assert len(store.matches(prefix)) == 1

    def test_resume_edit_still_rerenders(self, records, scheduler, store, owner, text_resume):
        created = create_interview(records, scheduler, owner, {
            "meeting_title": "Onsite", "meeting_date": "2025-09-01",
            "selected_resume_id": text_resume["id"],
        })
        records.update_saved_resume(text_resume["id"], {"modified_resume": "Jane Doe\nSKILLS\n- Python"})
        update_interview(records, scheduler, owner, created["interview"]["id"], {"notes": "edited resume"})
        assert len(store.matches("schedule_2025-09-01_Onsite_Acme_Corp")) == 2


class TestUploadedPdfPath:

    def test_client_field_ignored(self, records, owner):
        resume = create_saved_resume(records, owner["id"], {
            "resume_pdf_path": "/etc/hosts", "modified_resume": SAMPLE_TEXT_RESUME,
        })
        assert resume["resume_pdf_path"] is None

    def test_set_by_upload_step(self, records, owner, uploaded_pdf):
        resume = create_saved_resume(records, owner["id"], {}, resume_pdf_path=uploaded_pdf)
        assert resume["resume_pdf_path"] == uploaded_pdf

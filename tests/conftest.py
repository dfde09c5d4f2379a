"""Shared fixtures: an isolated tracker database, schedule directory and app."""

import pytest

from artifacts.config import ArtifactConfig
from artifacts.generator import ArtifactGenerator
from artifacts.scheduling import SchedulingService
from artifacts.store import ArtifactStore
from records.store import RecordStore

JWT_SECRET = "test-secret-for-interview-tracker-tokens"

# Minimal bytes that pass the upload check; uploaded PDFs are served unmodified.
UPLOADED_PDF = b"%PDF-1.4\n% uploaded original\n1 0 obj << /Type /Catalog >> endobj\ntrailer << /Root 1 0 R >>\n%%EOF\n"

SAMPLE_TEXT_RESUME = """Jane Doe
jane@example.com | Phoenix, AZ

PROFESSIONAL SUMMARY
Support engineer with six years of customer-facing experience.

EXPERIENCE
SENIOR SUPPORT ENGINEER
Acme Corp | 2021 - Present
- Led a team of five handling tier-2 escalations
- Cut median resolution time by 30%

EDUCATION
B.S. Computer Science, Arizona State University
"""


@pytest.fixture
def artifact_config(tmp_path):
    uploads = tmp_path / "uploads"
    uploads.mkdir()
    return ArtifactConfig(
        schedule_dir=uploads / "schedule" / "resumes",
        uploads_root=uploads,
    )


@pytest.fixture
def records(tmp_path):
    return RecordStore(tmp_path / "data" / "tracker.json")


@pytest.fixture
def store(artifact_config):
    return ArtifactStore(artifact_config.schedule_dir)


@pytest.fixture
def generator(artifact_config):
    return ArtifactGenerator(artifact_config)


@pytest.fixture
def scheduler(records, store, generator):
    return SchedulingService(records, store, generator)


@pytest.fixture
def owner(records):
    return records.add_user("owner@example.com", role="user")


@pytest.fixture
def other_user(records):
    return records.add_user("other@example.com", role="user")


@pytest.fixture
def admin(records):
    return records.add_user("admin@example.com", role="admin")


@pytest.fixture
def uploaded_pdf(artifact_config):
    """An uploaded original PDF under the uploads root; returns its relative path."""
    path = artifact_config.uploads_root / "resumes" / "original.pdf"
    path.parent.mkdir(parents=True)
    path.write_bytes(UPLOADED_PDF)
    return "resumes/original.pdf"


@pytest.fixture
def pdf_resume(records, owner, uploaded_pdf):
    return records.add_saved_resume({
        "user_id": owner["id"],
        "company": "Phoenix Support Services",
        "resume_pdf_path": uploaded_pdf,
        "modified_resume": SAMPLE_TEXT_RESUME,
    })


@pytest.fixture
def text_resume(records, owner):
    return records.add_saved_resume({
        "user_id": owner["id"],
        "company": "Acme Corp",
        "modified_resume": SAMPLE_TEXT_RESUME,
    })


@pytest.fixture
def interview(records, owner, pdf_resume):
    return records.add_interview({
        "user_id": owner["id"],
        "meeting_title": "Phone Screen",
        "meeting_date": "2025-08-21T16:00:00Z",
        "selected_resume_id": pdf_resume["id"],
        "resume_link": None,
    })

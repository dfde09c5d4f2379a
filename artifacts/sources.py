"""Resume source selection.

A saved resume renders from exactly one source, chosen in priority order:

    UploadedPDF     the PDF the user originally submitted (reused byte-for-byte)
    StructuredJSON  the structured resume document
    PlainText       modified_resume, else original_resume
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from artifacts.errors import ArtifactInternalError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadedPDF:
    path: Path


@dataclass(frozen=True)
class StructuredJSON:
    document: dict


@dataclass(frozen=True)
class PlainText:
    text: str


ResumeSource = Union[UploadedPDF, StructuredJSON, PlainText]


def _uploaded_pdf_path(resume: dict, uploads_root: Path):
    """Path of the uploaded original, confined to the uploads root.

    A path that resolves outside the root (absolute, or escaping with ..) is
    an error. A confined path whose file is gone falls back to content.
    """
    raw = (resume.get("resume_pdf_path") or "").strip()
    if not raw:
        return None
    root = Path(uploads_root).resolve()
    path = (root / raw).resolve()
    if not path.is_relative_to(root):
        raise ArtifactInternalError(
            f"Saved resume {resume.get('id')} original PDF path {raw!r} is outside {root}"
        )
    if path.is_file():
        return path
    logger.warning(
        "Original PDF for saved resume %s not found at %s; rendering from content",
        resume.get("id"), path,
    )
    return None


def _structured_document(resume: dict):
    doc = resume.get("resume_json")
    if doc is None or doc == "":
        return None
    if isinstance(doc, str):
        try:
            doc = json.loads(doc)
        except json.JSONDecodeError as e:
            raise ArtifactInternalError(
                f"Saved resume {resume.get('id')} has malformed resume_json: {e}"
            ) from e
    if not isinstance(doc, dict):
        raise ArtifactInternalError(
            f"Saved resume {resume.get('id')} resume_json must be an object, "
            f"got {type(doc).__name__}"
        )
    return doc


def resolve_source(resume: dict, uploads_root: Path) -> ResumeSource:
    """Pick the source a saved resume renders from."""
    path = _uploaded_pdf_path(resume, uploads_root)
    if path is not None:
        return UploadedPDF(path)

    doc = _structured_document(resume)
    if doc is not None:
        return StructuredJSON(doc)

    text = (resume.get("modified_resume") or "").strip() or (resume.get("original_resume") or "").strip()
    if text:
        return PlainText(text)

    raise ArtifactInternalError(f"Saved resume {resume.get('id')} has no renderable content")

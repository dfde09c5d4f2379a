"""Scheduled resume PDF generation (generator.py)

Turns a saved resume into the bytes stored as an interview artifact:
1. Uploaded original PDF -> reused byte-for-byte, never re-rendered
2. Structured resume JSON -> reportlab rendering, fixed layout
3. Plain resume text -> reportlab rendering, fixed layout

Rendering is deterministic: same input and LAYOUT_VERSION give the same
bytes (reportlab invariant mode). Rendered output must carry extractable text;
a blank document is an error, not an artifact.
"""

import hashlib
import io
import json
import logging
import re

from reportlab.lib.colors import HexColor
from reportlab.lib.enums import TA_LEFT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import inch
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.platypus import (
    BaseDocTemplate,
    Flowable,
    Frame,
    KeepTogether,
    PageTemplate,
    Paragraph,
    Spacer,
)

from artifacts.config import ArtifactConfig
from artifacts.errors import ArtifactInternalError
from artifacts.sources import ResumeSource, StructuredJSON, UploadedPDF, resolve_source

logger = logging.getLogger(__name__)

# Bump whenever geometry, fonts, styles or section order change.
LAYOUT_VERSION = "1"

PDF_MAGIC = b"%PDF-"

# --- Page geometry ---
PAGE_W, PAGE_H = A4
MARGIN = 0.7 * inch
CONTENT_W = PAGE_W - 2 * MARGIN

# --- Colors ---
BLACK = HexColor("#000000")
GRAY = HexColor("#3E3E3E")

# --- Font sizes (points) ---
NAME_SIZE = 18
CONTACT_SIZE = 9
SECTION_HEADER_SIZE = 13
ROLE_SIZE = 11
BODY_SIZE = 10
BULLET_INDENT = 14
BULLET_CHAR = "•"

SECTION_ORDER = ("summary", "skills", "experience", "education")

_SECTION_HEADER_RE = re.compile(
    r"^(SUMMARY|PROFESSIONAL SUMMARY|SKILLS|TECHNICAL SKILLS|EXPERIENCE|"
    r"WORK EXPERIENCE|EDUCATION|PROJECTS|CERTIFICATIONS)$",
    re.I,
)
_ROLE_LINE_RE = re.compile(r"^[A-Z][A-Z\s]+$")
_DATE_LINE_RE = re.compile(r"\d{4}|\b(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)\b", re.I)
_BULLET_LINE_RE = re.compile(r"^[•▪▫‣⁃◦\-*]\s+")

_REGISTERED_FONTS = {}


def _register_fonts(config: ArtifactConfig):
    """Return (regular, bold, italic) font names for the configured fonts.

    Without configured TTFs the reportlab built-in Helvetica family is used.
    A configured font file that is missing or unreadable is an error.
    """
    if not config.font_path:
        return "Helvetica", "Helvetica-Bold", "Helvetica-Oblique"

    names = []
    for role, path in (("Regular", config.font_path), ("Bold", config.bold_font_path or config.font_path)):
        key = str(path)
        if key not in _REGISTERED_FONTS:
            if not path.is_file():
                raise ArtifactInternalError(f"Resume font resource missing: {path}")
            name = f"ResumeSans-{role}-{hashlib.sha256(key.encode()).hexdigest()[:8]}"
            try:
                pdfmetrics.registerFont(TTFont(name, key))
            except Exception as e:
                raise ArtifactInternalError(f"Cannot load resume font {path}: {e}") from e
            _REGISTERED_FONTS[key] = name
        names.append(_REGISTERED_FONTS[key])
    regular, bold = names
    return regular, bold, regular


def _esc(text) -> str:
    """Escape text for reportlab Paragraph XML."""
    if text is None:
        return ""
    return (
        str(text).replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def _build_styles(regular: str, bold: str, italic: str) -> dict:
    styles = {}
    styles["name"] = ParagraphStyle(
        "name", fontName=bold, fontSize=NAME_SIZE, textColor=BLACK,
        alignment=TA_LEFT, leading=NAME_SIZE + 4, spaceAfter=2,
    )
    styles["contact"] = ParagraphStyle(
        "contact", fontName=regular, fontSize=CONTACT_SIZE, textColor=GRAY,
        leading=CONTACT_SIZE + 3, spaceAfter=6,
    )
    styles["section_header"] = ParagraphStyle(
        "section_header", fontName=bold, fontSize=SECTION_HEADER_SIZE, textColor=BLACK,
        leading=SECTION_HEADER_SIZE + 4, spaceBefore=10, spaceAfter=2,
    )
    styles["role"] = ParagraphStyle(
        "role", fontName=bold, fontSize=ROLE_SIZE, textColor=BLACK,
        leading=ROLE_SIZE + 3, spaceBefore=4,
    )
    styles["meta"] = ParagraphStyle(
        "meta", fontName=italic, fontSize=BODY_SIZE, textColor=GRAY,
        leading=BODY_SIZE + 3,
    )
    styles["body"] = ParagraphStyle(
        "body", fontName=regular, fontSize=BODY_SIZE, textColor=GRAY,
        leading=BODY_SIZE + 4,
    )
    styles["bullet"] = ParagraphStyle(
        "bullet", fontName=regular, fontSize=BODY_SIZE, textColor=GRAY,
        leading=BODY_SIZE + 3, leftIndent=BULLET_INDENT,
        firstLineIndent=-BULLET_INDENT + 4, spaceAfter=1,
    )
    return styles


class HRLineFlowable(Flowable):
    """Thin rule under a section header, spanning the content width."""

    def __init__(self, width, color=BLACK, thickness=0.6):
        super().__init__()
        self.width = width
        self.color = color
        self.thickness = thickness
        self.spaceAfter = 4

    def wrap(self, available_width, available_height):
        return (self.width, self.thickness + 2)

    def draw(self):
        self.canv.saveState()
        self.canv.setStrokeColor(self.color)
        self.canv.setLineWidth(self.thickness)
        self.canv.line(0, 1, self.width, 1)
        self.canv.restoreState()


def _section(title: str, styles: dict) -> list:
    return [Paragraph(_esc(title), styles["section_header"]), HRLineFlowable(CONTENT_W)]


def _bullet(text: str, styles: dict) -> Paragraph:
    return Paragraph(f"{BULLET_CHAR}&#160;&#160;{_esc(text)}", styles["bullet"])


# ---------------------------------------------------------------------------
# Plain text layout
# ---------------------------------------------------------------------------

def _text_story(text: str, styles: dict) -> list:
    """Classify each line (header, role, dates, bullet, body) and lay it out."""
    story = []
    for line in text.splitlines():
        line = line.strip()
        if not line:
            story.append(Spacer(1, 6))
        elif _SECTION_HEADER_RE.match(line):
            story.extend(_section(line.upper(), styles))
        elif _ROLE_LINE_RE.match(line) and 3 < len(line) < 50:
            story.append(Paragraph(_esc(line), styles["role"]))
        elif _BULLET_LINE_RE.match(line):
            story.append(_bullet(_BULLET_LINE_RE.sub("", line, count=1), styles))
        elif _DATE_LINE_RE.search(line):
            story.append(Paragraph(_esc(line), styles["meta"]))
        else:
            story.append(Paragraph(_esc(line), styles["body"]))
    return story


# ---------------------------------------------------------------------------
# Structured JSON layout
# ---------------------------------------------------------------------------

def _as_list(value, field: str) -> list:
    if value is None or value == "":
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise ArtifactInternalError(f"resume_json.{field} must be a list, got {type(value).__name__}")
    return value


def _entries(value, field: str) -> list:
    """Normalize a dict-or-list-of-dicts field (education is stored both ways)."""
    if value is None or value == "":
        return []
    if isinstance(value, dict):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(v, dict) for v in value):
        raise ArtifactInternalError(f"resume_json.{field} must be an object or a list of objects")
    return value


def _skills_lines(skills, bold_font: str) -> list:
    if isinstance(skills, dict):
        lines = []
        for category in sorted(skills):
            items = [str(s) for s in _as_list(skills[category], f"skills.{category}") if str(s).strip()]
            if items:
                label = category.replace("_", " ").title()
                lines.append(f'<font name="{bold_font}">{_esc(label)}:</font> {_esc(", ".join(items))}')
        return lines
    items = [str(s) for s in _as_list(skills, "skills") if str(s).strip()]
    return [_esc(", ".join(items))] if items else []


def _json_story(doc: dict, styles: dict) -> list:
    story = []
    name = (doc.get("name") or "").strip()
    if name:
        story.append(Paragraph(_esc(name), styles["name"]))
    contact = [
        str(doc.get(k)).strip() for k in ("location", "email", "phone", "linkedin")
        if doc.get(k) and str(doc.get(k)).strip()
    ]
    if contact:
        story.append(Paragraph(_esc(f"  {BULLET_CHAR}  ".join(contact)), styles["contact"]))

    for section in SECTION_ORDER:
        if section == "summary":
            summary = (doc.get("summary") or "").strip()
            if summary:
                story.extend(_section("Summary", styles))
                story.append(Paragraph(_esc(summary), styles["body"]))

        elif section == "skills":
            lines = _skills_lines(doc.get("skills"), styles["role"].fontName)
            if lines:
                story.extend(_section("Skills", styles))
                story.extend(Paragraph(line, styles["body"]) for line in lines)

        elif section == "experience":
            roles = _entries(doc.get("experience"), "experience")
            if roles:
                story.extend(_section("Experience", styles))
            for role in roles:
                heading = " – ".join(
                    p for p in ((role.get("title") or "").strip(), (role.get("company") or "").strip()) if p
                )
                meta = " | ".join(
                    p for p in ((role.get("duration") or "").strip(), (role.get("location") or "").strip()) if p
                )
                block = []
                if heading:
                    block.append(Paragraph(_esc(heading), styles["role"]))
                if meta:
                    block.append(Paragraph(_esc(meta), styles["meta"]))
                for item in _as_list(role.get("responsibilities"), "experience.responsibilities"):
                    if str(item).strip():
                        block.append(_bullet(str(item).strip(), styles))
                if block:
                    story.append(KeepTogether(block))

        elif section == "education":
            schools = _entries(doc.get("education"), "education")
            if schools:
                story.extend(_section("Education", styles))
            for edu in schools:
                degree = (edu.get("degree") or "").strip()
                detail = ", ".join(
                    str(edu.get(k)).strip() for k in ("institution", "location", "year")
                    if edu.get(k) and str(edu.get(k)).strip()
                )
                if degree:
                    story.append(Paragraph(_esc(degree), styles["role"]))
                if detail:
                    story.append(Paragraph(_esc(detail), styles["meta"]))
    return story


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------

def _has_text(pdf_bytes: bytes) -> bool:
    import pdfplumber
    with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
        for page in pdf.pages:
            if (page.extract_text() or "").strip():
                return True
    return False


class ArtifactGenerator:
    """Converts saved resumes into canonical PDF bytes."""

    def __init__(self, config: ArtifactConfig):
        self.config = config

    def source_for(self, resume: dict) -> ResumeSource:
        return resolve_source(resume, self.config.uploads_root)

    def generate(self, resume: dict) -> bytes:
        return self.render(self.source_for(resume))

    def render(self, source: ResumeSource) -> bytes:
        if isinstance(source, UploadedPDF):
            return self._read_uploaded(source)
        regular, bold, italic = _register_fonts(self.config)
        styles = _build_styles(regular, bold, italic)
        if isinstance(source, StructuredJSON):
            story = _json_story(source.document, styles)
            title = source.document.get("name") or "Resume"
        else:
            story = _text_story(source.text, styles)
            title = "Resume"
        if not any(isinstance(f, (Paragraph, KeepTogether)) for f in story):
            raise ArtifactInternalError("Resume content produced an empty document")
        return self._build_pdf(story, str(title))

    def fingerprint(self, source: ResumeSource) -> str:
        """Stable digest of what an artifact would be built from."""
        h = hashlib.sha256()
        h.update(f"layout={LAYOUT_VERSION};".encode())
        if isinstance(source, UploadedPDF):
            h.update(b"kind=pdf;")
            h.update(self._read_uploaded(source))
        elif isinstance(source, StructuredJSON):
            h.update(b"kind=json;")
            h.update(json.dumps(source.document, sort_keys=True, ensure_ascii=False).encode("utf-8"))
        else:
            h.update(b"kind=text;")
            h.update(source.text.encode("utf-8"))
        return h.hexdigest()

    def _read_uploaded(self, source: UploadedPDF) -> bytes:
        try:
            size = source.path.stat().st_size
            if size > self.config.max_upload_bytes:
                raise ArtifactInternalError(
                    f"Uploaded PDF {source.path} is {size} bytes (limit {self.config.max_upload_bytes})"
                )
            data = source.path.read_bytes()
        except OSError as e:
            raise ArtifactInternalError(f"Cannot read uploaded PDF {source.path}: {e}") from e
        if not data.startswith(PDF_MAGIC):
            raise ArtifactInternalError(f"Uploaded file {source.path} is not a PDF")
        return data

    def _build_pdf(self, story: list, title: str) -> bytes:
        buf = io.BytesIO()
        frame = Frame(
            MARGIN, MARGIN, CONTENT_W, PAGE_H - 2 * MARGIN,
            leftPadding=0, rightPadding=0, topPadding=0, bottomPadding=0,
        )
        doc = BaseDocTemplate(
            buf, pagesize=A4,
            leftMargin=MARGIN, rightMargin=MARGIN,
            topMargin=MARGIN, bottomMargin=MARGIN,
            title=title, subject=f"Scheduled resume (layout v{LAYOUT_VERSION})",
            creator="interview-resume-artifacts", invariant=1,
        )
        doc.addPageTemplates([PageTemplate(id="resume", frames=[frame])])
        try:
            doc.build(story)
        except Exception as e:
            raise ArtifactInternalError(f"PDF rendering failed: {e}") from e

        data = buf.getvalue()
        if not _has_text(data):
            raise ArtifactInternalError("Rendered PDF has no extractable text")
        logger.info("Rendered resume PDF (%d bytes, layout v%s)", len(data), LAYOUT_VERSION)
        return data

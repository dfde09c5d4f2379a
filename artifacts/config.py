"""Explicit configuration for the artifact components.

Built once at an entry point and handed to the store, generator and
scheduling service; nothing below reads the environment on its own.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024


@dataclass(frozen=True)
class ArtifactConfig:
    schedule_dir: Path
    uploads_root: Path
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    font_path: Optional[Path] = None
    bold_font_path: Optional[Path] = None

    @classmethod
    def from_env(cls, project_root: Path) -> "ArtifactConfig":
        """Read SCHEDULE_DIR, UPLOADS_DIR, MAX_UPLOAD_BYTES and RESUME_FONT(_BOLD)_PATH.

        Relative paths are resolved against project_root.
        """
        def _path(name: str, default: Optional[str]) -> Optional[Path]:
            raw = os.environ.get(name) or default
            if not raw:
                return None
            path = Path(raw)
            return path if path.is_absolute() else project_root / path

        uploads_root = _path("UPLOADS_DIR", "uploads")
        return cls(
            schedule_dir=_path("SCHEDULE_DIR", str(uploads_root / "schedule" / "resumes")),
            uploads_root=uploads_root,
            max_upload_bytes=int(os.environ.get("MAX_UPLOAD_BYTES") or DEFAULT_MAX_UPLOAD_BYTES),
            font_path=_path("RESUME_FONT_PATH", None),
            bold_font_path=_path("RESUME_FONT_BOLD_PATH", None),
        )

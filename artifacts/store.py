"""Schedule directory holding interview resume artifacts.

Files are named ``{prefix}_{suffix}.pdf`` where the prefix comes from
key_codec and the suffix is a strictly increasing millisecond timestamp.
Writes never overwrite; regeneration leaves the predecessor behind and the
newest file wins on lookup.

An explicit index (``index.json``) maps interview ids to the artifact written
for them. Per-interview lookup trusts the index; the prefix scan is the
plain ``resolve`` contract and the fallback when no usable index exists.
"""

from __future__ import annotations

import datetime
import json
import logging
import os
import re
import threading
import time
from pathlib import Path

from artifacts.errors import ArtifactInternalError

logger = logging.getLogger(__name__)

ARTIFACT_EXT = ".pdf"
INDEX_FILE = "index.json"


class ArtifactStore:
    """Append-mostly store over a single directory of PDF artifacts."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self._lock = threading.Lock()
        self._last_suffix = 0

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def _next_suffix(self) -> int:
        now = int(time.time() * 1000)
        if now <= self._last_suffix:
            now = self._last_suffix + 1
        self._last_suffix = now
        return now

    def write(self, prefix: str, data: bytes, interview_id: str = None, fingerprint: str = None) -> str:
        """Write a new artifact under prefix and return its filename."""
        with self._lock:
            try:
                self.directory.mkdir(parents=True, exist_ok=True)
                suffix = self._next_suffix()
                target = self.directory / f"{prefix}_{suffix}{ARTIFACT_EXT}"
                while target.exists():
                    suffix = self._next_suffix()
                    target = self.directory / f"{prefix}_{suffix}{ARTIFACT_EXT}"
                tmp = self.directory / f".{target.name}.tmp"
                with open(tmp, "wb") as f:
                    f.write(data)
                tmp.replace(target)
            except OSError as e:
                raise ArtifactInternalError(
                    f"Cannot write artifact {prefix!r} in {self.directory}: {e}"
                ) from e

            if interview_id:
                index = self._load_index()
                index[interview_id] = {
                    "file": target.name,
                    "prefix": prefix,
                    "fingerprint": fingerprint,
                    "written_at": datetime.datetime.now(datetime.timezone.utc).isoformat(),
                }
                self._save_index(index)

        logger.info("Wrote artifact %s (%d bytes)", target.name, len(data))
        return target.name

    # ------------------------------------------------------------------
    # Index
    # ------------------------------------------------------------------

    def _index_path(self) -> Path:
        return self.directory / INDEX_FILE

    def _read_index(self) -> dict | None:
        """The index, or None when it is absent or unreadable."""
        path = self._index_path()
        if not path.exists():
            return None
        try:
            with open(path) as f:
                index = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Unreadable artifact index %s, ignoring: %s", path, e)
            return None
        if not isinstance(index, dict):
            logger.warning("Artifact index %s is not an object, ignoring", path)
            return None
        return index

    def _load_index(self) -> dict:
        return self._read_index() or {}

    def _save_index(self, index: dict):
        tmp = self._index_path().with_suffix(".tmp")
        try:
            with open(tmp, "w") as f:
                json.dump(index, f, indent=2, sort_keys=True)
            tmp.replace(self._index_path())
        except OSError as e:
            raise ArtifactInternalError(f"Cannot write artifact index: {e}") from e

    def index_entry(self, interview_id: str) -> dict | None:
        """Index record for interview_id, or None."""
        with self._lock:
            return self._load_index().get(interview_id)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def _is_artifact_for(self, name: str, prefix: str) -> bool:
        """name is exactly ``{prefix}_{digits}.pdf``."""
        return re.fullmatch(re.escape(prefix) + r"_\d+" + re.escape(ARTIFACT_EXT), name) is not None

    def matches(self, prefix: str, exclude=()) -> list[str]:
        """Artifact filenames for prefix, newest first."""
        if not self.directory.exists():
            return []
        try:
            names = os.listdir(self.directory)
        except OSError as e:
            raise ArtifactInternalError(f"Cannot list {self.directory}: {e}") from e

        found = []
        for name in names:
            if name in exclude or not self._is_artifact_for(name, prefix):
                continue
            try:
                mtime = (self.directory / name).stat().st_mtime_ns
            except FileNotFoundError:
                continue
            except OSError as e:
                raise ArtifactInternalError(f"Cannot stat {name}: {e}") from e
            found.append((mtime, name))
        found.sort(reverse=True)
        return [name for _, name in found]

    def resolve_name(self, prefix: str) -> str | None:
        """Filename of the current artifact for prefix (latest mtime), or None."""
        names = self.matches(prefix)
        if len(names) > 1:
            logger.debug("%d artifacts match %s; using %s", len(names), prefix, names[0])
        return names[0] if names else None

    def read(self, name: str) -> bytes:
        try:
            return (self.directory / name).read_bytes()
        except OSError as e:
            raise ArtifactInternalError(f"Cannot read artifact {name}: {e}") from e

    def resolve(self, prefix: str) -> bytes | None:
        """Bytes of the current artifact for prefix, or None when nothing matches."""
        name = self.resolve_name(prefix)
        if name is None:
            return None
        return self.read(name)

    def current_name_for_interview(self, interview_id: str, prefix: str) -> str | None:
        """Current artifact for one interview; the index is authoritative.

        A readable index without an entry for interview_id yields None. A stale
        entry (file gone or prefix changed) falls back to a scan that skips
        files the index assigns to other interviews. Only a missing or corrupt
        index allows a plain prefix scan.
        """
        with self._lock:
            index = self._read_index()
        if index is None:
            return self.resolve_name(prefix)

        entry = index.get(interview_id)
        if not entry:
            logger.info("No indexed artifact for interview %s", interview_id)
            return None
        name = entry.get("file") or ""
        if self._is_artifact_for(name, prefix) and (self.directory / name).is_file():
            return name

        logger.info(
            "Index entry for interview %s is stale (%s); scanning for %s",
            interview_id, name or "no file", prefix,
        )
        claimed = {
            e.get("file") for other, e in index.items()
            if other != interview_id and isinstance(e, dict)
        }
        names = self.matches(prefix, exclude=claimed)
        return names[0] if names else None

    def resolve_for_interview(self, interview_id: str, prefix: str) -> bytes | None:
        name = self.current_name_for_interview(interview_id, prefix)
        if name is None:
            return None
        return self.read(name)

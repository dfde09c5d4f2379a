"""Tracker records: users, saved resumes and interviews.

Records are plain dicts persisted to a single JSON document:

    {"users": {id: {...}}, "saved_resumes": {id: {...}}, "interviews": {id: {...}}}

Every mutation is a load → modify → atomic save cycle under one lock, so
concurrent request handlers never interleave partial writes.
"""

from __future__ import annotations

import copy
import datetime
import json
import logging
import threading
import uuid
from pathlib import Path

logger = logging.getLogger(__name__)

TABLES = ("users", "saved_resumes", "interviews")


def _now() -> str:
    return datetime.datetime.now(datetime.timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class RecordStore:
    """JSON-file backed store for tracker records."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load(self) -> dict:
        data = {}
        if self.path.exists():
            try:
                with open(self.path) as f:
                    data = json.load(f)
            except json.JSONDecodeError:
                logger.error("Corrupt tracker data file %s", self.path)
                raise
        for table in TABLES:
            data.setdefault(table, {})
        return data

    def _save(self, data: dict):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".tmp")
        with open(tmp, "w") as f:
            json.dump(data, f, indent=2)
        tmp.replace(self.path)

    def _get(self, table: str, record_id: str) -> dict | None:
        if not record_id:
            return None
        with self._lock:
            record = self._load()[table].get(record_id)
        return copy.deepcopy(record) if record else None

    def _insert(self, table: str, fields: dict) -> dict:
        record = dict(fields)
        record.setdefault("id", str(uuid.uuid4()))
        record.setdefault("created_at", _now())
        record["updated_at"] = record["created_at"]
        with self._lock:
            data = self._load()
            data[table][record["id"]] = record
            self._save(data)
        return copy.deepcopy(record)

    def _update(self, table: str, record_id: str, changes: dict) -> dict | None:
        with self._lock:
            data = self._load()
            record = data[table].get(record_id)
            if record is None:
                return None
            record.update(changes)
            record["updated_at"] = _now()
            self._save(data)
        return copy.deepcopy(record)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def add_user(self, email: str, username: str = "", role: str = "user", active: bool = True,
                 user_id: str = None) -> dict:
        fields = {"email": email, "username": username or email.split("@")[0], "role": role, "active": active}
        if user_id:
            fields["id"] = user_id
        return self._insert("users", fields)

    def get_user(self, user_id: str) -> dict | None:
        return self._get("users", user_id)

    # ------------------------------------------------------------------
    # Saved resumes
    # ------------------------------------------------------------------

    def add_saved_resume(self, fields: dict) -> dict:
        return self._insert("saved_resumes", fields)

    def get_saved_resume(self, resume_id: str) -> dict | None:
        return self._get("saved_resumes", resume_id)

    def update_saved_resume(self, resume_id: str, changes: dict) -> dict | None:
        return self._update("saved_resumes", resume_id, changes)

    # ------------------------------------------------------------------
    # Interviews
    # ------------------------------------------------------------------

    def add_interview(self, fields: dict) -> dict:
        return self._insert("interviews", fields)

    def get_interview(self, interview_id: str) -> dict | None:
        return self._get("interviews", interview_id)

    def update_interview(self, interview_id: str, changes: dict) -> dict | None:
        return self._update("interviews", interview_id, changes)

    def set_resume_link(self, interview_id: str, link: str | None) -> dict | None:
        return self._update("interviews", interview_id, {"resume_link": link})

    def list_interviews(self) -> list[dict]:
        with self._lock:
            interviews = list(self._load()["interviews"].values())
        interviews.sort(key=lambda i: (i.get("created_at") or "", i.get("id") or ""))
        return copy.deepcopy(interviews)

    def interviews_with_selected_resume(self) -> list[dict]:
        return [i for i in self.list_interviews() if i.get("selected_resume_id")]

"""Progress persistence port.

A finished session produces a SessionDelta; a ProgressStore merges it into the
student's cumulative ProgressRecord. Backings are interchangeable: process
memory, a local JSON file, or the Student table. SyncingProgressStore writes
to a local store first and mirrors to a remote one, reconciling the two by
last-write-wins on `updated_at`.
"""

import json
import logging
import os
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Optional, Set

from pydantic import BaseModel, Field

from .engine import SessionDelta

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.utcnow()


class ProgressRecord(BaseModel):
    user_id: str
    total_score: int = 0
    games_played: int = 0
    achievements: Set[str] = Field(default_factory=set)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def average_score(self) -> int:
        if not self.games_played:
            return 0
        return round(self.total_score / self.games_played)

    def to_dict(self) -> dict:
        return {
            'user_id': self.user_id,
            'total_score': self.total_score,
            'games_played': self.games_played,
            'average_score': self.average_score,
            'achievements': sorted(self.achievements),
            'updated_at': self.updated_at.isoformat(),
        }


def merge_delta(record: ProgressRecord, delta: SessionDelta, now: Optional[datetime] = None) -> ProgressRecord:
    return ProgressRecord(
        user_id=record.user_id,
        total_score=record.total_score + delta.score_to_add,
        games_played=record.games_played + 1,
        achievements=set(record.achievements) | set(delta.new_achievements),
        updated_at=now or _utcnow(),
    )


class ProgressStore(ABC):
    """Key-value store of ProgressRecords keyed by user id."""

    @abstractmethod
    def get(self, user_id: str) -> Optional[ProgressRecord]:
        pass

    @abstractmethod
    def put(self, record: ProgressRecord) -> None:
        pass

    def apply_delta(self, user_id: str, delta: SessionDelta) -> ProgressRecord:
        user_id = str(user_id)
        current = self.get(user_id) or ProgressRecord(user_id=user_id)
        updated = merge_delta(current, delta)
        self.put(updated)
        return updated


class InMemoryProgressStore(ProgressStore):

    def __init__(self):
        self._records: Dict[str, ProgressRecord] = {}
        self._lock = threading.Lock()

    def get(self, user_id):
        with self._lock:
            record = self._records.get(str(user_id))
            return record.model_copy(deep=True) if record else None

    def put(self, record):
        with self._lock:
            self._records[record.user_id] = record.model_copy(deep=True)


class JsonFileProgressStore(ProgressStore):
    """All records in one JSON document: {user_id: record}."""

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, dict]:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, encoding='utf-8') as fh:
            return json.load(fh)

    def get(self, user_id):
        with self._lock:
            raw = self._load().get(str(user_id))
        return ProgressRecord.model_validate(raw) if raw else None

    def put(self, record):
        with self._lock:
            data = self._load()
            data[record.user_id] = record.model_dump(mode='json')
            directory = os.path.dirname(os.path.abspath(self.path))
            os.makedirs(directory, exist_ok=True)
            tmp_path = f"{self.path}.tmp"
            with open(tmp_path, 'w', encoding='utf-8') as fh:
                json.dump(data, fh, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)


class DatabaseProgressStore(ProgressStore):
    """Student rows as progress records. Needs an application context."""

    def _student(self, user_id):
        from lettertwist import db
        from lettertwist.models import Student
        try:
            return db.session.get(Student, int(user_id))
        except (TypeError, ValueError):
            return None

    def get(self, user_id):
        student = self._student(user_id)
        if not student:
            return None
        return ProgressRecord(
            user_id=str(student.id),
            total_score=student.total_score or 0,
            games_played=student.games_played or 0,
            achievements=set(student.get_achievements()),
            updated_at=student.updated_at or _utcnow(),
        )

    def put(self, record):
        from lettertwist import db
        student = self._student(record.user_id)
        if not student:
            raise LookupError(f"Student {record.user_id} not found")
        student.total_score = record.total_score
        student.games_played = record.games_played
        student.set_achievements(record.achievements)
        student.touch(record.updated_at)
        db.session.add(student)
        try:
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise


class SyncingProgressStore(ProgressStore):
    """Dual write: local first, remote best-effort; newest `updated_at` wins on read.

    On a timestamp tie the remote record is taken.
    """

    def __init__(self, local: ProgressStore, remote: ProgressStore):
        self.local = local
        self.remote = remote

    def get(self, user_id):
        local_record = self.local.get(user_id)
        try:
            remote_record = self.remote.get(user_id)
        except Exception as exc:
            logger.warning("[progress-sync-failed] read user=%s: %s", user_id, exc)
            return local_record

        if local_record is None or remote_record is None:
            return local_record or remote_record
        if local_record == remote_record:
            return remote_record
        if local_record.updated_at > remote_record.updated_at:
            self._put_remote(local_record)
            return local_record
        self.local.put(remote_record)
        return remote_record

    def put(self, record):
        self.local.put(record)
        self._put_remote(record)

    def _put_remote(self, record):
        try:
            self.remote.put(record)
        except Exception as exc:
            logger.warning("[progress-sync-failed] write user=%s: %s", record.user_id, exc)


def build_progress_store(config) -> ProgressStore:
    """Pick the backing named by PROGRESS_STORE, mirrored locally if PROGRESS_LOCAL_FILE is set."""
    kind = (config.get('PROGRESS_STORE') or 'database').lower()
    if kind == 'memory':
        store = InMemoryProgressStore()
    elif kind == 'file':
        store = JsonFileProgressStore(config.get('PROGRESS_FILE') or 'progress.json')
    elif kind == 'database':
        store = DatabaseProgressStore()
    else:
        raise ValueError(f"Unknown PROGRESS_STORE: {kind}")

    local_file = config.get('PROGRESS_LOCAL_FILE')
    if local_file:
        return SyncingProgressStore(local=JsonFileProgressStore(local_file), remote=store)
    return store

"""
Session Store Service

Storage collaborator that receives finished session summaries and keeps
aggregate practice statistics.

Two implementations:
- InMemorySessionStore: process-local, used by default and in tests
- JsonFileSessionStore: stats file on disk, keeps the last N sessions
"""

import logging
import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError

from ..domain.analysis import SessionRecord, SessionSummary, StoredStats

logger = logging.getLogger(__name__)

DEFAULT_MAX_SESSIONS = 20


def format_time(seconds: int) -> str:
    """Format seconds as m:ss."""
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}:{secs:02d}"


def _new_record(summary: SessionSummary) -> SessionRecord:
    return SessionRecord(
        id=str(uuid.uuid4()),
        date=datetime.now(timezone.utc).isoformat(),
        summary=summary,
    )


def _accumulate(stats: StoredStats, record: SessionRecord, max_sessions: int) -> StoredStats:
    """Fold one record into aggregate stats, trimming history to max_sessions."""
    s = record.summary
    sessions = (stats.sessions + [record])[-max_sessions:]
    return StoredStats(
        total_gestures=stats.total_gestures + s.gestures,
        total_sessions=stats.total_sessions + 1,
        best_streak=max(stats.best_streak, s.best_streak),
        best_impact=max(stats.best_impact, s.peak_impact),
        total_time=stats.total_time + s.duration,
        sessions=sessions,
    )


class SessionStore(ABC):
    """Interface the session tracker hands summaries to."""

    @abstractmethod
    def save(self, summary: SessionSummary) -> SessionRecord:
        """Persist a finished session and return its stored record."""

    @abstractmethod
    def load_stats(self) -> StoredStats:
        """Aggregate statistics across stored sessions."""

    def list_sessions(self, limit: Optional[int] = None) -> List[SessionRecord]:
        """Stored sessions, most recent first."""
        sessions = list(reversed(self.load_stats().sessions))
        return sessions[:limit] if limit else sessions


class InMemorySessionStore(SessionStore):
    """Keeps stats in process memory."""

    def __init__(self, max_sessions: int = DEFAULT_MAX_SESSIONS):
        self.max_sessions = max_sessions
        self._stats = StoredStats()
        self._lock = threading.Lock()

    def save(self, summary: SessionSummary) -> SessionRecord:
        record = _new_record(summary)
        with self._lock:
            self._stats = _accumulate(self._stats, record, self.max_sessions)
        return record

    def load_stats(self) -> StoredStats:
        with self._lock:
            return StoredStats(
                total_gestures=self._stats.total_gestures,
                total_sessions=self._stats.total_sessions,
                best_streak=self._stats.best_streak,
                best_impact=self._stats.best_impact,
                total_time=self._stats.total_time,
                sessions=list(self._stats.sessions),
            )


# =============================================================================
# JSON file format
# =============================================================================

class _SummaryModel(BaseModel):
    duration: int = 0
    gestures: int = 0
    best_streak: int = 0
    smile_count: int = 0
    slouch_count: int = 0
    good_posture_seconds: int = 0
    peak_impact: int = 0
    average_impact: int = 0


class _RecordModel(BaseModel):
    id: str
    date: str
    summary: _SummaryModel


class _StatsModel(BaseModel):
    total_gestures: int = 0
    total_sessions: int = 0
    best_streak: int = 0
    best_impact: int = 0
    total_time: int = 0
    sessions: List[_RecordModel] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, stats: StoredStats) -> "_StatsModel":
        return cls(
            total_gestures=stats.total_gestures,
            total_sessions=stats.total_sessions,
            best_streak=stats.best_streak,
            best_impact=stats.best_impact,
            total_time=stats.total_time,
            sessions=[
                _RecordModel(
                    id=r.id,
                    date=r.date,
                    summary=_SummaryModel(**vars(r.summary)),
                )
                for r in stats.sessions
            ],
        )

    def to_domain(self) -> StoredStats:
        return StoredStats(
            total_gestures=self.total_gestures,
            total_sessions=self.total_sessions,
            best_streak=self.best_streak,
            best_impact=self.best_impact,
            total_time=self.total_time,
            sessions=[
                SessionRecord(id=r.id, date=r.date, summary=SessionSummary(**r.summary.model_dump()))
                for r in self.sessions
            ],
        )


class JsonFileSessionStore(SessionStore):
    """
    Stores aggregate stats and recent sessions in a JSON file.

    Usage:
        store = JsonFileSessionStore("data/stats.json")
        store.save(summary)
        print(store.load_stats().total_sessions)
    """

    def __init__(self, path: str | Path, max_sessions: int = DEFAULT_MAX_SESSIONS):
        self.path = Path(path)
        self.max_sessions = max_sessions
        self._lock = threading.Lock()

    @property
    def corrupt_path(self) -> Path:
        """Where an unparseable stats file is moved before it would be overwritten."""
        return self.path.with_suffix(self.path.suffix + ".corrupt")

    def load_stats(self) -> StoredStats:
        """Read stats; a missing or unreadable file yields empty stats."""
        if not self.path.exists():
            return StoredStats()
        try:
            return self._read()
        except (OSError, ValidationError, ValueError) as e:
            logger.warning(f"Could not read stats file {self.path}: {e}")
            return StoredStats()

    def save(self, summary: SessionSummary) -> SessionRecord:
        record = _new_record(summary)
        with self._lock:
            stats = _accumulate(self._load_for_update(), record, self.max_sessions)
            self._write(stats)
        logger.info(f"Session {record.id} saved to {self.path}")
        return record

    def _read(self) -> StoredStats:
        return _StatsModel.model_validate_json(self.path.read_text(encoding="utf-8")).to_domain()

    def _load_for_update(self) -> StoredStats:
        """
        Stats to fold the next session into.

        Unlike load_stats(), an unparseable file is moved aside rather than
        overwritten, and an unreadable one raises.
        """
        if not self.path.exists():
            return StoredStats()
        try:
            return self._read()
        except (ValidationError, ValueError) as e:
            logger.warning(f"Stats file {self.path} is corrupt, moving it to {self.corrupt_path}: {e}")
            self.path.replace(self.corrupt_path)
            return StoredStats()

    def _write(self, stats: StoredStats) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            tmp_path.write_text(_StatsModel.from_domain(stats).model_dump_json(indent=2), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as e:
            logger.error(f"Failed to write stats file {self.path}: {e}")
            raise

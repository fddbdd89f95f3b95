"""
In-memory session store keyed by UUID.

Each record holds the session data dict and the time it was last touched.
Records expire after `ttl_seconds` of inactivity.
"""

import copy
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

SESSION_TTL_SECONDS = 3600  # 1 hour


@dataclass
class SessionRecord:
    """Persisted state of one session."""

    data: Dict[str, Any] = field(default_factory=dict)
    last_accessed: float = field(default_factory=time.time)


class SessionStore:
    """Thread-safe dict of session_id -> SessionRecord."""

    def __init__(self, ttl_seconds: int = SESSION_TTL_SECONDS):
        self.ttl_seconds = ttl_seconds
        self._records: Dict[str, SessionRecord] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def _expired(self, record: SessionRecord, now: float) -> bool:
        return now - record.last_accessed > self.ttl_seconds

    def create_id(self) -> str:
        """Return a fresh ID that is not in use."""
        while True:
            session_id = str(uuid.uuid4())
            if not self.exists(session_id):
                return session_id

    def exists(self, session_id: str) -> bool:
        """Return True if a live record exists for the ID."""
        return self.load(session_id, touch=False) is not None

    def load(self, session_id: str, touch: bool = True) -> Optional[Dict[str, Any]]:
        """Return a copy of the session data, or None if missing or expired."""
        now = time.time()
        with self._lock:
            record = self._records.get(session_id)
            if record is None:
                return None
            if self._expired(record, now):
                del self._records[session_id]
                return None
            if touch:
                record.last_accessed = now
            return copy.deepcopy(record.data)

    def save(self, session_id: str, data: Dict[str, Any]) -> None:
        with self._lock:
            self._records[session_id] = SessionRecord(data=copy.deepcopy(data))

    def delete(self, session_id: str) -> bool:
        with self._lock:
            return self._records.pop(session_id, None) is not None

    def cleanup_expired(self) -> int:
        """Remove expired sessions. Returns number removed."""
        now = time.time()
        with self._lock:
            expired = [
                sid for sid, record in self._records.items()
                if self._expired(record, now)
            ]
            for sid in expired:
                del self._records[sid]
        return len(expired)

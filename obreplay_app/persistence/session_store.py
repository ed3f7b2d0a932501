"""In-memory session store for completed replay datasets."""

import threading
import uuid
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Optional

import structlog

from ..data.models import DepthDataset, Session, Snapshot


class SessionStore:
    """
    Bounded, creation-ordered store of ingested datasets.

    Creates (insert plus eviction) are serialized by a lock; lookups are
    plain dictionary reads and may run concurrently with each other.
    Eviction ranks sessions by creation time, never by last access.
    """

    def __init__(self, capacity: int = 10):
        if capacity <= 0:
            raise ValueError("capacity must be a positive integer")
        self.capacity = capacity
        self.logger = structlog.get_logger("session.store")
        self._lock = threading.Lock()
        self._sessions: "OrderedDict[str, Session]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def session_ids(self) -> list[str]:
        """Identifiers of retained sessions, oldest first."""
        return list(self._sessions)

    def create_session(self, dataset: DepthDataset) -> str:
        """
        Store a completed dataset under a fresh identifier.

        Args:
            dataset: Finished ingestion result

        Returns:
            Opaque session identifier
        """
        with self._lock:
            session_id = uuid.uuid4().hex
            session = Session.from_dataset(session_id, dataset, datetime.now(timezone.utc))
            self._sessions[session_id] = session

            evicted = []
            while len(self._sessions) > self.capacity:
                old_id, _ = self._sessions.popitem(last=False)
                evicted.append(old_id)

        self.logger.info(
            "Session created",
            session_id=session_id,
            total_ticks=session.total_ticks,
            retained=len(self._sessions),
        )
        if evicted:
            self.logger.info("Sessions evicted", session_ids=evicted)

        return session_id

    def get_session(self, session_id: str) -> Optional[Session]:
        """Look up a session; None if unknown or evicted."""
        return self._sessions.get(session_id)

    def get_snapshot_at(self, session_id: str, tick: int) -> Optional[Snapshot]:
        """
        Snapshot at ``tick``, clamped into ``[0, total_ticks - 1]``.

        Returns:
            The snapshot, or None if the session is unknown or empty
        """
        session = self._sessions.get(session_id)
        if session is None or session.total_ticks == 0:
            return None

        return session.snapshots[clamp_tick(tick, session.total_ticks)]


def clamp_tick(tick: int, total_ticks: int) -> int:
    """Clamp a requested tick into the valid index range."""
    return max(0, min(tick, total_ticks - 1))

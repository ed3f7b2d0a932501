"""
Random-access replay queries over stored sessions.

These build the payloads a presentation layer consumes: one snapshot
capped to a bounded number of levels per side with precomputed totals, and
the fixed-size depth history with the true tick count.
"""

from dataclasses import dataclass
from typing import Any, Optional

import orjson

from ..data.models import BookLevel, HistoryPoint
from ..persistence.session_store import SessionStore, clamp_tick
from ..utils.time import calculate_latency_ms

MAX_DEPTH_LEVELS = 25


def _levels_to_dicts(levels: tuple[BookLevel, ...]) -> list[dict[str, float]]:
    return [{"price": level.price, "size": level.size} for level in levels]


@dataclass(frozen=True)
class SnapshotView:
    """One tick of a session, depth-capped, with full-book totals."""
    tick: int
    ts_recv: str
    ts_event: str
    bids: tuple[BookLevel, ...]
    asks: tuple[BookLevel, ...]
    bid_total: float
    ask_total: float
    latency_ms: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "tick": self.tick,
            "tsRecv": self.ts_recv,
            "tsEvent": self.ts_event,
            "bids": _levels_to_dicts(self.bids),
            "asks": _levels_to_dicts(self.asks),
            "totals": {"bid": self.bid_total, "ask": self.ask_total},
            "latencyMs": self.latency_ms,
        }

    def to_json(self) -> bytes:
        return orjson.dumps(self.to_dict())


@dataclass(frozen=True)
class HistoryView:
    """Binned depth history of a session and its true tick count."""
    history: tuple[HistoryPoint, ...]
    total_ticks: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "history": [point.to_dict() for point in self.history],
            "totalTicks": self.total_ticks,
        }

    def to_json(self) -> bytes:
        return orjson.dumps(self.to_dict())


def get_snapshot_view(store: SessionStore, session_id: str, tick: int,
                      max_levels: int = MAX_DEPTH_LEVELS) -> Optional[SnapshotView]:
    """
    Build the replay payload for one tick.

    Args:
        store: Session store holding the dataset
        session_id: Identifier returned when the dataset was stored
        tick: Requested tick; clamped into the session's range
        max_levels: Levels kept per side, in source order

    Returns:
        SnapshotView, or None if the session is unknown or empty
    """
    session = store.get_session(session_id)
    if session is None or session.total_ticks == 0:
        return None

    index = clamp_tick(tick, session.total_ticks)
    snapshot = session.snapshots[index]

    return SnapshotView(
        tick=index,
        ts_recv=snapshot.ts_recv,
        ts_event=snapshot.ts_event,
        bids=snapshot.bids[:max_levels],
        asks=snapshot.asks[:max_levels],
        bid_total=session.bid_depth[index],
        ask_total=session.ask_depth[index],
        latency_ms=calculate_latency_ms(snapshot.ts_recv, snapshot.ts_event),
    )


def get_history_view(store: SessionStore, session_id: str) -> Optional[HistoryView]:
    """Binned history for a session, or None if the session is unknown."""
    session = store.get_session(session_id)
    if session is None:
        return None

    return HistoryView(history=session.history, total_ticks=session.total_ticks)

"""
Canonical data models for ingested order-book snapshots.

This module defines immutable data structures that represent decoded CSV
records, the column mapping used to decode them, and the finished dataset
handed to the session store.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class BookLevel:
    """Single order book level with price and size."""
    price: float
    size: float


@dataclass(frozen=True)
class Snapshot:
    """Order book snapshot at one tick, levels in source column order."""
    ts_recv: str
    ts_event: str
    bids: tuple[BookLevel, ...] = ()
    asks: tuple[BookLevel, ...] = ()


@dataclass(frozen=True)
class LevelIndices:
    """Column positions of one registered price/size pair."""
    px: int
    sz: int


@dataclass(frozen=True)
class ColumnIndices:
    """Column mapping resolved once from the header record."""
    ts_recv: int
    ts_event: int
    bid: tuple[LevelIndices, ...]
    ask: tuple[LevelIndices, ...]


@dataclass(frozen=True)
class HistoryPoint:
    """Representative tick and mean total depth over one bin."""
    tick: int
    bid: float
    ask: float

    def to_dict(self) -> dict[str, Any]:
        return {"tick": self.tick, "bid": self.bid, "ask": self.ask}


@dataclass(frozen=True)
class ParseProgress:
    """Cumulative progress of one parse operation."""
    bytes_processed: int
    total_bytes: int
    lines_processed: int
    percent_complete: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "bytesProcessed": self.bytes_processed,
            "totalBytes": self.total_bytes,
            "linesProcessed": self.lines_processed,
            "percentComplete": self.percent_complete,
        }


@dataclass(frozen=True)
class DepthDataset:
    """Completed ingestion result: snapshots, depth series and binned history."""
    snapshots: tuple[Snapshot, ...]
    bid_depth: tuple[float, ...]
    ask_depth: tuple[float, ...]
    history: tuple[HistoryPoint, ...]

    @property
    def total_ticks(self) -> int:
        return len(self.snapshots)


@dataclass(frozen=True)
class Session:
    """One stored dataset, retrievable by identifier until evicted."""
    session_id: str
    snapshots: tuple[Snapshot, ...]
    bid_depth: tuple[float, ...]
    ask_depth: tuple[float, ...]
    history: tuple[HistoryPoint, ...]
    total_ticks: int
    created_at: datetime

    @classmethod
    def from_dataset(cls, session_id: str, dataset: DepthDataset,
                     created_at: datetime) -> "Session":
        return cls(
            session_id=session_id,
            snapshots=dataset.snapshots,
            bid_depth=dataset.bid_depth,
            ask_depth=dataset.ask_depth,
            history=dataset.history,
            total_ticks=dataset.total_ticks,
            created_at=created_at,
        )


@dataclass(frozen=True)
class UploadResult:
    """What the caller receives after a dataset is ingested and stored."""
    session_id: str
    total_ticks: int

    @property
    def message(self) -> str:
        return f"Successfully parsed {self.total_ticks:,} snapshots"

    def to_dict(self) -> dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "totalTicks": self.total_ticks,
            "message": self.message,
        }

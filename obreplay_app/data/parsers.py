"""
Order-book CSV record parsers.

The header record is resolved once into a ColumnIndices mapping; every
later record is decoded through that mapping into a Snapshot. Price/size
columns are registered in pairs so a size can never attach to the price of
a different level.
"""

import csv
import math
import time
from typing import Any, Optional

from ..config.defaults import MIB
from ..errors import MalformedRecordError, MissingColumnsError
from .models import BookLevel, ColumnIndices, LevelIndices, Snapshot

MAX_BOOK_LEVELS = 10

# Matches IngestParams.max_line_chars: a field can be as long as its line.
MAX_FIELD_CHARS = 50 * MIB

REQUIRED_TIMESTAMP_COLUMNS = ("ts_recv", "ts_event")


class ParsingMetrics:
    """Counters for one parse operation."""

    def __init__(self):
        self.records_parsed = 0
        self.levels_kept = 0
        self.levels_skipped = 0
        self.started_at = time.time()

    def record_levels(self, kept: int, skipped: int):
        """Record the level outcome of one decoded record."""
        self.records_parsed += 1
        self.levels_kept += kept
        self.levels_skipped += skipped

    def get_stats(self) -> dict[str, Any]:
        """Get current metrics."""
        elapsed = time.time() - self.started_at
        return {
            "records_parsed": self.records_parsed,
            "levels_kept": self.levels_kept,
            "levels_skipped": self.levels_skipped,
            "elapsed_ms": elapsed * 1000,
        }


def ensure_field_size_limit(limit: int = MAX_FIELD_CHARS) -> None:
    """Raise the process-wide csv field size limit to at least ``limit``."""
    if csv.field_size_limit() < limit:
        csv.field_size_limit(limit)


def split_record(line: str, record_number: Optional[int] = None) -> list[str]:
    """
    Split one CSV line into trimmed field values.

    Raises:
        MalformedRecordError: If the csv reader rejects the line
    """
    try:
        for row in csv.reader([line]):
            return [value.strip() for value in row]
    except csv.Error as e:
        raise MalformedRecordError(
            f"Failed to parse record {record_number}: {e}"
            if record_number is not None else f"Failed to split record: {e}",
            record_number=record_number,
            raw_record=line[:200],
        ) from e
    return []


def normalize_column_name(name: str) -> str:
    """Trim whitespace and any stray byte order mark, then lower-case."""
    return name.strip().lstrip("\ufeff").strip().lower()


def build_column_indices(field_names: list[str]) -> ColumnIndices:
    """
    Resolve the column mapping from the header record.

    Args:
        field_names: Header field names in source order

    Returns:
        ColumnIndices with timestamp positions and paired depth columns

    Raises:
        MissingColumnsError: If a timestamp column is absent, or no side has
                             a single complete price/size pair
    """
    normalized = [normalize_column_name(name) for name in field_names]
    positions: dict[str, int] = {}
    for index, name in enumerate(normalized):
        positions.setdefault(name, index)

    missing = [name for name in REQUIRED_TIMESTAMP_COLUMNS if name not in positions]
    if missing:
        raise MissingColumnsError(
            f"Failed to find required columns: {', '.join(missing)}",
            missing_columns=missing,
            available_columns=normalized,
        )

    bid: list[LevelIndices] = []
    ask: list[LevelIndices] = []

    for level in range(MAX_BOOK_LEVELS):
        for side, pairs in (("bid", bid), ("ask", ask)):
            px = positions.get(f"{side}_px_{level:02d}")
            sz = positions.get(f"{side}_sz_{level:02d}")
            if px is not None and sz is not None:
                pairs.append(LevelIndices(px=px, sz=sz))

    if not bid and not ask:
        raise MissingColumnsError(
            "Failed to find required columns (bid_px_*/bid_sz_* or ask_px_*/ask_sz_* pairs)",
            missing_columns=["bid_px_00", "bid_sz_00", "ask_px_00", "ask_sz_00"],
            available_columns=normalized,
        )

    return ColumnIndices(
        ts_recv=positions["ts_recv"],
        ts_event=positions["ts_event"],
        bid=tuple(bid),
        ask=tuple(ask),
    )


def _field(values: list[str], index: int) -> Optional[str]:
    return values[index] if index < len(values) else None


def _parse_positive(raw: Optional[str]) -> Optional[float]:
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return value


def _parse_level(values: list[str], pair: LevelIndices) -> Optional[BookLevel]:
    """Decode one price/size pair; None means no liquidity at this level."""
    price_str = _field(values, pair.px)
    if not price_str or not price_str.strip() or price_str == "0":
        return None

    price = _parse_positive(price_str)
    size = _parse_positive(_field(values, pair.sz))
    if price is None or size is None:
        return None

    return BookLevel(price=price, size=size)


def _parse_side(values: list[str], pairs: tuple[LevelIndices, ...]) -> tuple[tuple[BookLevel, ...], int]:
    levels = []
    for pair in pairs:
        level = _parse_level(values, pair)
        if level is not None:
            levels.append(level)
    return tuple(levels), len(pairs) - len(levels)


def parse_snapshot_record(values: list[str], indices: ColumnIndices,
                          record_number: Optional[int] = None,
                          metrics: Optional[ParsingMetrics] = None) -> Snapshot:
    """
    Decode one record into a Snapshot.

    Empty, zero or unparseable levels are omitted rather than reported.
    Levels keep column order; they are not sorted by price.

    Args:
        values: Field values in original column order
        indices: Column mapping from the header record
        record_number: 1-based data record number, for error reporting
        metrics: Optional per-parse counters

    Returns:
        Snapshot for this tick (possibly with empty sides)

    Raises:
        MalformedRecordError: If either timestamp field is missing or empty
    """
    ts_recv = _field(values, indices.ts_recv)
    ts_event = _field(values, indices.ts_event)

    if not ts_recv or not ts_event:
        raise MalformedRecordError(
            f"Failed to parse record {record_number}: Missing timestamp fields"
            if record_number is not None else "Missing timestamp fields",
            record_number=record_number,
            raw_record=",".join(values),
        )

    bids, bids_skipped = _parse_side(values, indices.bid)
    asks, asks_skipped = _parse_side(values, indices.ask)

    if metrics is not None:
        metrics.record_levels(len(bids) + len(asks), bids_skipped + asks_skipped)

    return Snapshot(ts_recv=ts_recv, ts_event=ts_event, bids=bids, asks=asks)


class RecordDecoder:
    """
    Stateful decoder for one parse: header first, then data records.

    The column mapping is built from the first line it is given and then
    shared read-only by every following record.
    """

    def __init__(self, max_field_chars: int = MAX_FIELD_CHARS):
        ensure_field_size_limit(max_field_chars)
        self.indices: Optional[ColumnIndices] = None
        self.metrics = ParsingMetrics()
        self.records_seen = 0

    def decode(self, line: str) -> Optional[Snapshot]:
        """
        Consume one text line.

        Returns:
            None for the header line, otherwise the decoded Snapshot
        """
        if self.indices is None:
            self.indices = build_column_indices(split_record(line))
            return None

        self.records_seen += 1
        values = split_record(line, self.records_seen)
        return parse_snapshot_record(values, self.indices, self.records_seen, self.metrics)

"""Total book depth per tick and its fixed-size historical summary"""

import math
from collections.abc import Sequence

import structlog

from ..data.models import BookLevel, DepthDataset, HistoryPoint, Snapshot

logger = structlog.get_logger(__name__)

TARGET_HISTORY_BINS = 1000


def side_total(levels: Sequence[BookLevel]) -> float:
    """
    Sum of sizes across one side of the book

    Args:
        levels: BookLevel objects for one side

    Returns:
        Total size (0.0 for an empty side)
    """
    return math.fsum(level.size for level in levels)


def aggregate_history(bid_depth: Sequence[float], ask_depth: Sequence[float],
                      target_bins: int = TARGET_HISTORY_BINS) -> list[HistoryPoint]:
    """
    Reduce per-tick depth series into at most ``target_bins`` points

    Series no longer than ``target_bins`` are returned one point per tick
    with values unchanged. Longer series are split into bins of
    ``ceil(total / target_bins)`` ticks (the last one truncated); each bin
    is represented by its first tick and the mean depth over the bin.

    Args:
        bid_depth: Total bid size per tick
        ask_depth: Total ask size per tick, parallel to ``bid_depth``
        target_bins: Upper bound on the number of points returned

    Returns:
        List of HistoryPoint ordered by tick
    """
    total_ticks = len(bid_depth)

    if total_ticks == 0:
        return []

    if total_ticks <= target_bins:
        return [
            HistoryPoint(tick=tick, bid=bid, ask=ask_depth[tick])
            for tick, bid in enumerate(bid_depth)
        ]

    bin_size = math.ceil(total_ticks / target_bins)
    history = []

    for bin_start in range(0, total_ticks, bin_size):
        bin_end = min(bin_start + bin_size, total_ticks)
        count = bin_end - bin_start
        history.append(HistoryPoint(
            tick=bin_start,
            bid=math.fsum(bid_depth[bin_start:bin_end]) / count,
            ask=math.fsum(ask_depth[bin_start:bin_end]) / count,
        ))

    return history


class DepthAggregator:
    """
    Accumulates decoded snapshots and their per-tick depth totals

    Snapshots are appended in arrival order; ``finalize`` produces the
    immutable dataset once the stream is exhausted.
    """

    def __init__(self, target_bins: int = TARGET_HISTORY_BINS, log_every: int = 50_000):
        self.target_bins = target_bins
        self.log_every = log_every
        self.snapshots: list[Snapshot] = []
        self.bid_depth: list[float] = []
        self.ask_depth: list[float] = []

    def __len__(self) -> int:
        return len(self.snapshots)

    def add(self, snapshot: Snapshot) -> None:
        """Append one snapshot and its bid/ask totals"""
        self.snapshots.append(snapshot)
        self.bid_depth.append(side_total(snapshot.bids))
        self.ask_depth.append(side_total(snapshot.asks))

        if len(self.snapshots) % self.log_every == 0:
            logger.info("Parsed snapshots so far", snapshots=len(self.snapshots))

    def finalize(self) -> DepthDataset:
        """Bin the depth series and freeze everything into a DepthDataset"""
        history = aggregate_history(self.bid_depth, self.ask_depth, self.target_bins)
        return DepthDataset(
            snapshots=tuple(self.snapshots),
            bid_depth=tuple(self.bid_depth),
            ask_depth=tuple(self.ask_depth),
            history=tuple(history),
        )

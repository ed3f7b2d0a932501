"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncIterator, Callable, Sequence

import pytest

from obreplay_app.data.models import BookLevel, DepthDataset, Snapshot
from obreplay_app.metrics.depth import DepthAggregator

HEADER = "ts_recv,ts_event,bid_px_00,bid_sz_00,ask_px_00,ask_sz_00"


def _split_at(data: bytes, cuts: Sequence[int]) -> list[bytes]:
    bounds = [0, *sorted(set(c for c in cuts if 0 < c < len(data))), len(data)]
    return [data[start:end] for start, end in zip(bounds, bounds[1:])]


@pytest.fixture
def make_csv() -> Callable[..., str]:
    """Build CSV text from a header and row strings."""
    def _make(rows: Sequence[str], header: str = HEADER, newline: str = "\n") -> str:
        return newline.join([header, *rows]) + newline
    return _make


@pytest.fixture
def byte_stream() -> Callable[..., AsyncIterator[bytes]]:
    """Serve bytes as an async chunk stream split at the given offsets."""
    def _stream(data: bytes, cuts: Sequence[int] = ()) -> AsyncIterator[bytes]:
        async def _gen() -> AsyncIterator[bytes]:
            for chunk in _split_at(data, cuts):
                yield chunk
        return _gen()
    return _stream


@pytest.fixture
def make_dataset() -> Callable[..., DepthDataset]:
    """Build a dataset of ``ticks`` snapshots with constant per-side depth."""
    def _make(ticks: int, bid_size: float = 5.0, ask_size: float = 3.0,
              target_bins: int = 1000) -> DepthDataset:
        aggregator = DepthAggregator(target_bins=target_bins)
        for i in range(ticks):
            aggregator.add(Snapshot(
                ts_recv=f"2024-01-01T00:00:{i % 60:02d}Z",
                ts_event=f"2024-01-01T00:00:{i % 60:02d}Z",
                bids=(BookLevel(price=100.0 - (i % 10) * 0.01, size=bid_size),),
                asks=(BookLevel(price=101.0 + (i % 10) * 0.01, size=ask_size),),
            ))
        return aggregator.finalize()
    return _make

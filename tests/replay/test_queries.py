"""Tests for replay payload queries."""

import orjson
import pytest

from obreplay_app.data.models import BookLevel, Snapshot
from obreplay_app.metrics.depth import DepthAggregator
from obreplay_app.persistence.session_store import SessionStore
from obreplay_app.replay.queries import get_history_view, get_snapshot_view


def _deep_dataset(levels: int):
    aggregator = DepthAggregator()
    aggregator.add(Snapshot(
        ts_recv="2024-01-01T00:00:00.001500Z",
        ts_event="2024-01-01T00:00:00.000000Z",
        bids=tuple(BookLevel(price=100.0 - i, size=1.0) for i in range(levels)),
        asks=tuple(BookLevel(price=101.0 + i, size=2.0) for i in range(levels)),
    ))
    return aggregator.finalize()


class TestSnapshotView:
    """Test the per-tick replay payload."""

    def test_caps_levels_but_keeps_full_totals(self):
        """Only the first levels are returned; totals cover every level."""
        store = SessionStore()
        session_id = store.create_session(_deep_dataset(30))

        view = get_snapshot_view(store, session_id, 0, max_levels=25)

        assert len(view.bids) == 25
        assert len(view.asks) == 25
        assert view.bids[0].price == 100.0
        assert view.bid_total == 30.0
        assert view.ask_total == 60.0

    def test_latency(self):
        """Latency is the receive-event distance in milliseconds."""
        store = SessionStore()
        session_id = store.create_session(_deep_dataset(1))

        view = get_snapshot_view(store, session_id, 0)

        assert view.latency_ms == pytest.approx(1.5)

    def test_tick_is_clamped(self, make_dataset):
        """The view reports the tick actually served."""
        store = SessionStore()
        dataset = make_dataset(10)
        session_id = store.create_session(dataset)

        view = get_snapshot_view(store, session_id, 500)

        assert view.tick == 9
        assert view.ts_recv == dataset.snapshots[9].ts_recv
        assert get_snapshot_view(store, session_id, -1).tick == 0

    def test_unknown_session(self):
        assert get_snapshot_view(SessionStore(), "missing", 0) is None

    def test_json_shape(self):
        store = SessionStore()
        session_id = store.create_session(_deep_dataset(2))

        payload = orjson.loads(get_snapshot_view(store, session_id, 0).to_json())

        assert set(payload) == {"tick", "tsRecv", "tsEvent", "bids", "asks", "totals", "latencyMs"}
        assert payload["bids"][0] == {"price": 100.0, "size": 1.0}
        assert payload["totals"] == {"bid": 2.0, "ask": 4.0}


class TestHistoryView:
    """Test the binned history payload."""

    def test_history_and_true_tick_count(self, make_dataset):
        """History is bounded while totalTicks reports the real count."""
        store = SessionStore()
        session_id = store.create_session(make_dataset(2500))

        view = get_history_view(store, session_id)
        payload = view.to_dict()

        assert view.total_ticks == 2500
        assert len(view.history) <= 1000
        assert payload["totalTicks"] == 2500
        assert payload["history"][0] == {"tick": 0, "bid": 5.0, "ask": 3.0}
        assert orjson.loads(view.to_json()) == payload

    def test_unknown_session(self):
        assert get_history_view(SessionStore(), "missing") is None

"""Tests for the bounded in-memory session store."""

import threading
from datetime import timezone

import pytest

from obreplay_app.persistence.session_store import SessionStore, clamp_tick


class TestClampTick:
    """Test tick clamping."""

    @pytest.mark.parametrize("tick,total,expected", [
        (0, 10, 0),
        (5, 10, 5),
        (9, 10, 9),
        (-5, 10, 0),
        (1010, 10, 9),
        (3, 1, 0),
    ])
    def test_clamp(self, tick, total, expected):
        assert clamp_tick(tick, total) == expected


class TestSessionStore:
    """Test session creation, lookup and eviction."""

    def test_create_and_get(self, make_dataset):
        """A stored dataset is retrievable by its new identifier."""
        store = SessionStore()
        dataset = make_dataset(5)

        session_id = store.create_session(dataset)
        session = store.get_session(session_id)

        assert session is not None
        assert session.session_id == session_id
        assert session.total_ticks == 5
        assert session.snapshots == dataset.snapshots
        assert session.history == dataset.history
        assert session.created_at.tzinfo == timezone.utc
        assert session_id in store
        assert len(store) == 1

    def test_identifiers_are_unique(self, make_dataset):
        store = SessionStore()
        dataset = make_dataset(1)

        ids = {store.create_session(dataset) for _ in range(5)}

        assert len(ids) == 5

    def test_unknown_session(self):
        store = SessionStore()

        assert store.get_session("missing") is None
        assert store.get_snapshot_at("missing", 0) is None

    def test_snapshot_at_clamps(self, make_dataset):
        """Out-of-range ticks return the first or last snapshot."""
        store = SessionStore()
        dataset = make_dataset(10)
        session_id = store.create_session(dataset)

        assert store.get_snapshot_at(session_id, -5) == dataset.snapshots[0]
        assert store.get_snapshot_at(session_id, 4) == dataset.snapshots[4]
        assert store.get_snapshot_at(session_id, 1010) == dataset.snapshots[9]

    def test_eleventh_session_evicts_oldest(self, make_dataset):
        """At capacity, the earliest-created session is dropped."""
        store = SessionStore(capacity=10)
        dataset = make_dataset(1)
        ids = [store.create_session(dataset) for _ in range(11)]

        assert len(store) == 10
        assert store.get_session(ids[0]) is None
        assert all(store.get_session(i) is not None for i in ids[1:])
        assert store.session_ids() == ids[1:]

    def test_eviction_ignores_access(self, make_dataset):
        """Reading a session does not protect it from eviction."""
        store = SessionStore(capacity=2)
        dataset = make_dataset(1)
        first = store.create_session(dataset)
        second = store.create_session(dataset)

        store.get_session(first)
        store.get_snapshot_at(first, 0)
        third = store.create_session(dataset)

        assert store.session_ids() == [second, third]

    def test_concurrent_creates_respect_capacity(self, make_dataset):
        """Racing creates never leave the store above capacity."""
        store = SessionStore(capacity=5)
        dataset = make_dataset(1)
        created = []

        def worker():
            for _ in range(20):
                created.append(store.create_session(dataset))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(created) == 160
        assert len(set(created)) == 160
        assert len(store) == 5

    @pytest.mark.parametrize("capacity", [0, -1])
    def test_invalid_capacity(self, capacity):
        with pytest.raises(ValueError):
            SessionStore(capacity=capacity)

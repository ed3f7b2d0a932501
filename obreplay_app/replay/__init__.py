"""Replay query surface over stored sessions."""

from .queries import HistoryView, SnapshotView, get_history_view, get_snapshot_view

__all__ = ["SnapshotView", "HistoryView", "get_snapshot_view", "get_history_view"]

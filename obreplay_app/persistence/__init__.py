"""Session retention for completed datasets."""

from .session_store import SessionStore, clamp_tick

__all__ = ["SessionStore", "clamp_tick"]

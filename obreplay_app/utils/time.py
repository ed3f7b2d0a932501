"""
Timestamp helpers for snapshot receive/event times.

Snapshot timestamps are kept as the raw strings found in the file. These
helpers interpret them only when a derived value is needed, such as the
receive-minus-event latency shown next to a replayed snapshot.
"""

import re
from datetime import datetime, timezone
from typing import Optional

_FRACTION = re.compile(r"\.(\d+)")

# Digit count of an integer epoch -> nanoseconds per unit.
_EPOCH_SCALES = ((10, 1_000_000_000), (13, 1_000_000), (16, 1_000), (19, 1))


def timestamp_to_ns(value: str) -> Optional[int]:
    """
    Convert a timestamp string to integer nanoseconds since the Unix epoch.

    Accepts ISO-8601 strings (``Z`` or offset suffix, up to nanosecond
    fractions) and integer epochs in seconds, milliseconds, microseconds or
    nanoseconds, told apart by digit count.

    Args:
        value: Raw timestamp field

    Returns:
        Nanoseconds since epoch, or None if the value is not a timestamp
    """
    text = value.strip()
    if not text:
        return None

    if text.isascii() and text.isdigit():
        for max_digits, scale in _EPOCH_SCALES:
            if len(text) <= max_digits:
                return int(text) * scale
        return None

    fraction_ns = 0
    match = _FRACTION.search(text)
    if match:
        digits = match.group(1)
        fraction_ns = int(digits[:9].ljust(9, "0"))
        text = text[:match.start()] + text[match.end():]

    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)

    return int(parsed.timestamp()) * 1_000_000_000 + fraction_ns


def calculate_latency_ms(ts_recv: str, ts_event: str) -> Optional[float]:
    """
    Absolute distance between receive and event time in milliseconds.

    Returns:
        Latency in milliseconds, or None if either timestamp is unreadable
    """
    recv = timestamp_to_ns(ts_recv)
    event = timestamp_to_ns(ts_event)
    if recv is None or event is None:
        return None
    return abs(recv - event) / 1_000_000


def format_latency(latency_ms: float) -> str:
    """Render a latency as microseconds, milliseconds or seconds."""
    if latency_ms < 1:
        return f"{latency_ms * 1000:.0f}μs"
    if latency_ms < 1000:
        return f"{latency_ms:.2f}ms"
    return f"{latency_ms / 1000:.2f}s"

"""
Conditions that are recovered from locally and only reported in logs.
"""

from typing import Optional


class GracefulDegradationError(Exception):
    """Mixin for conditions that allow continued operation with a fallback."""

    def __init__(self, message: str, degraded_functionality: Optional[str] = None,
                 fallback_strategy: Optional[str] = None, **kwargs):
        super().__init__(message)
        self.degraded_functionality = degraded_functionality
        self.fallback_strategy = fallback_strategy
        self.allows_degradation = True


class UnsupportedEncodingError(GracefulDegradationError):
    """Detected encoding has no codec in this runtime; UTF-8 is used instead."""

    def __init__(self, encoding: str, fallback: str = "utf-8", **kwargs):
        super().__init__(
            f"Encoding {encoding!r} is not supported, falling back to {fallback}",
            degraded_functionality="text_decoding",
            fallback_strategy=fallback,
            **kwargs,
        )
        self.encoding = encoding
        self.fallback = fallback

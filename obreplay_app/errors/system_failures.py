"""
Failure classifications for the byte stream and runtime environment.

These represent input that is not text at all, a source that broke off
mid-transfer, or an unusable configuration.
"""

from typing import Optional

from .base import IngestError


class SystemFailureError(IngestError):
    """Base class for stream and environment failures."""


class LineTooLongError(SystemFailureError):
    """No line terminator within the carry-over limit; likely binary input."""

    def __init__(self, message: str, buffered_chars: Optional[int] = None,
                 limit: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.buffered_chars = buffered_chars
        self.limit = limit


class SourceReadError(SystemFailureError):
    """The byte source ended abnormally."""

    def __init__(self, message: str, bytes_received: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.bytes_received = bytes_received


class ConfigurationError(SystemFailureError):
    """Configuration values failed validation."""

    def __init__(self, message: str, errors: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []

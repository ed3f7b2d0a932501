"""
Error classification for order-book CSV ingestion.

This module provides a structured exception hierarchy separating data
quality problems in the uploaded file from failures of the stream itself,
plus the recovered conditions that only ever surface in logs.
"""

from .base import IngestError
from .data_quality import (
    DataQualityError,
    MissingColumnsError,
    MalformedRecordError,
    EmptyResultError,
)
from .system_failures import (
    SystemFailureError,
    LineTooLongError,
    SourceReadError,
    ConfigurationError,
)
from .recovery import (
    GracefulDegradationError,
    UnsupportedEncodingError,
)

__all__ = [
    "IngestError",
    # Data Quality Errors
    "DataQualityError",
    "MissingColumnsError",
    "MalformedRecordError",
    "EmptyResultError",
    # System Failures
    "SystemFailureError",
    "LineTooLongError",
    "SourceReadError",
    "ConfigurationError",
    # Recovered Conditions
    "GracefulDegradationError",
    "UnsupportedEncodingError",
]

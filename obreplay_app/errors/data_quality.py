"""
Data quality error classifications for order-book CSV ingestion.

Each of these aborts the whole parse: a dataset built around a missing
anchor column or timestamp would be internally inconsistent, so no partial
result is ever kept.
"""

from typing import Optional

from .base import IngestError


class DataQualityError(IngestError):
    """The uploaded file cannot be turned into a consistent dataset."""


class MissingColumnsError(DataQualityError):
    """Required timestamp columns or every usable depth pair is absent."""

    def __init__(self, message: str, missing_columns: Optional[list[str]] = None,
                 available_columns: Optional[list[str]] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.missing_columns = missing_columns or []
        self.available_columns = available_columns or []


class MalformedRecordError(DataQualityError):
    """A record lacks one of its anchor timestamps."""

    def __init__(self, message: str, record_number: Optional[int] = None,
                 raw_record: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.record_number = record_number
        self.raw_record = raw_record


class EmptyResultError(DataQualityError):
    """A well-formed stream produced zero snapshots."""

    def __init__(self, message: str = "No snapshots parsed from CSV",
                 lines_processed: int = 0, **kwargs):
        super().__init__(message, **kwargs)
        self.lines_processed = lines_processed

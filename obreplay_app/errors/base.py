"""Root of the ingestion error hierarchy."""

from typing import Any, Optional


class IngestError(Exception):
    """Base class for every terminal outcome of a parse operation."""

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False

"""
Logging configuration and utilities for the OBReplay ingestion system.
"""
from .config import configure_logging, get_ingest_logger, get_logger, log_ingest_outcome

__all__ = ["configure_logging", "get_logger", "get_ingest_logger", "log_ingest_outcome"]

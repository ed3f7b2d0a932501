"""
OBReplay - Order Book Snapshot Replay Engine

Ingests large order-book snapshot CSV exports into an in-memory time series
of book snapshots and serves them for tick-indexed replay and down-sampled
historical depth charting.
"""

__version__ = "0.1.0"
__author__ = "OBReplay Team"

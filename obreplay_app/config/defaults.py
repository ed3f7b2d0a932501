"""Default configuration parameters for the replay ingestion system."""

from dataclasses import dataclass

KIB = 1024
MIB = 1024 * KIB


@dataclass(frozen=True)
class IngestParams:
    """Streaming ingestion parameters."""
    # Encoding detection
    encoding_sample_bytes: int = 64 * KIB           # Leading bytes given to chardet
    encoding_min_confidence: float = 0.5            # Below this, decode as UTF-8

    # Framing
    max_batch_bytes: int = 10 * MIB                 # Sub-batch size for huge chunks
    max_line_chars: int = 50 * MIB                  # Carry-over limit without a terminator
    yield_every_lines: int = 1000                   # Cooperative yield cadence

    # Backpressure
    queue_max_records: int = 1000                   # Framer -> decoder handoff bound

    # Diagnostics
    progress_log_bytes: int = 50 * MIB              # Progress log cadence
    snapshot_log_every: int = 50_000                # Accumulated snapshot log cadence


@dataclass(frozen=True)
class HistoryParams:
    """Historical depth summary parameters."""
    target_bins: int = 1000


@dataclass(frozen=True)
class SessionParams:
    """Session retention parameters."""
    capacity: int = 10                              # Sessions kept, oldest-created evicted


@dataclass(frozen=True)
class QueryParams:
    """Replay query parameters."""
    max_depth_levels: int = 25                      # Levels per side in snapshot views


@dataclass(frozen=True)
class ReplayConfig:
    """Complete configuration."""
    ingest: IngestParams
    history: HistoryParams
    session: SessionParams
    query: QueryParams


def get_default_config() -> ReplayConfig:
    """Get the default configuration instance."""
    return ReplayConfig(
        ingest=IngestParams(),
        history=HistoryParams(),
        session=SessionParams(),
        query=QueryParams(),
    )

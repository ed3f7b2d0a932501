"""
Main ingestion engine coordinator.

Runs the streaming CSV pipeline for one upload and hands the completed
dataset to the session store:

    Byte source → Encoding → Line framing → (bounded queue) → Record decoding
    → Depth aggregation → Session store
"""

import asyncio
import contextlib
from collections.abc import AsyncIterable
from pathlib import Path
from typing import Optional, Union

from .config.defaults import ReplayConfig, get_default_config
from .config.loader import ConfigLoader
from .data.framing import LineFramer, ProgressCallback
from .data.models import DepthDataset, UploadResult
from .data.parsers import RecordDecoder
from .data.sources import DEFAULT_CHUNK_SIZE, file_size, iter_file
from .errors import EmptyResultError, IngestError
from .logging.config import get_ingest_logger, log_ingest_outcome
from .metrics.depth import DepthAggregator
from .persistence.session_store import SessionStore
from .replay.queries import HistoryView, SnapshotView, get_history_view, get_snapshot_view

logger = get_ingest_logger(__name__)

_END = object()


async def parse_csv_stream(
    chunks: AsyncIterable[bytes],
    *,
    total_bytes: Optional[int] = None,
    on_progress: Optional[ProgressCallback] = None,
    config: Optional[ReplayConfig] = None,
) -> DepthDataset:
    """
    Parse an order-book CSV byte stream into a complete dataset.

    Line framing runs as a producer task feeding a bounded queue; record
    decoding consumes it in order. When the queue is full the producer
    suspends, so framing never runs ahead of decoding by more than
    ``queue_max_records`` lines.

    Args:
        chunks: Raw byte chunks of one CSV file, any sizes
        total_bytes: Known file size; estimated from the first chunk if None
        on_progress: Called with cumulative ParseProgress after each sub-batch
        config: Configuration; defaults when None

    Returns:
        DepthDataset with snapshots, depth series and binned history

    Raises:
        MissingColumnsError: Header lacks timestamps or every depth pair
        MalformedRecordError: A record lacks a timestamp
        LineTooLongError: No line terminator within the carry-over limit
        SourceReadError: The byte source failed mid-stream
        EmptyResultError: The stream decoded to zero snapshots
    """
    config = config or get_default_config()
    params = config.ingest

    framer = LineFramer(total_bytes=total_bytes, params=params, on_progress=on_progress)
    decoder = RecordDecoder(params.max_line_chars)
    aggregator = DepthAggregator(config.history.target_bins, params.snapshot_log_every)
    queue: asyncio.Queue = asyncio.Queue(maxsize=params.queue_max_records)

    async def produce() -> None:
        try:
            async for line in framer.frame(chunks):
                await queue.put(line)
        except Exception as e:
            await queue.put(e)
            return
        await queue.put(_END)

    logger.info("Starting CSV stream parsing", total_bytes=total_bytes)
    producer = asyncio.create_task(produce())

    try:
        while True:
            item = await queue.get()
            if item is _END:
                break
            if isinstance(item, BaseException):
                raise item

            snapshot = decoder.decode(item)
            if snapshot is not None:
                aggregator.add(snapshot)
            elif decoder.indices is not None and decoder.records_seen == 0:
                logger.info(
                    "Column indices built",
                    bid_levels=len(decoder.indices.bid),
                    ask_levels=len(decoder.indices.ask),
                )

        if not len(aggregator):
            raise EmptyResultError(lines_processed=framer.lines_processed)

        dataset = aggregator.finalize()

    except IngestError as e:
        log_ingest_outcome(logger, False, 0, str(e), {
            "error_type": type(e).__name__,
            "lines_processed": framer.lines_processed,
            "bytes_processed": framer.bytes_processed,
        })
        raise

    finally:
        if not producer.done():
            producer.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await producer

        aclose = getattr(chunks, "aclose", None)
        if aclose is not None:
            await aclose()
        if framer.decoder is not None:
            framer.decoder.reset()

    log_ingest_outcome(logger, True, dataset.total_ticks, "complete", {
        "history_points": len(dataset.history),
        **decoder.metrics.get_stats(),
    })
    return dataset


class ReplayEngine:
    """
    Coordinator for ingesting uploads and replaying stored sessions.

    Each call to ``ingest`` runs an independent pipeline; the only state
    shared between uploads is the session store.
    """

    def __init__(self, store: Optional[SessionStore] = None,
                 config: Optional[ReplayConfig] = None,
                 config_dir: Optional[Union[str, Path]] = None) -> None:
        """Initialize the replay engine."""
        if config is None:
            config = ConfigLoader.create(Path(config_dir) if config_dir else None).load_config()
        self.config = config
        self.store = store if store is not None else SessionStore(config.session.capacity)
        self.logger = logger

    async def ingest(
        self,
        chunks: AsyncIterable[bytes],
        *,
        total_bytes: Optional[int] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> UploadResult:
        """
        Parse one upload and store the resulting dataset.

        Returns:
            UploadResult with the new session id and tick count

        Raises:
            IngestError: Any terminal parse failure; nothing is stored
        """
        dataset = await parse_csv_stream(
            chunks,
            total_bytes=total_bytes,
            on_progress=on_progress,
            config=self.config,
        )
        session_id = self.store.create_session(dataset)
        return UploadResult(session_id=session_id, total_ticks=dataset.total_ticks)

    async def ingest_file(
        self,
        path: Union[str, Path],
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        on_progress: Optional[ProgressCallback] = None,
    ) -> UploadResult:
        """Ingest a CSV file from disk."""
        return await self.ingest(
            iter_file(path, chunk_size),
            total_bytes=file_size(path),
            on_progress=on_progress,
        )

    def snapshot_view(self, session_id: str, tick: int) -> Optional[SnapshotView]:
        """Depth-capped snapshot payload at a clamped tick."""
        return get_snapshot_view(self.store, session_id, tick, self.config.query.max_depth_levels)

    def history_view(self, session_id: str) -> Optional[HistoryView]:
        """Binned depth history payload."""
        return get_history_view(self.store, session_id)

"""
Line framing for streamed CSV bytes.

Raw chunks arrive in arbitrary sizes. They are decoded in streaming mode,
split on any line terminator, and re-emitted as complete text records; the
incomplete tail of each batch is carried into the next one.
"""

import asyncio
import codecs
import re
from collections.abc import AsyncIterable, AsyncIterator, Callable
from typing import Optional

import structlog

from ..config.defaults import IngestParams
from ..errors import IngestError, LineTooLongError, SourceReadError
from .encoding import resolve_decoder
from .models import ParseProgress

logger = structlog.get_logger(__name__)

_LINE_BREAK = re.compile(r"\r\n|\n|\r")

ProgressCallback = Callable[[ParseProgress], None]
DecoderFactory = Callable[[bytes, IngestParams], codecs.IncrementalDecoder]


def percent_complete(bytes_processed: int, total_bytes: int) -> int:
    """Whole-number completion percentage clamped to [0, 100]."""
    if total_bytes <= 0:
        return 0
    return max(0, min(100, bytes_processed * 100 // total_bytes))


class LineFramer:
    """
    Re-splits a byte stream into non-blank text lines.

    One instance serves exactly one parse operation: the decoder, the
    carry-over buffer and the progress counters are not restartable.
    """

    def __init__(
        self,
        total_bytes: Optional[int] = None,
        params: Optional[IngestParams] = None,
        on_progress: Optional[ProgressCallback] = None,
        decoder: Optional[codecs.IncrementalDecoder] = None,
        decoder_factory: DecoderFactory = resolve_decoder,
    ) -> None:
        self.params = params or IngestParams()
        self.total_bytes = total_bytes or 0
        self.on_progress = on_progress
        self.decoder = decoder
        self._decoder_factory = decoder_factory

        self.bytes_processed = 0
        self.lines_processed = 0
        self._carry = ""
        self._next_progress_log = self.params.progress_log_bytes

    def feed(self, batch: bytes, final: bool = False) -> list[str]:
        """
        Decode one batch and return the complete lines it finishes.

        Args:
            batch: Raw bytes, at most one sub-batch long
            final: True once the source is exhausted; flushes the decoder
                   and releases the carry-over as the last line

        Raises:
            LineTooLongError: If the carry-over grows past ``max_line_chars``
        """
        if self.decoder is None:
            raise RuntimeError("Decoder not initialized")

        parts = _LINE_BREAK.split(self._carry + self.decoder.decode(batch, final))
        self._carry = "" if final else parts.pop()

        if len(self._carry) > self.params.max_line_chars:
            raise LineTooLongError(
                "File has an extremely long line without line breaks or invalid format. "
                "Please ensure the CSV has proper line breaks (newlines).",
                buffered_chars=len(self._carry),
                limit=self.params.max_line_chars,
            )

        return [line for line in parts if line.strip()]

    async def frame(self, chunks: AsyncIterable[bytes]) -> AsyncIterator[str]:
        """
        Yield complete, non-blank text lines from a stream of byte chunks.

        Progress is reported after every sub-batch. Control is handed back
        to the event loop every ``yield_every_lines`` lines.

        Raises:
            LineTooLongError: If a line terminator never arrives
            SourceReadError: If the byte source fails mid-stream
        """
        batch_size = self.params.max_batch_bytes
        pending_yield = 0
        first = True

        async for chunk in self._read(chunks):
            if first:
                first = False
                # A caller-supplied decoder does not imply a known total.
                if not self.total_bytes:
                    self.total_bytes = len(chunk)
                logger.info("First chunk received", chunk_bytes=len(chunk),
                            total_bytes=self.total_bytes)
                if self.decoder is None:
                    self.decoder = self._decoder_factory(chunk, self.params)

            for offset in range(0, len(chunk), batch_size):
                batch = chunk[offset:offset + batch_size]
                for line in self.feed(batch):
                    self.lines_processed += 1
                    yield line
                    pending_yield += 1
                    if pending_yield >= self.params.yield_every_lines:
                        pending_yield = 0
                        await asyncio.sleep(0)

                self.bytes_processed += len(batch)
                self._report_progress()

        if self.decoder is None:
            return

        tail = self.feed(b"", final=True)
        for line in tail:
            self.lines_processed += 1
            yield line
        if tail:
            self._report_progress()

        logger.info(
            "Stream reading complete",
            bytes_processed=self.bytes_processed,
            lines_processed=self.lines_processed,
        )

    async def _read(self, chunks: AsyncIterable[bytes]) -> AsyncIterator[bytes]:
        iterator = chunks.__aiter__()
        while True:
            try:
                chunk = await iterator.__anext__()
            except StopAsyncIteration:
                return
            except IngestError:
                raise
            except Exception as e:
                raise SourceReadError(
                    f"Stream error: {e}",
                    bytes_received=self.bytes_processed,
                ) from e
            if chunk:
                yield chunk if isinstance(chunk, bytes) else bytes(chunk)

    def _report_progress(self) -> None:
        # An estimated total is raised once exceeded so every field stays monotonic.
        self.total_bytes = max(self.total_bytes, self.bytes_processed)
        progress = ParseProgress(
            bytes_processed=self.bytes_processed,
            total_bytes=self.total_bytes,
            lines_processed=self.lines_processed,
            percent_complete=percent_complete(self.bytes_processed, self.total_bytes),
        )

        if self.bytes_processed >= self._next_progress_log:
            step = self.params.progress_log_bytes
            self._next_progress_log = (self.bytes_processed // step + 1) * step
            logger.info(
                "Parse progress",
                percent=progress.percent_complete,
                lines=progress.lines_processed,
                bytes_processed=progress.bytes_processed,
                total_bytes=progress.total_bytes,
            )

        if self.on_progress is not None:
            self.on_progress(progress)

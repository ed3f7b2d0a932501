"""Async byte sources feeding the ingestion pipeline."""

import asyncio
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Union

DEFAULT_CHUNK_SIZE = 1024 * 1024


def file_size(path: Union[str, Path]) -> int:
    """Size of a file in bytes, used as the progress denominator."""
    return Path(path).stat().st_size


async def iter_file(path: Union[str, Path],
                    chunk_size: int = DEFAULT_CHUNK_SIZE) -> AsyncIterator[bytes]:
    """
    Read a file in chunks without blocking the event loop.

    The file is closed on every exit path, including when the consumer
    stops iterating early.
    """
    f = await asyncio.to_thread(open, Path(path), "rb")
    try:
        while True:
            chunk = await asyncio.to_thread(f.read, chunk_size)
            if not chunk:
                break
            yield chunk
    finally:
        f.close()


async def iter_bytes(data: bytes, chunk_size: int = DEFAULT_CHUNK_SIZE) -> AsyncIterator[bytes]:
    """Serve in-memory bytes as a chunked stream."""
    for offset in range(0, len(data), chunk_size):
        yield data[offset:offset + chunk_size]
        await asyncio.sleep(0)

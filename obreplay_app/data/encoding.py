"""
Character encoding detection for uploaded CSV bytes.

The encoding is chosen once, from a bounded sample of the first chunk, and
the resulting incremental decoder is reused for every later chunk.
"""

import codecs
from typing import Optional

import chardet
import structlog

from ..config.defaults import IngestParams
from ..errors import UnsupportedEncodingError

logger = structlog.get_logger(__name__)

DEFAULT_ENCODING = "utf-8"

# ASCII is a strict subset of UTF-8; bytes past the sample may not be ASCII.
_UTF8_ALIASES = {"ascii", "us-ascii", "utf-8", "utf8", "utf-8-sig"}


def detect_encoding(sample: bytes, min_confidence: float = 0.5) -> tuple[str, Optional[str], float]:
    """
    Run statistical charset detection over a byte sample.

    Args:
        sample: Leading bytes of the file
        min_confidence: Confidence that must be exceeded to trust the detection

    Returns:
        Tuple of (chosen encoding, detected encoding or None, confidence)
    """
    detected = chardet.detect(sample)
    detected_name = detected.get("encoding")
    confidence = detected.get("confidence") or 0.0

    encoding = detected_name.lower() if detected_name else DEFAULT_ENCODING
    if confidence <= min_confidence:
        encoding = DEFAULT_ENCODING

    return encoding, detected_name, confidence


def make_decoder(encoding: str) -> codecs.IncrementalDecoder:
    """
    Build a streaming decoder for ``encoding``.

    UTF-8 (and ASCII) decode through ``utf-8-sig`` so a leading byte order
    mark never reaches the header. Undecodable bytes become U+FFFD.

    Raises:
        LookupError: If the runtime has no codec for ``encoding``
    """
    name = "utf-8-sig" if encoding in _UTF8_ALIASES else encoding
    return codecs.getincrementaldecoder(name)(errors="replace")


def resolve_decoder(first_chunk: bytes,
                    params: Optional[IngestParams] = None) -> codecs.IncrementalDecoder:
    """
    Pick a text decoder from the first chunk of an upload.

    Args:
        first_chunk: First raw chunk from the byte source, any size
        params: Ingestion parameters (sample size and confidence threshold)

    Returns:
        Stateful incremental decoder to use in streaming mode
    """
    params = params or IngestParams()
    sample = first_chunk[:params.encoding_sample_bytes]
    encoding, detected, confidence = detect_encoding(sample, params.encoding_min_confidence)

    logger.info(
        "Detected encoding",
        detected=detected,
        confidence=confidence,
        using=encoding,
        sample_bytes=len(sample),
    )

    try:
        return make_decoder(encoding)
    except LookupError:
        degraded = UnsupportedEncodingError(encoding, fallback=DEFAULT_ENCODING)
        logger.warning(
            str(degraded),
            encoding=degraded.encoding,
            fallback=degraded.fallback,
        )
        return make_decoder(DEFAULT_ENCODING)

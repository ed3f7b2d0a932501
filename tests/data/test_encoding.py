"""Tests for encoding detection and decoder selection."""

import pytest

from obreplay_app.data import encoding
from obreplay_app.data.encoding import detect_encoding, make_decoder, resolve_decoder
from obreplay_app.config.defaults import IngestParams


def _fake_detect(result, calls=None):
    def _detect(sample):
        if calls is not None:
            calls.append(sample)
        return result
    return _detect


class TestDetectEncoding:
    """Test confidence thresholding of chardet results."""

    def test_high_confidence_uses_detected_name_lower_cased(self, monkeypatch):
        """Detected name is used when confidence exceeds the threshold."""
        monkeypatch.setattr(encoding.chardet, "detect",
                            _fake_detect({"encoding": "ISO-8859-1", "confidence": 0.9}))

        chosen, detected, confidence = detect_encoding(b"whatever")

        assert chosen == "iso-8859-1"
        assert detected == "ISO-8859-1"
        assert confidence == 0.9

    def test_low_confidence_defaults_to_utf8(self, monkeypatch):
        """Confidence at or below 0.5 falls back to UTF-8."""
        monkeypatch.setattr(encoding.chardet, "detect",
                            _fake_detect({"encoding": "windows-1252", "confidence": 0.5}))

        chosen, _, _ = detect_encoding(b"whatever")

        assert chosen == "utf-8"

    def test_no_detection_defaults_to_utf8(self, monkeypatch):
        """A None encoding from chardet means UTF-8."""
        monkeypatch.setattr(encoding.chardet, "detect",
                            _fake_detect({"encoding": None, "confidence": 0.0}))

        chosen, detected, _ = detect_encoding(b"")

        assert chosen == "utf-8"
        assert detected is None


class TestResolveDecoder:
    """Test decoder construction from the first chunk."""

    def test_ascii_sample_still_decodes_later_utf8(self):
        """An ASCII header must not lock the stream into a 7-bit codec."""
        decoder = resolve_decoder(b"ts_recv,ts_event,bid_px_00,bid_sz_00\n")

        assert decoder.decode("café".encode("utf-8"), False) == "café"

    def test_utf8_bom_is_stripped(self):
        """A UTF-8 byte order mark never reaches the header text."""
        data = b"\xef\xbb\xbfts_recv,ts_event\n"
        decoder = resolve_decoder(data)

        assert decoder.decode(data, False) == "ts_recv,ts_event\n"

    def test_detected_single_byte_encoding_is_used(self, monkeypatch):
        """A confident Latin-1 detection decodes 0xE9 as e-acute."""
        monkeypatch.setattr(encoding.chardet, "detect",
                            _fake_detect({"encoding": "ISO-8859-1", "confidence": 0.73}))

        decoder = resolve_decoder(b"caf\xe9")

        assert decoder.decode(b"caf\xe9", False) == "café"

    def test_unsupported_encoding_falls_back_to_utf8(self, monkeypatch):
        """An unknown codec name is recovered from, not raised."""
        monkeypatch.setattr(encoding.chardet, "detect",
                            _fake_detect({"encoding": "x-no-such-codec", "confidence": 0.99}))

        decoder = resolve_decoder(b"ts_recv")

        assert decoder.decode("é".encode("utf-8"), False) == "é"

    def test_sample_is_capped(self, monkeypatch):
        """Only the configured number of leading bytes is inspected."""
        calls = []
        monkeypatch.setattr(encoding.chardet, "detect",
                            _fake_detect({"encoding": "ascii", "confidence": 1.0}, calls))

        resolve_decoder(b"a" * (200 * 1024))
        resolve_decoder(b"a" * 100, IngestParams(encoding_sample_bytes=10))

        assert len(calls[0]) == 64 * 1024
        assert len(calls[1]) == 10


class TestMakeDecoder:
    """Test streaming decoder behaviour."""

    def test_streaming_mode_carries_partial_characters(self):
        """A multi-byte character split across calls decodes once complete."""
        decoder = make_decoder("utf-8")
        encoded = "€".encode("utf-8")

        assert decoder.decode(encoded[:1], False) == ""
        assert decoder.decode(encoded[1:], False) == "€"

    def test_invalid_bytes_are_replaced(self):
        """Undecodable bytes become U+FFFD instead of failing the parse."""
        decoder = make_decoder("utf-8")

        assert decoder.decode(b"a\xffb", True) == "a\ufffdb"

    def test_unknown_codec_raises_lookup_error(self):
        """make_decoder itself does not hide unknown codecs."""
        with pytest.raises(LookupError):
            make_decoder("x-no-such-codec")

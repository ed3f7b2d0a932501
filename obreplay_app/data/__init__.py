"""
Data ingestion module.

Handles encoding detection, line framing and record decoding for uploaded
order-book CSV streams, plus the immutable models they produce.
"""

"""
Stream Module
=============

Frame ingestion, storage and query components.

This module provides the ingestion layer:
    - FrameBuffer: Thread-safe SPSC queue (unbounded, or drop-oldest when bounded)
    - FrameStore: Append-only indexed frame storage
    - RangeIndexer: Time interval to row mapping
    - CaptureSession: Buffer + store + classifier query surface
    - FrameConsumer: WebSocket client with validation and reconnection
    - TraceReplayer: JSON Lines trace replay on a producer thread

Example:
    from nfc_stream.stream import CaptureSession, TraceReplayer

    session = CaptureSession()
    replayer = TraceReplayer("capture.jsonl", session.buffer)
    replayer.start()

    # Periodic refresh
    session.refresh()
    rows = session.rows(offset=0, limit=50)
"""

from nfc_stream.stream.buffer import FrameBuffer
from nfc_stream.stream.store import FrameStore
from nfc_stream.stream.range_index import RangeIndexer, RangeSelection
from nfc_stream.stream.session import CaptureSession
from nfc_stream.stream.consumer import FrameConsumer, FrameConsumerMetrics
from nfc_stream.stream.replay import TraceFormatError, TraceReplayer, read_trace


__all__ = [
    "FrameBuffer",
    "FrameStore",
    "RangeIndexer",
    "RangeSelection",
    "CaptureSession",
    "FrameConsumer",
    "FrameConsumerMetrics",
    "TraceFormatError",
    "TraceReplayer",
    "read_trace",
]

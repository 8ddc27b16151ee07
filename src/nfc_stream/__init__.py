"""
NFC Stream
==========

Protocol event classification for decoded NFC radio frames.

This package ingests a live or replayed stream of decoded NFC frames,
stores them with stable row indices, and labels each row with a protocol
event (REQA, SAK, ATS, S(Deselect), ...) by matching command bytes against
per-technology rule tables and correlating poll/listen pairs.

Components:
    - models: Frame model and input/output schemas
    - classify: Stateless event classifier and label formatting
    - stream: Ingestion buffer, frame store, range indexer, capture session,
      WebSocket consumer and trace replay

Example:
    from nfc_stream.stream import CaptureSession
    from nfc_stream.classify import classify

    session = CaptureSession()
    session.append(frame)
    session.refresh()
    print(session.row(0).event)
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]

"""
Capture Session
===============

Read-only query surface over one capture.

The session owns the ingestion buffer and the frame store of the current
capture. The producer side only calls append(); the consumer side calls
refresh() periodically to move pending frames into the store, and reads
labeled rows for presentation. reset() starts a new capture (live session
or file load).
"""

import logging
from typing import List, Optional

from nfc_stream.classify import TimeFormat, classify, frame_data, frame_time
from nfc_stream.models.frame import NfcFrame
from nfc_stream.models.row import RangeResult, StreamRow
from nfc_stream.stream.buffer import FrameBuffer
from nfc_stream.stream.range_index import RangeIndexer
from nfc_stream.stream.store import FrameStore


logger = logging.getLogger(__name__)


class CaptureSession:
    """
    Buffer, store and classifier wired together.

    Attributes:
        buffer: Ingestion buffer (producer side)
        store: Frame store (consumer side)
        indexer: Range indexer over the store
        time_format: Display mode of the time column

    Example:
        session = CaptureSession()

        # Capture thread
        session.append(frame)

        # Refresh timer
        if session.refresh():
            for row in session.rows(offset=0, limit=100):
                print(row.event)
    """

    def __init__(
        self,
        buffer: Optional[FrameBuffer] = None,
        store: Optional[FrameStore] = None,
        time_format: TimeFormat = TimeFormat.ELAPSED,
    ) -> None:
        self.buffer = buffer if buffer is not None else FrameBuffer()
        self.store = store if store is not None else FrameStore()
        self.indexer = RangeIndexer(self.store)
        self._time_format = TimeFormat(time_format)

    @property
    def time_format(self) -> TimeFormat:
        return self._time_format

    @time_format.setter
    def time_format(self, value: TimeFormat) -> None:
        self._time_format = TimeFormat(value)
        logger.info(f"Time format set to {self._time_format.value}")

    # -------------------------------------------------------------------------
    # Producer side
    # -------------------------------------------------------------------------

    def append(self, frame: NfcFrame) -> bool:
        return self.buffer.append(frame)

    # -------------------------------------------------------------------------
    # Consumer side
    # -------------------------------------------------------------------------

    def refresh(self) -> int:
        """
        Move pending frames into the store.

        Returns:
            Number of rows added.
        """
        if not self.buffer.has_pending():
            return 0

        frames, generation = self.buffer.drain_for(self.store)
        added = self.store.append_batch(frames, generation=generation)

        if added:
            logger.debug(f"Stored {added} frames, total rows {self.store.row_count()}")

        return added

    def reset(self) -> None:
        """Discard queued and stored frames."""
        self.buffer.reset(self.store)
        logger.info("Capture session reset")

    def row_count(self) -> int:
        return self.store.row_count()

    def frame_at(self, row: int) -> NfcFrame:
        return self.store.frame_at(row)

    def range_query(self, start: float, end: float) -> List[int]:
        return self.store.range_query(start, end)

    def range_result(self, start: float, end: float) -> RangeResult:
        """Rows inside [start, end] with their first/last row and generation."""
        generation = self.store.generation
        rows = self.store.range_query(start, end)
        return RangeResult(
            start=start,
            end=end,
            rows=rows,
            first=rows[0] if rows else None,
            last=rows[-1] if rows else None,
            generation=generation,
        )

    def row(self, row: int) -> StreamRow:
        """
        Labeled row for presentation.

        Raises:
            IndexError: If row is outside the store
        """
        frame = self.store.frame_at(row)
        previous = self.store.get(row - 1) if row > 0 else None

        event, flags, rate, delta, tech = classify(frame, previous)

        return StreamRow(
            index=row,
            time=frame_time(frame, self._time_format),
            delta=delta,
            rate=rate,
            tech=tech,
            event=event,
            flags=flags,
            data=frame_data(frame),
        )

    def rows(self, offset: int = 0, limit: Optional[int] = None) -> List[StreamRow]:
        """Labeled rows starting at offset, at most limit of them."""
        count = self.store.row_count()
        start = max(offset, 0)
        stop = count if limit is None else min(count, start + max(limit, 0))
        return [self.row(i) for i in range(start, stop)]

    def metrics(self) -> dict:
        """Session metrics for observability."""
        return {
            "rows": self.store.row_count(),
            "generation": self.store.generation,
            "time_format": self._time_format.value,
            **{f"buffer_{k}": v for k, v in self.buffer.metrics().items()},
        }

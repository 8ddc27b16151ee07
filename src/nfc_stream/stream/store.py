"""
Frame Store
===========

Append-only, indexed collection of stored frames.

Rows are numbered from 0 in insertion order and never renumbered. The store
only grows, through the drain path, or empties completely on reset. Each
reset bumps a generation counter so results computed against an earlier
capture can be recognized as stale.
"""

import logging
import threading
from typing import Iterable, List, Optional

from nfc_stream.models.frame import NfcFrame


logger = logging.getLogger(__name__)


class FrameStore:
    """
    Ordered frame storage with stable row indices.

    Attributes:
        generation: Number of resets performed so far

    Example:
        store = FrameStore()
        store.append_batch(buffer.drain())

        for row in store.range_query(0.0, 1.5):
            print(store.frame_at(row))
    """

    def __init__(self) -> None:
        self._frames: List[NfcFrame] = []
        self._lock = threading.Lock()
        self._generation: int = 0

    @property
    def generation(self) -> int:
        """Reset counter, incremented on every reset."""
        return self._generation

    def append_batch(
        self,
        frames: Iterable[NfcFrame],
        generation: Optional[int] = None,
    ) -> int:
        """
        Store frames under the next sequential row indices.

        Args:
            frames: Frames in arrival order
            generation: If given, the batch is discarded when the store was
                reset since this generation was read

        Returns:
            Number of rows added.
        """
        with self._lock:
            if generation is not None and generation != self._generation:
                logger.debug(
                    f"Discarding batch from generation {generation}, "
                    f"store is at {self._generation}"
                )
                return 0

            start = len(self._frames)
            for frame in frames:
                self._frames.append(frame.with_index(len(self._frames)))

            return len(self._frames) - start

    def row_count(self) -> int:
        return len(self._frames)

    def frame_at(self, row: int) -> NfcFrame:
        """
        Frame stored at a row.

        Raises:
            IndexError: If row is outside [0, row_count)
        """
        if row < 0 or row >= len(self._frames):
            raise IndexError(f"Row {row} out of range (rows: {len(self._frames)})")
        return self._frames[row]

    def get(self, row: int) -> Optional[NfcFrame]:
        """Frame stored at a row, or None if out of range."""
        if 0 <= row < len(self._frames):
            return self._frames[row]
        return None

    def range_query(self, start: float, end: float) -> List[int]:
        """
        Rows whose frame lies entirely inside [start, end].

        Args:
            start: Interval start in seconds (inclusive)
            end: Interval end in seconds (inclusive)

        Returns:
            Matching row indices in ascending order.
        """
        return [
            row
            for row, frame in enumerate(self._frames)
            if frame.time_start >= start and frame.time_end <= end
        ]

    def reset(self) -> None:
        """Remove all rows. Row numbering restarts at 0."""
        with self._lock:
            self._frames = []
            self._generation += 1

    def __len__(self) -> int:
        return len(self._frames)

"""
Range Indexer
=============

Correlates the frame store with time-domain views.

A timing or signal view selects a time interval; the indexer turns it into
the rows that lie inside it, and turns a row selection back into the time
span it covers. It keeps no state of its own beyond the store reference.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from nfc_stream.models.frame import NfcFrame
from nfc_stream.stream.store import FrameStore


@dataclass(frozen=True, slots=True)
class RangeSelection:
    """
    Contiguous row span covering a time interval.

    Attributes:
        first: First row inside the interval
        last: Last row inside the interval
        generation: Store generation the rows refer to
    """

    first: int
    last: int
    generation: int

    def __len__(self) -> int:
        return self.last - self.first + 1


class RangeIndexer:
    """
    Time interval to row mapping over a FrameStore.

    Example:
        indexer = RangeIndexer(store)
        selection = indexer.select(0.10, 0.25)
        if selection and indexer.is_current(selection):
            highlight(selection.first, selection.last)
    """

    def __init__(self, store: FrameStore) -> None:
        self.store = store

    def rows(self, start: float, end: float) -> List[int]:
        """Rows whose frame lies entirely inside [start, end], ascending."""
        return self.store.range_query(start, end)

    def select(self, start: float, end: float) -> Optional[RangeSelection]:
        """
        Row span from the first to the last row inside [start, end].

        Returns:
            RangeSelection, or None if no frame lies inside the interval.
        """
        generation = self.store.generation
        rows = self.store.range_query(start, end)
        if not rows:
            return None
        return RangeSelection(first=rows[0], last=rows[-1], generation=generation)

    def is_current(self, selection: RangeSelection) -> bool:
        """False once the store has been reset after the selection was made."""
        return selection.generation == self.store.generation

    def time_span(self, rows: Iterable[int]) -> Optional[Tuple[float, float]]:
        """
        Time interval covered by a set of rows.

        Rows outside the store are ignored.

        Returns:
            (earliest time_start, latest time_end), or None for no valid rows.
        """
        start: Optional[float] = None
        end: Optional[float] = None

        for row in rows:
            frame = self.store.get(row)
            if frame is None:
                continue
            if start is None or frame.time_start < start:
                start = frame.time_start
            if end is None or frame.time_end > end:
                end = frame.time_end

        if start is None or end is None:
            return None
        return start, end

    def exchange_at(self, row: int) -> List[NfcFrame]:
        """
        Request/response pair around a row.

        A poll row followed by a listen row, or a listen row preceded by a
        poll row, gives [poll, listen]. Any other row gives just its frame.

        Raises:
            IndexError: If row is outside the store
        """
        frame = self.store.frame_at(row)

        if frame.is_poll_frame:
            following = self.store.get(row + 1)
            if following is not None and following.is_listen_frame:
                return [frame, following]

        elif frame.is_listen_frame:
            preceding = self.store.get(row - 1) if row > 0 else None
            if preceding is not None and preceding.is_poll_frame:
                return [preceding, frame]

        return [frame]

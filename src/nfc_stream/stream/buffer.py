"""
Frame Buffer
============

Thread-safe ingestion queue between the decoder and the frame store.

This module provides the FrameBuffer class, which receives decoded frames
from a single producer (capture thread, trace replayer or WebSocket
consumer) and hands them over in batches to a single consumer (the periodic
refresh of the capture session).

Design Rules:
    - One lock, held only while the queue is mutated
    - Never held during classification or store insertion
    - Unbounded by default; with maxsize > 0 drops oldest on overflow
    - Does NOT process or modify frames
"""

import logging
import threading
from collections import deque
from typing import TYPE_CHECKING, Deque, List, Optional, Tuple

from nfc_stream.models.frame import NfcFrame

if TYPE_CHECKING:
    from nfc_stream.stream.store import FrameStore


logger = logging.getLogger(__name__)


class FrameBuffer:
    """
    Single-producer / single-consumer frame queue.

    Frames placed here are not yet visible to row queries. Ownership moves
    to the FrameStore when the consumer drains the buffer.

    Attributes:
        maxsize: Maximum frames to queue (0 = unbounded)
        dropped_count: Number of frames dropped due to overflow

    Example:
        buffer = FrameBuffer()

        # Producer
        buffer.append(frame)

        # Consumer
        if buffer.has_pending():
            store.append_batch(buffer.drain())
    """

    def __init__(self, maxsize: int = 0) -> None:
        """
        Initialize frame buffer.

        Args:
            maxsize: Maximum frames to queue. 0 means unbounded.
        """
        if maxsize < 0:
            raise ValueError("maxsize must be >= 0")

        self._maxsize = maxsize
        self._queue: Deque[NfcFrame] = deque()
        self._lock = threading.Lock()
        self._dropped_count: int = 0
        self._total_appended: int = 0

    @property
    def maxsize(self) -> int:
        """Maximum buffer size (0 = unbounded)."""
        return self._maxsize

    @property
    def size(self) -> int:
        """Current number of queued frames."""
        with self._lock:
            return len(self._queue)

    @property
    def dropped_count(self) -> int:
        """Number of frames dropped due to overflow."""
        return self._dropped_count

    @property
    def total_appended(self) -> int:
        """Total frames ever appended."""
        return self._total_appended

    def append(self, frame: NfcFrame) -> bool:
        """
        Queue a frame, dropping the oldest one if the buffer is bounded and full.

        Args:
            frame: Decoded frame

        Returns:
            True if queued without dropping, False if the oldest frame was dropped.
        """
        with self._lock:
            self._total_appended += 1
            dropped = False

            if self._maxsize and len(self._queue) >= self._maxsize:
                self._queue.popleft()
                self._dropped_count += 1
                dropped = True

            self._queue.append(frame)

        if dropped:
            logger.warning(
                f"Buffer full, dropped oldest frame. "
                f"Total dropped: {self._dropped_count}"
            )

        return not dropped

    def has_pending(self) -> bool:
        """Whether frames are waiting to be drained."""
        with self._lock:
            return len(self._queue) > 0

    def drain(self) -> List[NfcFrame]:
        """
        Remove and return all queued frames in arrival order.

        Returns:
            Queued frames, possibly empty.
        """
        with self._lock:
            frames = list(self._queue)
            self._queue.clear()
        return frames

    def drain_for(self, store: "FrameStore") -> Tuple[List[NfcFrame], int]:
        """
        Drain the queue together with the store generation it belongs to.

        Both are read under the lock that reset() holds while clearing the
        store, so the returned frames always belong to the returned
        generation.

        Args:
            store: FrameStore the frames will be appended to

        Returns:
            (queued frames in arrival order, store generation)
        """
        with self._lock:
            frames = list(self._queue)
            self._queue.clear()
            generation = store.generation
        return frames, generation

    def reset(self, store: Optional["FrameStore"] = None) -> int:
        """
        Clear queued frames and, if given, the frame store in one step.

        Holds the same lock as append and drain, so a concurrent append
        lands either before the reset (and is discarded) or after it.

        Args:
            store: FrameStore to clear together with the queue

        Returns:
            Number of queued frames discarded.
        """
        with self._lock:
            cleared = len(self._queue)
            self._queue.clear()
            if store is not None:
                store.reset()

        logger.debug(f"Buffer reset, discarded {cleared} queued frames")
        return cleared

    def metrics(self) -> dict:
        """
        Get buffer metrics for observability.

        Returns:
            Dict with size, maxsize, dropped_count, total_appended
        """
        return {
            "size": self.size,
            "maxsize": self._maxsize,
            "dropped_count": self._dropped_count,
            "total_appended": self._total_appended,
        }

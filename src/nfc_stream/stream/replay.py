"""
Trace Replay
============

Replays a recorded capture into a FrameBuffer from a producer thread.

Trace files are JSON Lines: one FrameMessage object per line. Blank lines
and lines starting with '#' are skipped. Malformed lines are logged and
counted, or raise TraceFormatError when strict.

Example:
    replayer = TraceReplayer("capture.jsonl", session.buffer)
    session.reset()
    replayer.start()
    ...
    replayer.join()
"""

import logging
import threading
import time
from pathlib import Path
from typing import Iterator, Optional, Union

from pydantic import ValidationError

from nfc_stream.models.frame import NfcFrame
from nfc_stream.models.input import FrameMessage
from nfc_stream.stream.buffer import FrameBuffer


logger = logging.getLogger(__name__)


class TraceFormatError(ValueError):
    """Malformed line in a trace file."""

    def __init__(self, path: str, line_number: int, reason: str) -> None:
        super().__init__(f"{path}:{line_number}: {reason}")
        self.path = path
        self.line_number = line_number


def read_trace(
    path: Union[str, Path],
    strict: bool = False,
    stats: Optional[dict] = None,
) -> Iterator[NfcFrame]:
    """
    Yield frames from a JSON Lines trace file.

    Args:
        path: Trace file path
        strict: Raise TraceFormatError on the first malformed line
        stats: Optional dict updated with "lines" and "parse_errors" counts

    Raises:
        OSError: If the file cannot be read
        TraceFormatError: On a malformed line when strict
    """
    if stats is None:
        stats = {}
    stats.setdefault("lines", 0)
    stats.setdefault("parse_errors", 0)

    with open(path, "r", encoding="utf-8") as f:
        for line_number, line in enumerate(f, start=1):
            text = line.strip()
            if not text or text.startswith("#"):
                continue

            stats["lines"] += 1
            try:
                message = FrameMessage.model_validate_json(text)
            except ValidationError as e:
                if strict:
                    raise TraceFormatError(str(path), line_number, e.errors()[0]["msg"]) from e
                stats["parse_errors"] += 1
                logger.warning(f"Skipping malformed trace line {path}:{line_number}")
                continue

            yield message.to_frame()


class TraceReplayer:
    """
    Pushes the frames of a trace file into a buffer on a daemon thread.

    Attributes:
        path: Trace file path
        buffer: Destination buffer
        realtime: Pace frames by their time_start instead of as fast as possible
        frames_replayed: Frames pushed so far
        parse_errors: Malformed lines skipped
    """

    def __init__(
        self,
        path: Union[str, Path],
        buffer: FrameBuffer,
        realtime: bool = False,
    ) -> None:
        self.path = Path(path)
        self.buffer = buffer
        self.realtime = realtime

        self.frames_replayed: int = 0
        self.parse_errors: int = 0
        self.error: Optional[Exception] = None

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start replaying in the background."""
        if self.running:
            raise RuntimeError("Replay already running")

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            name="trace_replay",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        self._stop_event.set()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def replay(self) -> int:
        """
        Replay synchronously on the calling thread.

        Returns:
            Number of frames pushed.
        """
        stats: dict = {}
        start_wall = time.monotonic()
        first_time: Optional[float] = None

        logger.info(f"Replaying trace {self.path} (realtime={self.realtime})")

        try:
            for frame in read_trace(self.path, stats=stats):
                if self._stop_event.is_set():
                    break

                if self.realtime:
                    if first_time is None:
                        first_time = frame.time_start
                    delay = (frame.time_start - first_time) - (time.monotonic() - start_wall)
                    if delay > 0 and self._stop_event.wait(delay):
                        break

                self.buffer.append(frame)
                self.frames_replayed += 1
        finally:
            self.parse_errors = stats.get("parse_errors", 0)

        logger.info(
            f"Replay finished: {self.frames_replayed} frames, "
            f"{self.parse_errors} malformed lines"
        )
        return self.frames_replayed

    def _run(self) -> None:
        try:
            self.replay()
        except OSError as e:
            self.error = e
            logger.error(f"Replay of {self.path} failed: {e}")

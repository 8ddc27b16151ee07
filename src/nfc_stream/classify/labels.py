"""
Auxiliary Labels
================

Formatting of the non-event columns of a row: time, delta, rate,
technology, flag word and payload.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Optional

from nfc_stream.models.frame import NfcFrame, TechType


logger = logging.getLogger(__name__)


# Gaps below this are shown in microseconds
MICROSECONDS_THRESHOLD = 20e-3


class TimeFormat(str, Enum):
    """Display mode for the frame start time."""

    ELAPSED = "elapsed"
    DATETIME = "datetime"


def frame_time(frame: NfcFrame, time_format: TimeFormat = TimeFormat.ELAPSED) -> str:
    """
    Format the frame start time.

    ELAPSED shows seconds since capture start with microsecond precision.
    DATETIME shows the local wall-clock time with milliseconds, taken from
    the frame epoch timestamp. A timestamp the platform cannot convert falls
    back to the elapsed format.
    """
    if time_format == TimeFormat.DATETIME:
        try:
            epoch_seconds = int(frame.date_time)
            millis = int((frame.date_time - epoch_seconds) * 1e3)
            stamp = datetime.fromtimestamp(epoch_seconds).strftime("%y-%m-%d %H:%M:%S")
            return f"{stamp}.{millis:03d}"
        except (OverflowError, OSError, ValueError) as e:
            logger.warning(f"Unrepresentable date_time {frame.date_time!r}: {e}")

    return f"{frame.time_start:.6f}"


def frame_delta(frame: NfcFrame, previous: Optional[NfcFrame]) -> Optional[str]:
    """Gap between the end of the previous frame and the start of this one."""
    if previous is None:
        return None

    elapsed = frame.time_start - previous.time_end

    if elapsed < MICROSECONDS_THRESHOLD:
        return f"{elapsed * 1e6:.0f} us"

    if elapsed < 1:
        return f"{elapsed * 1e3:.0f} ms"

    return f"{elapsed:.0f} s"


def frame_rate(frame: NfcFrame) -> Optional[str]:
    """Bit rate in kbps, for poll and listen frames only."""
    if frame.is_poll_frame or frame.is_listen_frame:
        return f"{frame.rate / 1000:.0f}k"
    return None


def frame_tech(frame: NfcFrame) -> Optional[str]:
    if frame.tech == TechType.NONE:
        return None
    return frame.tech.value


def frame_flags(frame: NfcFrame) -> int:
    """Decoder flags in the high bits, direction code in the low byte."""
    return (int(frame.flags) << 8) | int(frame.frame_type)


def frame_data(frame: NfcFrame) -> str:
    return frame.data.hex(" ")

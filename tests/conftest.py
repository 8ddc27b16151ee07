"""
Test Configuration
==================

Pytest fixtures and test configuration for the NFC stream package.
"""

import pytest

from nfc_stream.models.frame import FrameFlags, FrameType, NfcFrame, TechType


def make_frame(
    data=b"",
    frame_type=FrameType.POLL,
    tech=TechType.NFC_A,
    time_start=0.0,
    time_end=None,
    flags=FrameFlags.NONE,
    rate=105938,
    date_time=0.0,
) -> NfcFrame:
    """Build a frame with sensible defaults for tests."""
    return NfcFrame(
        tech=tech,
        frame_type=frame_type,
        data=bytes(data),
        time_start=time_start,
        time_end=time_start if time_end is None else time_end,
        date_time=date_time,
        rate=rate,
        flags=flags,
    )


def poll(data, tech=TechType.NFC_A, **kwargs) -> NfcFrame:
    return make_frame(data, FrameType.POLL, tech, **kwargs)


def listen(data, tech=TechType.NFC_A, **kwargs) -> NfcFrame:
    return make_frame(data, FrameType.LISTEN, tech, **kwargs)


@pytest.fixture
def frame_factory():
    """Provide the frame builder."""
    return make_frame


@pytest.fixture
def anticollision_frames():
    """Provide a short NfcA anticollision exchange."""
    return [
        make_frame(frame_type=FrameType.CARRIER_ON, tech=TechType.NONE, time_start=0.0),
        poll([0x26], time_start=0.010, time_end=0.0101),
        listen([0x04, 0x00], time_start=0.0102, time_end=0.0104),
        poll([0x93, 0x20], time_start=0.0110, time_end=0.0112),
        listen([0x11, 0x22, 0x33, 0x44, 0x44], time_start=0.0113, time_end=0.0118),
        poll([0x93, 0x70, 0x11, 0x22, 0x33, 0x44, 0x44, 0xAB, 0xCD], time_start=0.0120, time_end=0.0128),
        listen([0x20, 0xFC, 0x70], time_start=0.0129, time_end=0.0132),
    ]


@pytest.fixture
def sample_frame_message():
    """Provide a sample decoded frame message."""
    return {
        "tech": "NfcA",
        "type": "poll",
        "data": "93 20",
        "time_start": 0.012345,
        "time_end": 0.012532,
        "date_time": 1707321234.567,
        "rate": 105938,
        "flags": ["crc_error"],
    }

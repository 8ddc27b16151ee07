"""
Data Models
===========

Frame and output models for the NFC stream classifier.

Models:
    Frame:
        - NfcFrame: Immutable decoded frame
        - TechType, FrameType, FrameFlags: Frame attribute enums

    Input:
        - FrameMessage: Schema for decoded frame messages

    Output:
        - StreamRow: One labeled row
        - RangeResult: Rows inside a time interval
"""

from nfc_stream.models.frame import FrameFlags, FrameType, NfcFrame, TechType
from nfc_stream.models.input import FrameMessage
from nfc_stream.models.row import RangeResult, StreamRow

__all__ = [
    # Frame
    "NfcFrame",
    "TechType",
    "FrameType",
    "FrameFlags",
    # Input
    "FrameMessage",
    # Output
    "StreamRow",
    "RangeResult",
]

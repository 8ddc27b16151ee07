"""
NFC Frame Model
===============

Internal frame representation for the ingestion pipeline.

A frame is one decoded radio exchange unit: a poll command from the reader,
a listen response from the tag, or a carrier on/off event. Frames are
produced upstream by the demodulator and are immutable from the moment they
are created; the only field assigned later is the row index, which the
FrameStore sets on insertion by producing a new instance.

Numeric codes:
    FrameType values are the direction codes packed into the low byte of
    the row flag word. FrameFlags values are packed into the bits above it.
"""

from dataclasses import dataclass, field, replace
from enum import Enum, IntEnum, IntFlag
from typing import Optional


class TechType(str, Enum):
    """NFC air-interface technology of a frame."""

    NONE = "None"
    NFC_A = "NfcA"
    NFC_B = "NfcB"
    NFC_F = "NfcF"
    NFC_V = "NfcV"


class FrameType(IntEnum):
    """
    Frame direction.

    Attributes:
        CARRIER_OFF: RF field dropped
        CARRIER_ON: RF field detected
        POLL: Reader to tag command
        LISTEN: Tag to reader response
    """

    CARRIER_OFF = 0
    CARRIER_ON = 1
    POLL = 2
    LISTEN = 3


class FrameFlags(IntFlag):
    """Decoder status bits attached to a frame."""

    NONE = 0x00
    SHORT_FRAME = 0x01
    ENCRYPTED = 0x02
    TRUNCATED = 0x08
    PARITY_ERROR = 0x10
    CRC_ERROR = 0x20
    SYNC_ERROR = 0x40


@dataclass(frozen=True, slots=True)
class NfcFrame:
    """
    Decoded NFC frame.

    Attributes:
        tech: Technology variant (NfcA, NfcB, NfcF, NfcV or NONE)
        frame_type: Direction (poll, listen, carrier on/off)
        data: Payload octets
        time_start: Start of the frame in seconds from capture start
        time_end: End of the frame in seconds from capture start
        date_time: Epoch timestamp, microseconds in the fractional part
        rate: Bit rate in bits/second
        flags: Decoder status bits
        index: Row index, -1 until stored
    """

    tech: TechType
    frame_type: FrameType
    data: bytes = b""
    time_start: float = 0.0
    time_end: float = 0.0
    date_time: float = 0.0
    rate: int = 0
    flags: FrameFlags = FrameFlags.NONE
    index: int = field(default=-1, compare=False)

    def __post_init__(self) -> None:
        if self.time_end < self.time_start:
            raise ValueError(
                f"time_end ({self.time_end}) must be >= time_start ({self.time_start})"
            )

    @property
    def length(self) -> int:
        return len(self.data)

    def byte_at(self, position: int) -> Optional[int]:
        """Payload octet at position, or None if the payload is too short."""
        if 0 <= position < len(self.data):
            return self.data[position]
        return None

    @property
    def is_poll_frame(self) -> bool:
        return self.frame_type == FrameType.POLL

    @property
    def is_listen_frame(self) -> bool:
        return self.frame_type == FrameType.LISTEN

    @property
    def is_carrier_on(self) -> bool:
        return self.frame_type == FrameType.CARRIER_ON

    @property
    def is_carrier_off(self) -> bool:
        return self.frame_type == FrameType.CARRIER_OFF

    @property
    def is_encrypted(self) -> bool:
        return bool(self.flags & FrameFlags.ENCRYPTED)

    @property
    def has_crc_error(self) -> bool:
        return bool(self.flags & FrameFlags.CRC_ERROR)

    @property
    def has_parity_error(self) -> bool:
        return bool(self.flags & FrameFlags.PARITY_ERROR)

    @property
    def has_sync_error(self) -> bool:
        return bool(self.flags & FrameFlags.SYNC_ERROR)

    def with_index(self, index: int) -> "NfcFrame":
        """Copy of this frame carrying the given row index."""
        return replace(self, index=index)

    def __repr__(self) -> str:
        """Compact repr with the payload in hex."""
        return (
            f"NfcFrame(index={self.index}, tech={self.tech.value}, "
            f"type={self.frame_type.name}, data={self.data.hex(' ')}, "
            f"t={self.time_start:.6f})"
        )

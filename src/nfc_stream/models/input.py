"""
Input Message Schema
====================

This module defines the Pydantic model for decoded frame messages received
from the demodulator feed (WebSocket or JSON Lines trace file).

Input Contract (from the decoder):
    {
        "tech": "NfcA",
        "type": "poll",
        "data": "93 20",
        "time_start": 0.012345,
        "time_end": 0.012532,
        "date_time": 1707321234.567123,
        "rate": 105938,
        "flags": ["crc_error"]
    }

Notes:
    - tech may be null for carrier events
    - data is a hex string (separators optional) or a list of octets
    - flags lists FrameFlags names, case-insensitive

Example:
    from nfc_stream.models.input import FrameMessage

    message = FrameMessage.model_validate_json(raw)
    frame = message.to_frame()
"""

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from nfc_stream.models.frame import FrameFlags, FrameType, NfcFrame, TechType


_FRAME_TYPES = {
    "carrier_off": FrameType.CARRIER_OFF,
    "carrier_on": FrameType.CARRIER_ON,
    "poll": FrameType.POLL,
    "listen": FrameType.LISTEN,
}

# 3000-01-01T00:00:00Z, inside the datetime range on every platform
MAX_DATE_TIME = 32503680000.0

_FLAG_NAMES = {
    flag.name.lower(): flag
    for flag in FrameFlags
    if flag.name and flag is not FrameFlags.NONE
}


class FrameMessage(BaseModel):
    """
    Schema for decoded frame messages.

    Any message that does not conform to this schema is rejected with a
    pydantic ValidationError before it reaches the ingestion buffer.

    Attributes:
        tech: Technology name, or None for carrier events
        type: Frame direction
        data: Payload octets
        time_start: Frame start in seconds from capture start
        time_end: Frame end in seconds from capture start
        date_time: Epoch timestamp of the frame
        rate: Bit rate in bits/second
        flags: Decoder status flag names
    """

    tech: Optional[Literal["NfcA", "NfcB", "NfcF", "NfcV"]] = Field(
        default=None,
        description="NFC technology (null for carrier events)",
    )

    type: Literal["poll", "listen", "carrier_on", "carrier_off"] = Field(
        ...,
        description="Frame direction",
    )

    data: bytes = Field(
        default=b"",
        description="Payload as hex string or list of octets",
    )

    time_start: float = Field(
        ...,
        ge=0,
        description="Frame start in seconds from capture start",
    )

    time_end: float = Field(
        ...,
        ge=0,
        description="Frame end in seconds from capture start",
    )

    date_time: float = Field(
        default=0.0,
        ge=0,
        le=MAX_DATE_TIME,
        description="Epoch timestamp in seconds",
    )

    rate: int = Field(
        default=0,
        ge=0,
        description="Bit rate in bits/second",
    )

    flags: List[str] = Field(
        default_factory=list,
        description="Decoder status flags (crc_error, parity_error, ...)",
    )

    @field_validator("data", mode="before")
    @classmethod
    def parse_data(cls, v: Union[str, bytes, List[int]]) -> bytes:
        """Accept hex strings and octet lists."""
        if isinstance(v, bytes):
            return v
        if isinstance(v, str):
            cleaned = v.replace(" ", "").replace(":", "")
            try:
                return bytes.fromhex(cleaned)
            except ValueError:
                raise ValueError(f"Invalid hex payload: {v!r}")
        if isinstance(v, list):
            if any(not isinstance(b, int) or not 0 <= b <= 255 for b in v):
                raise ValueError("Payload octets must be integers in 0..255")
            return bytes(v)
        raise ValueError(f"Unsupported payload type: {type(v).__name__}")

    @field_validator("flags")
    @classmethod
    def validate_flags(cls, v: List[str]) -> List[str]:
        """Ensure every flag name is known."""
        normalized = [name.lower() for name in v]
        unknown = [name for name in normalized if name not in _FLAG_NAMES]
        if unknown:
            raise ValueError(f"Unknown frame flags: {unknown}")
        return normalized

    @model_validator(mode="after")
    def validate_times(self) -> "FrameMessage":
        """Ensure the frame does not end before it starts."""
        if self.time_end < self.time_start:
            raise ValueError("time_end must be >= time_start")
        return self

    def to_frame(self) -> NfcFrame:
        """Build the internal NfcFrame for this message."""
        flags = FrameFlags.NONE
        for name in self.flags:
            flags |= _FLAG_NAMES[name]

        return NfcFrame(
            tech=TechType(self.tech) if self.tech else TechType.NONE,
            frame_type=_FRAME_TYPES[self.type],
            data=self.data,
            time_start=self.time_start,
            time_end=self.time_end,
            date_time=self.date_time,
            rate=self.rate,
            flags=flags,
        )

    class Config:
        """Pydantic model configuration."""

        json_schema_extra = {
            "example": {
                "tech": "NfcA",
                "type": "poll",
                "data": "93 20",
                "time_start": 0.012345,
                "time_end": 0.012532,
                "date_time": 1707321234.567123,
                "rate": 105938,
                "flags": [],
            }
        }

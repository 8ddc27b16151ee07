"""
Stream Row Models
=================

Output contract for one labeled row of the frame stream.

Output Contract:
    {
        "index": 12,
        "time": "0.012345",
        "delta": "86 us",
        "rate": "106k",
        "tech": "NfcA",
        "event": "SEL1",
        "flags": 2,
        "data": "93 20"
    }

Design Rules:
    - Plain string/int values only; presentation decides how to show them
    - Absent labels are null, never empty strings
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class StreamRow(BaseModel):
    """
    One classified frame, ready for presentation.

    Attributes:
        index: Stable 0-based row index
        time: Formatted start time (elapsed or date/time)
        delta: Gap to the previous frame
        rate: Bit rate in kbps
        tech: Technology name
        event: Protocol event label
        flags: Packed flag word (decoder flags << 8 | direction code)
        data: Payload as hex octets
    """

    index: int = Field(..., ge=0, description="Row index")
    time: str = Field(..., description="Formatted frame start time")
    delta: Optional[str] = Field(default=None, description="Gap to previous frame")
    rate: Optional[str] = Field(default=None, description="Bit rate label")
    tech: Optional[str] = Field(default=None, description="Technology label")
    event: Optional[str] = Field(default=None, description="Protocol event label")
    flags: int = Field(..., ge=0, description="Packed flag word")
    data: str = Field(default="", description="Payload hex octets")


class RangeResult(BaseModel):
    """
    Rows whose frames fall inside a time interval.

    Attributes:
        start: Interval start (seconds)
        end: Interval end (seconds)
        rows: Matching row indices in ascending order
        first: First matching row, if any
        last: Last matching row, if any
        generation: Store generation the rows belong to
    """

    start: float
    end: float
    rows: List[int] = Field(default_factory=list)
    first: Optional[int] = None
    last: Optional[int] = None
    generation: int = Field(..., ge=0)

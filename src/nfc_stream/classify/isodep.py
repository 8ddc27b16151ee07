"""
ISO-DEP Block Rules
===================

Generic ISO/IEC 14443-4 block recognition shared by NfcA and NfcB.

The PCB (first octet) is matched against an ordered list of mask rules.
Several masks overlap: S(Deselect) and S(WTX) are subsets of the S-Block
mask, R(ACK) and R(NACK) are subsets of the R-Block mask. Evaluation is
first-match-wins, so the list order decides the label.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from nfc_stream.models.frame import NfcFrame


@dataclass(frozen=True, slots=True)
class BlockRule:
    """
    One PCB mask rule.

    Matches when (pcb & mask) == value and min_length <= length <= max_length.
    A max_length of None means no upper bound.
    """

    mask: int
    value: int
    min_length: int
    max_length: Optional[int]
    label: str

    def matches(self, pcb: int, length: int) -> bool:
        if (pcb & self.mask) != self.value:
            return False
        if length < self.min_length:
            return False
        return self.max_length is None or length <= self.max_length


# Order matters, narrower masks first.
ISO_DEP_RULES: Tuple[BlockRule, ...] = (
    BlockRule(0xF7, 0xC2, 3, 4, "S(Deselect)"),
    BlockRule(0xF7, 0xF2, 3, 4, "S(WTX)"),
    BlockRule(0xF6, 0xA2, 3, 3, "R(ACK)"),
    BlockRule(0xF6, 0xB2, 3, 3, "R(NACK)"),
    BlockRule(0xE2, 0x02, 4, None, "I-Block"),
    BlockRule(0xE6, 0xA2, 3, 3, "R-Block"),
    BlockRule(0xC7, 0xC2, 3, 4, "S-Block"),
)


def iso_dep_event(frame: NfcFrame) -> Optional[str]:
    """
    Label an ISO-DEP block frame.

    Args:
        frame: Poll or listen frame

    Returns:
        Block label, or None if no rule matches or the frame is empty.
    """
    pcb = frame.byte_at(0)
    if pcb is None:
        return None

    for rule in ISO_DEP_RULES:
        if rule.matches(pcb, frame.length):
            return rule.label

    return None

"""
Event Classifier
================

Maps a frame and its immediate predecessor to a protocol event label.

The classifier is a set of pure functions. Adjacency is passed in by the
caller as the `previous` frame; nothing is remembered between calls, so the
label of row i depends only on rows i and i-1.

Dispatch:
    1. Carrier events are labeled RF-On / RF-Off regardless of technology
    2. Encrypted frames get no event label
    3. Technology specific rules (NfcA, NfcB, NfcF, NfcV)

Every rule that reads a payload octet goes through NfcFrame.byte_at, so a
truncated payload makes the rule a non-match instead of raising.
"""

from typing import NamedTuple, Optional

from nfc_stream.classify import tables
from nfc_stream.classify.isodep import iso_dep_event
from nfc_stream.classify.labels import frame_delta, frame_flags, frame_rate, frame_tech
from nfc_stream.models.frame import NfcFrame, TechType


class Classification(NamedTuple):
    """
    Classifier output for one frame.

    Attributes:
        event: Protocol event label
        flags: Packed flag word
        rate: Bit rate label
        delta: Gap to previous frame
        tech: Technology label
    """

    event: Optional[str]
    flags: int
    rate: Optional[str]
    delta: Optional[str]
    tech: Optional[str]


def _command_name(command: int) -> str:
    return f"CMD {command:02x}"


def event_nfca(frame: NfcFrame, previous: Optional[NfcFrame]) -> Optional[str]:
    """NfcA (ISO/IEC 14443-3A, MIFARE) event label."""
    if frame.is_poll_frame:
        command = frame.byte_at(0)
        if command is None:
            return None

        if command == tables.NFCA_HALT and frame.length == 4:
            return "HALT"

        # Protocol and Parameter Selection
        if (command & 0xF0) == 0xD0 and frame.length == 5:
            return "PPS"

        result = iso_dep_event(frame)
        if result:
            return result

        return tables.NFCA_COMMANDS.get(command)

    if previous is None or not previous.is_poll_frame:
        return None

    command = previous.byte_at(0)
    if command is None:
        return None

    if command in tables.NFCA_SELECT_COMMANDS:
        if frame.length == 3:
            return "SAK"
        if frame.length == 5:
            return "UID"

    if command == tables.NFCA_RATS and frame.byte_at(0) == frame.length - 2:
        return "ATS"

    result = iso_dep_event(frame)
    if result:
        return result

    return tables.NFCA_RESPONSES.get(command)


def event_nfcb(frame: NfcFrame, previous: Optional[NfcFrame]) -> Optional[str]:
    """NfcB (ISO/IEC 14443-3B) event label."""
    if frame.is_poll_frame:
        names = tables.NFCB_COMMANDS
    elif frame.is_listen_frame:
        names = tables.NFCB_RESPONSES
    else:
        return None

    result = iso_dep_event(frame)
    if result:
        return result

    command = frame.byte_at(0)
    if command is None:
        return None

    return names.get(command)


def event_nfcf(frame: NfcFrame, previous: Optional[NfcFrame]) -> Optional[str]:
    """NfcF (FeliCa) event label, keyed on the command code after the length octet."""
    command = frame.byte_at(1)
    if command is None:
        return None

    if frame.is_poll_frame:
        return tables.NFCF_COMMANDS.get(command) or _command_name(command)

    if frame.is_listen_frame:
        return tables.NFCF_RESPONSES.get(command)

    return None


def event_nfcv(frame: NfcFrame, previous: Optional[NfcFrame]) -> Optional[str]:
    """NfcV (ISO/IEC 15693) event label, keyed on the command code after the flags octet."""
    if not frame.is_poll_frame:
        return None

    command = frame.byte_at(1)
    if command is None:
        return None

    return tables.NFCV_COMMANDS.get(command) or _command_name(command)


_TECH_HANDLERS = {
    TechType.NFC_A: event_nfca,
    TechType.NFC_B: event_nfcb,
    TechType.NFC_F: event_nfcf,
    TechType.NFC_V: event_nfcv,
}


def frame_event(frame: NfcFrame, previous: Optional[NfcFrame] = None) -> Optional[str]:
    """
    Protocol event label for a frame.

    Args:
        frame: Frame to label
        previous: Frame stored immediately before it, if any

    Returns:
        Event label, or None when no rule matches.
    """
    if frame.is_carrier_on:
        return "RF-On"

    if frame.is_carrier_off:
        return "RF-Off"

    if frame.is_encrypted:
        return None

    handler = _TECH_HANDLERS.get(frame.tech)
    if handler is None:
        return None

    return handler(frame, previous)


def classify(frame: NfcFrame, previous: Optional[NfcFrame] = None) -> Classification:
    """
    Classify a frame against its predecessor.

    Never raises for any frame content; unmatched rules give None labels.

    Args:
        frame: Frame to classify
        previous: Frame at the preceding row, None for the first row

    Returns:
        Classification(event, flags, rate, delta, tech)
    """
    return Classification(
        event=frame_event(frame, previous),
        flags=frame_flags(frame),
        rate=frame_rate(frame),
        delta=frame_delta(frame, previous),
        tech=frame_tech(frame),
    )

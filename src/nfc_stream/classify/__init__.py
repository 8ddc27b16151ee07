"""
Classify Module
===============

Stateless protocol event classification for decoded NFC frames.

    - classify: Full row classification (event, flags, rate, delta, tech)
    - frame_event: Event label only
    - iso_dep_event: ISO-DEP block label shared by NfcA and NfcB
    - labels: Time, delta, rate, tech, flag word and payload formatting

Example:
    from nfc_stream.classify import classify

    event, flags, rate, delta, tech = classify(frame, previous)
"""

from nfc_stream.classify.events import Classification, classify, frame_event
from nfc_stream.classify.isodep import ISO_DEP_RULES, BlockRule, iso_dep_event
from nfc_stream.classify.labels import (
    TimeFormat,
    frame_data,
    frame_delta,
    frame_flags,
    frame_rate,
    frame_tech,
    frame_time,
)


__all__ = [
    "Classification",
    "classify",
    "frame_event",
    "BlockRule",
    "ISO_DEP_RULES",
    "iso_dep_event",
    "TimeFormat",
    "frame_data",
    "frame_delta",
    "frame_flags",
    "frame_rate",
    "frame_tech",
    "frame_time",
]

"""
Trace Replay Tests
==================

Tests for JSON Lines trace reading and the TraceReplayer thread.
"""

import json

import pytest

from nfc_stream.models.frame import FrameType, TechType
from nfc_stream.stream import CaptureSession, FrameBuffer, TraceFormatError, TraceReplayer, read_trace


def write_trace(path, lines):
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def message(type_, data="", tech="NfcA", time_start=0.0, time_end=None):
    return json.dumps({
        "tech": tech,
        "type": type_,
        "data": data,
        "time_start": time_start,
        "time_end": time_start if time_end is None else time_end,
        "rate": 105938,
    })


@pytest.fixture
def trace_file(tmp_path):
    """Provide a small valid trace file."""
    return write_trace(tmp_path / "capture.jsonl", [
        "# recorded with a test decoder",
        message("carrier_on", tech=None),
        message("poll", "26", time_start=0.010, time_end=0.0101),
        "",
        message("listen", "04 00", time_start=0.0102, time_end=0.0104),
    ])


class TestReadTrace:
    """Trace file parsing."""

    def test_reads_frames_in_order(self, trace_file):
        """Verify comments and blank lines are skipped."""
        frames = list(read_trace(trace_file))

        assert [f.frame_type for f in frames] == [
            FrameType.CARRIER_ON,
            FrameType.POLL,
            FrameType.LISTEN,
        ]
        assert frames[0].tech == TechType.NONE
        assert frames[2].data == b"\x04\x00"

    def test_skips_malformed_lines(self, tmp_path):
        """Verify malformed lines are counted and skipped."""
        path = write_trace(tmp_path / "bad.jsonl", [
            message("poll", "26"),
            "{not json",
            message("poll", "zz"),
            message("listen", "04 00"),
        ])
        stats = {}
        frames = list(read_trace(path, stats=stats))

        assert len(frames) == 2
        assert stats == {"lines": 4, "parse_errors": 2}

    def test_strict_raises(self, tmp_path):
        """Verify strict mode reports the offending line."""
        path = write_trace(tmp_path / "bad.jsonl", [
            message("poll", "26"),
            '{"type": "sniff", "time_start": 0, "time_end": 0}',
        ])
        with pytest.raises(TraceFormatError) as exc_info:
            list(read_trace(path, strict=True))

        assert exc_info.value.line_number == 2
        assert "bad.jsonl:2" in str(exc_info.value)

    def test_missing_file(self, tmp_path):
        """Verify a missing file raises OSError."""
        with pytest.raises(OSError):
            list(read_trace(tmp_path / "missing.jsonl"))


class TestTraceReplayer:
    """Replay into a buffer."""

    def test_replay_synchronous(self, trace_file):
        """Verify a synchronous replay pushes every frame."""
        buffer = FrameBuffer()
        replayer = TraceReplayer(trace_file, buffer)

        assert replayer.replay() == 3
        assert buffer.size == 3
        assert replayer.parse_errors == 0

    def test_replay_thread_into_session(self, trace_file):
        """Verify a threaded replay ends up as labeled rows."""
        session = CaptureSession()
        replayer = TraceReplayer(trace_file, session.buffer)

        session.reset()
        replayer.start()
        replayer.join(timeout=5.0)
        session.refresh()

        assert not replayer.running
        assert replayer.error is None
        assert [row.event for row in session.rows()] == ["RF-On", "REQA", "ATQA"]

    def test_thread_records_missing_file(self, tmp_path):
        """Verify a failed replay thread records the error."""
        replayer = TraceReplayer(tmp_path / "missing.jsonl", FrameBuffer())
        replayer.start()
        replayer.join(timeout=5.0)

        assert isinstance(replayer.error, OSError)
        assert replayer.frames_replayed == 0

    def test_stop_before_replay(self, trace_file):
        """Verify a stopped replayer pushes nothing."""
        buffer = FrameBuffer()
        replayer = TraceReplayer(trace_file, buffer)
        replayer.stop()

        assert replayer.replay() == 0
        assert not buffer.has_pending()

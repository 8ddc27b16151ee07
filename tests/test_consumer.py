"""
Frame Consumer Tests
====================

Tests for decoder feed message parsing and for the connection loop, which
runs against a local websockets server.
"""

import asyncio
import json
import socket
import time

import pytest
import websockets

from nfc_stream.stream import FrameBuffer, FrameConsumer


@pytest.fixture
def consumer():
    return FrameConsumer(url="ws://localhost:1/frames", buffer=FrameBuffer())


class TestParseAndValidate:
    """Per-message validation."""

    def test_valid_message(self, consumer, sample_frame_message):
        """Verify a valid message becomes a frame."""
        frame = consumer._parse_and_validate(json.dumps(sample_frame_message))

        assert frame is not None
        assert frame.data == b"\x93\x20"
        assert consumer.metrics.parse_errors == 0

    def test_bytes_message(self, consumer, sample_frame_message):
        """Verify binary WebSocket messages are accepted."""
        raw = json.dumps(sample_frame_message).encode("utf-8")
        assert consumer._parse_and_validate(raw) is not None

    @pytest.mark.parametrize("raw", ["{", "[]", '{"type": "poll"}'])
    def test_invalid_message(self, consumer, raw):
        """Verify invalid messages are counted and dropped."""
        assert consumer._parse_and_validate(raw) is None
        assert consumer.metrics.parse_errors == 1

    def test_time_going_backwards(self, consumer, sample_frame_message):
        """Verify out-of-order frames are kept but counted."""
        consumer.metrics.last_time_start = 1.0

        frame = consumer._parse_and_validate(json.dumps(sample_frame_message))

        assert frame is not None
        assert consumer.metrics.validation_warnings == 1

    def test_metrics_dict(self, consumer):
        """Verify metrics keys."""
        assert set(consumer.metrics.to_dict()) == {
            "frames_received",
            "reconnect_count",
            "last_time_start",
            "validation_warnings",
            "parse_errors",
        }
        assert not consumer.connected


def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


async def wait_until(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not reached")
        await asyncio.sleep(0.01)


class TestRunLoop:
    """Connection, reconnect backoff and stop against a local feed."""

    def test_consumes_and_backs_off_after_normal_close(self, sample_frame_message):
        """Verify frames are buffered and a clean close is followed by a backoff reconnect."""
        connections = []

        async def feed(ws):
            connections.append(time.monotonic())
            if len(connections) == 1:
                await ws.send(json.dumps(sample_frame_message))
                await ws.send("{")
                await ws.send(json.dumps(sample_frame_message))

        async def scenario():
            async with websockets.serve(feed, "127.0.0.1", 0) as server:
                port = server.sockets[0].getsockname()[1]
                consumer = FrameConsumer(
                    url=f"ws://127.0.0.1:{port}",
                    buffer=FrameBuffer(),
                    reconnect_backoff_ms=200,
                    max_reconnect_attempts=1,
                )
                await asyncio.wait_for(consumer.run(), timeout=5.0)
                return consumer

        consumer = asyncio.run(scenario())

        assert consumer.buffer.size == 2
        assert consumer.metrics.frames_received == 2
        assert consumer.metrics.parse_errors == 1
        assert consumer.metrics.reconnect_count == 1
        assert len(connections) == 2
        assert connections[1] - connections[0] >= 0.15
        assert not consumer.connected

    def test_gives_up_after_max_attempts(self):
        """Verify a refused connection is retried up to the attempt limit."""
        async def scenario():
            consumer = FrameConsumer(
                url=f"ws://127.0.0.1:{free_port()}",
                buffer=FrameBuffer(),
                reconnect_backoff_ms=100,
                max_reconnect_attempts=2,
            )
            await asyncio.wait_for(consumer.run(), timeout=5.0)
            return consumer

        consumer = asyncio.run(scenario())

        assert consumer.metrics.reconnect_count == 2
        assert consumer.buffer.size == 0

    def test_stop_during_backoff(self):
        """Verify stop() ends the run loop without waiting out the backoff."""
        async def scenario():
            consumer = FrameConsumer(
                url=f"ws://127.0.0.1:{free_port()}",
                buffer=FrameBuffer(),
                reconnect_backoff_ms=10000,
            )
            task = asyncio.create_task(consumer.run())
            await wait_until(lambda: consumer.metrics.reconnect_count >= 1)
            await consumer.stop()
            await asyncio.wait_for(task, timeout=1.0)
            return consumer

        consumer = asyncio.run(scenario())

        assert consumer.metrics.reconnect_count == 1

    def test_stop_while_connected(self, sample_frame_message):
        """Verify stop() closes an open connection and does not reconnect."""
        async def feed(ws):
            await ws.send(json.dumps(sample_frame_message))
            await ws.wait_closed()

        async def scenario():
            async with websockets.serve(feed, "127.0.0.1", 0) as server:
                port = server.sockets[0].getsockname()[1]
                consumer = FrameConsumer(
                    url=f"ws://127.0.0.1:{port}",
                    buffer=FrameBuffer(),
                    reconnect_backoff_ms=100,
                )
                task = asyncio.create_task(consumer.run())
                await wait_until(lambda: consumer.metrics.frames_received == 1)
                assert consumer.connected
                await consumer.stop()
                await asyncio.wait_for(task, timeout=5.0)
                return consumer

        consumer = asyncio.run(scenario())

        assert not consumer.connected
        assert consumer.metrics.reconnect_count == 0
        assert consumer.buffer.size == 1

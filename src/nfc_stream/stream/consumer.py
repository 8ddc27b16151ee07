"""
Frame Consumer
==============

WebSocket client for consuming decoded frames from the demodulator feed.

This module provides the FrameConsumer class which:
    - Connects to the decoder's WebSocket endpoint
    - Receives and validates frame messages (FrameMessage)
    - Warns about frames arriving out of time order
    - Handles reconnection with backoff
    - Pushes validated frames into a FrameBuffer

Design Rules:
    - Does NOT classify frames
    - Logs validation failures but continues processing
    - Reconnects automatically on disconnect
    - Exposes metrics for health monitoring
"""

import asyncio
import logging
from typing import Optional

import websockets
from pydantic import ValidationError
from websockets.exceptions import (
    ConnectionClosed,
    ConnectionClosedOK,
    ConnectionClosedError,
    InvalidHandshake,
)

from nfc_stream.models.frame import NfcFrame
from nfc_stream.models.input import FrameMessage
from nfc_stream.stream.buffer import FrameBuffer


logger = logging.getLogger(__name__)


class FrameConsumerMetrics:
    """Metrics for FrameConsumer observability."""

    __slots__ = (
        "frames_received",
        "reconnect_count",
        "last_time_start",
        "validation_warnings",
        "parse_errors",
    )

    def __init__(self) -> None:
        self.frames_received: int = 0
        self.reconnect_count: int = 0
        self.last_time_start: float = -1.0
        self.validation_warnings: int = 0
        self.parse_errors: int = 0

    def to_dict(self) -> dict:
        """Export metrics as dict."""
        return {
            "frames_received": self.frames_received,
            "reconnect_count": self.reconnect_count,
            "last_time_start": self.last_time_start,
            "validation_warnings": self.validation_warnings,
            "parse_errors": self.parse_errors,
        }


class FrameConsumer:
    """
    WebSocket consumer for decoded NFC frames.

    Attributes:
        url: WebSocket URL to connect to
        buffer: FrameBuffer to push frames into
        connected: Whether currently connected
        metrics: Operational metrics

    Example:
        buffer = FrameBuffer()
        consumer = FrameConsumer(
            url="ws://localhost:8765/frames",
            buffer=buffer,
            reconnect_backoff_ms=500,
        )

        task = asyncio.create_task(consumer.run())

        # Later, stop gracefully
        await consumer.stop()
        await task
    """

    def __init__(
        self,
        url: str,
        buffer: FrameBuffer,
        reconnect_backoff_ms: int = 500,
        max_reconnect_attempts: int = 0,
    ) -> None:
        """
        Initialize frame consumer.

        Args:
            url: WebSocket URL of the decoder feed
            buffer: FrameBuffer to push validated frames into
            reconnect_backoff_ms: Backoff between reconnect attempts
            max_reconnect_attempts: Max attempts (0 = unlimited)
        """
        self.url = url
        self.buffer = buffer
        self.reconnect_backoff_ms = reconnect_backoff_ms
        self.max_reconnect_attempts = max_reconnect_attempts

        # State
        self._websocket = None
        self._connected: bool = False
        self._running: bool = False
        self._stop_event: asyncio.Event = asyncio.Event()

        # Metrics
        self.metrics = FrameConsumerMetrics()

    @property
    def connected(self) -> bool:
        """Whether currently connected to the decoder feed."""
        return self._connected

    async def run(self) -> None:
        """
        Start consuming frames.

        Runs indefinitely, reconnecting with backoff after a connection error
        or a normal close by the feed. Call stop() to terminate gracefully.
        """
        self._running = True
        self._stop_event.clear()

        logger.info(f"FrameConsumer starting, connecting to {self.url}")

        while self._running:
            try:
                await self._connect_and_consume()
            except (OSError, asyncio.TimeoutError, ConnectionClosed, InvalidHandshake) as e:
                logger.error(f"Connection error: {e}")
                self._connected = False

            if not self._running:
                break

            if (
                self.max_reconnect_attempts > 0
                and self.metrics.reconnect_count >= self.max_reconnect_attempts
            ):
                logger.error(
                    f"Max reconnect attempts ({self.max_reconnect_attempts}) exceeded"
                )
                break

            self.metrics.reconnect_count += 1
            backoff_sec = self.reconnect_backoff_ms / 1000.0
            logger.info(
                f"Reconnecting in {backoff_sec:.1f}s "
                f"(attempt {self.metrics.reconnect_count})"
            )

            try:
                await asyncio.wait_for(
                    self._stop_event.wait(),
                    timeout=backoff_sec
                )
                # Stop event was set, exit
                break
            except asyncio.TimeoutError:
                pass

        self._running = False
        logger.info("FrameConsumer stopped")

    async def stop(self) -> None:
        """
        Stop consuming gracefully.

        Signals the run loop to exit and closes the connection.
        """
        logger.info("FrameConsumer stopping...")
        self._running = False
        self._stop_event.set()

        if self._websocket is not None:
            try:
                await self._websocket.close()
            except (OSError, ConnectionClosed) as e:
                logger.debug(f"Error closing connection: {e}")

        self._connected = False

    async def _connect_and_consume(self) -> None:
        """Connect to the feed and consume messages until disconnect."""
        async with websockets.connect(
            self.url,
            ping_interval=20,
            ping_timeout=10,
            close_timeout=5,
        ) as ws:
            self._websocket = ws
            self._connected = True
            logger.info(f"Connected to decoder feed: {self.url}")

            try:
                async for message in ws:
                    if not self._running:
                        break

                    frame = self._parse_and_validate(message)
                    if frame is not None:
                        self.buffer.append(frame)
                        self.metrics.frames_received += 1
                        self.metrics.last_time_start = frame.time_start

            except ConnectionClosedOK:
                logger.info("Connection closed normally")
            except ConnectionClosedError as e:
                logger.warning(f"Connection closed with error: {e}")
                raise
            finally:
                self._connected = False
                self._websocket = None

    def _parse_and_validate(self, raw) -> Optional[NfcFrame]:
        """
        Parse and validate a raw WebSocket message.

        Out-of-order frames are logged but not rejected.

        Args:
            raw: Raw JSON text (or bytes) from the WebSocket

        Returns:
            Validated NfcFrame, or None on parse error
        """
        try:
            message = FrameMessage.model_validate_json(raw)
        except ValidationError as e:
            self.metrics.parse_errors += 1
            logger.error(f"Invalid frame message: {e.error_count()} errors, {e.errors()[0]['msg']}")
            return None

        frame = message.to_frame()

        if 0 <= frame.time_start < self.metrics.last_time_start:
            self.metrics.validation_warnings += 1
            logger.warning(
                f"Frame time went backwards: got {frame.time_start:.6f}, "
                f"previous was {self.metrics.last_time_start:.6f}"
            )

        return frame

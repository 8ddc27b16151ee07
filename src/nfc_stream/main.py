"""
NFC Stream Main Application
===========================

FastAPI entry point for the NFC frame stream service.

Pipeline:
    decoder feed (WebSocket) or trace replay -> FrameBuffer
    periodic refresh -> FrameStore
    on request -> classify -> StreamRow

Endpoints:
    GET  /                    - Service information
    GET  /health              - Liveness probe
    GET  /metrics             - Ingestion and session metrics
    GET  /frames              - Labeled rows (offset, limit)
    GET  /frames/{row}        - Single labeled row
    GET  /range               - Rows inside a time interval
    POST /reset               - Discard the current capture
    PUT  /display/time-format - Switch elapsed / date-time display
"""

import asyncio
import logging
import os
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from nfc_stream.classify import TimeFormat
from nfc_stream.config import settings
from nfc_stream.models.row import RangeResult, StreamRow
from nfc_stream.stream import CaptureSession, FrameBuffer, FrameConsumer, TraceReplayer


logger = logging.getLogger(__name__)


# =============================================================================
# Global State
# =============================================================================

_session: Optional[CaptureSession] = None
_frame_consumer: Optional[FrameConsumer] = None
_consumer_task: Optional[asyncio.Task] = None
_replayer: Optional[TraceReplayer] = None
_refresh_task: Optional[asyncio.Task] = None
_startup_time: float = 0.0
_refresh_count: int = 0


def get_session() -> CaptureSession:
    if _session is None:
        raise HTTPException(status_code=503, detail="Capture session not initialized")
    return _session


# =============================================================================
# Refresh Loop
# =============================================================================

async def refresh_loop(session: CaptureSession, interval_sec: float) -> None:
    """Periodically drain the ingestion buffer into the frame store."""
    global _refresh_count

    logger.info(f"Refresh loop started (every {interval_sec * 1000:.0f} ms)")

    while True:
        try:
            await asyncio.sleep(interval_sec)
            added = session.refresh()
            _refresh_count += 1
            if added:
                logger.debug(f"Refresh added {added} rows")
        except asyncio.CancelledError:
            logger.info("Refresh loop cancelled")
            break


def start_source(session: CaptureSession) -> None:
    """Start the configured frame producer."""
    global _frame_consumer, _consumer_task, _replayer

    source = settings.stream.source

    if source == "websocket":
        logger.info(f"Decoder feed URL: {settings.stream.url}")
        _frame_consumer = FrameConsumer(
            url=settings.stream.url,
            buffer=session.buffer,
            reconnect_backoff_ms=settings.stream.reconnect_backoff_ms,
            max_reconnect_attempts=settings.stream.max_reconnect_attempts,
        )
        _consumer_task = asyncio.create_task(
            _frame_consumer.run(),
            name="frame_consumer"
        )

    elif source == "replay":
        if not settings.stream.replay_path:
            raise RuntimeError("Replay source requested but stream.replay_path is not set")
        _replayer = TraceReplayer(
            settings.stream.replay_path,
            session.buffer,
            realtime=settings.stream.replay_realtime,
        )
        _replayer.start()

    else:
        logger.info("No frame source configured")


# =============================================================================
# Lifespan Management
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager with graceful shutdown."""
    global _session, _refresh_task, _startup_time

    _startup_time = time.time()
    logger.info(f"Starting {settings.service.name} {settings.service.version}")

    _session = CaptureSession(
        buffer=FrameBuffer(maxsize=settings.stream.max_queue_size),
        time_format=TimeFormat(settings.display.time_format),
    )

    start_source(_session)

    _refresh_task = asyncio.create_task(
        refresh_loop(_session, settings.stream.refresh_interval_ms / 1000.0),
        name="frame_refresh"
    )

    yield

    logger.info("Shutting down gracefully...")

    if _refresh_task:
        _refresh_task.cancel()
        try:
            await _refresh_task
        except asyncio.CancelledError:
            pass

    if _frame_consumer:
        await _frame_consumer.stop()

    if _consumer_task:
        try:
            await asyncio.wait_for(_consumer_task, timeout=5.0)
        except asyncio.TimeoutError:
            _consumer_task.cancel()
            try:
                await _consumer_task
            except asyncio.CancelledError:
                pass

    if _replayer:
        _replayer.stop()
        _replayer.join(timeout=5.0)

    logger.info("Shutdown complete")


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="NFC Stream",
    description="Decoded NFC frame ingestion and protocol event classification",
    version=settings.service.version,
    lifespan=lifespan,
)


class TimeFormatRequest(BaseModel):
    time_format: TimeFormat


# =============================================================================
# HTTP Endpoints
# =============================================================================

@app.get("/")
async def root() -> JSONResponse:
    """Service information endpoint."""
    return JSONResponse({
        "service": "NFC Stream",
        "version": settings.service.version,
        "name": settings.service.name,
        "status": "running",
        "source": settings.stream.source,
    })


@app.get("/health")
async def health() -> JSONResponse:
    """Liveness probe - always 200 while the process is running."""
    return JSONResponse({
        "status": "healthy",
        "uptime_seconds": round(time.time() - _startup_time, 1),
    })


@app.get("/metrics")
async def metrics() -> JSONResponse:
    """Detailed metrics for observability."""
    session = get_session()

    source_metrics = {}
    if _frame_consumer:
        source_metrics = {
            "stream_connected": _frame_consumer.connected,
            **_frame_consumer.metrics.to_dict(),
        }
    elif _replayer:
        source_metrics = {
            "replay_running": _replayer.running,
            "frames_replayed": _replayer.frames_replayed,
            "parse_errors": _replayer.parse_errors,
        }

    return JSONResponse({
        "uptime_seconds": round(time.time() - _startup_time, 1),
        "source": settings.stream.source,
        "refresh_count": _refresh_count,
        **session.metrics(),
        **source_metrics,
    })


@app.get("/frames", response_model=list[StreamRow])
async def frames(
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=10000),
) -> list[StreamRow]:
    """Labeled rows starting at offset."""
    return get_session().rows(offset=offset, limit=limit)


@app.get("/frames/{row}", response_model=StreamRow)
async def frame_row(row: int) -> StreamRow:
    """Single labeled row."""
    session = get_session()
    try:
        return session.row(row)
    except IndexError:
        raise HTTPException(status_code=404, detail=f"Row {row} not found")


@app.get("/range", response_model=RangeResult)
async def frame_range(
    start: float = Query(...),
    end: float = Query(...),
) -> RangeResult:
    """Rows whose frames lie inside [start, end]."""
    if end < start:
        raise HTTPException(status_code=422, detail="end must be >= start")
    return get_session().range_result(start, end)


@app.post("/reset")
async def reset() -> JSONResponse:
    """Discard queued and stored frames."""
    session = get_session()
    session.reset()
    return JSONResponse({"status": "reset", "generation": session.store.generation})


@app.put("/display/time-format")
async def set_time_format(request: TimeFormatRequest) -> JSONResponse:
    """Switch the time column between elapsed seconds and date/time."""
    session = get_session()
    session.time_format = request.time_format
    return JSONResponse({"time_format": session.time_format.value})


# =============================================================================
# Main Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    port = int(os.environ.get("PORT", settings.server.port))

    uvicorn.run(
        "nfc_stream.main:app",
        host=settings.server.host,
        port=port,
        reload=False,
    )

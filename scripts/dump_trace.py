#!/usr/bin/env python3
"""
Trace Dump Script
=================

Standalone script to run a recorded trace through the ingestion layer and
print the classified rows.

This script:
    1. Starts a TraceReplayer thread feeding a CaptureSession
    2. Drains the buffer on a fixed refresh interval, like the service does
    3. Prints every labeled row as a text table
    4. Reports final ingestion stats

Usage:
    python scripts/dump_trace.py capture.jsonl
    python scripts/dump_trace.py capture.jsonl --time-format datetime --range 0.5 1.2
"""

import argparse
import logging
import os
import sys
import time

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from nfc_stream.classify import TimeFormat
from nfc_stream.stream import CaptureSession, FrameBuffer, TraceReplayer


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger(__name__)


HEADER = f"{'#':>6}  {'Time':>22}  {'Delta':>9}  {'Rate':>5}  {'Type':<5}  {'Event':<12}  Frame"


def print_rows(session: CaptureSession, start: int, rows=None) -> None:
    indices = rows if rows is not None else range(start, session.row_count())
    for i in indices:
        row = session.row(i)
        print(
            f"{row.index:>6}  {row.time:>22}  {row.delta or '':>9}  "
            f"{row.rate or '':>5}  {row.tech or '':<5}  {row.event or '':<12}  {row.data}"
        )


def run(path: str, time_format: str, refresh_ms: int, queue_size: int, interval=None) -> int:
    session = CaptureSession(
        buffer=FrameBuffer(maxsize=queue_size),
        time_format=TimeFormat(time_format),
    )
    replayer = TraceReplayer(path, session.buffer)

    session.reset()
    replayer.start()

    if interval is None:
        print(HEADER)

    printed = 0
    while replayer.running or session.buffer.has_pending():
        time.sleep(refresh_ms / 1000.0)
        if session.refresh() and interval is None:
            print_rows(session, printed)
            printed = session.row_count()

    replayer.join()
    session.refresh()

    if interval is not None:
        selection = session.indexer.select(*interval)
        print(HEADER)
        if selection is not None:
            print_rows(session, 0, range(selection.first, selection.last + 1))
    else:
        print_rows(session, printed)

    metrics = session.metrics()
    logger.info("=" * 60)
    logger.info(f"Rows stored: {metrics['rows']}")
    logger.info(f"Malformed lines: {replayer.parse_errors}")
    logger.info(f"Buffer drops: {metrics['buffer_dropped_count']}")
    logger.info("=" * 60)

    if replayer.error is not None:
        logger.error(f"Replay failed: {replayer.error}")
        return 1
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Classify a recorded NFC trace and print the rows"
    )
    parser.add_argument("trace", help="JSON Lines trace file")
    parser.add_argument(
        "--time-format",
        choices=[f.value for f in TimeFormat],
        default=TimeFormat.ELAPSED.value,
        help="Time column format (default: elapsed)",
    )
    parser.add_argument(
        "--refresh-ms",
        type=int,
        default=250,
        help="Buffer drain interval in milliseconds (default: 250)",
    )
    parser.add_argument(
        "--queue-size",
        type=int,
        default=0,
        help="Max buffer queue size, 0 for unbounded (default: 0)",
    )
    parser.add_argument(
        "--range",
        type=float,
        nargs=2,
        metavar=("START", "END"),
        help="Only print the rows inside this time interval (seconds)",
    )

    args = parser.parse_args()

    sys.exit(run(
        path=args.trace,
        time_format=args.time_format,
        refresh_ms=args.refresh_ms,
        queue_size=args.queue_size,
        interval=tuple(args.range) if args.range else None,
    ))


if __name__ == "__main__":
    main()

"""
HTTP API Tests
==============

Tests for the FastAPI endpoints against an in-memory capture session.
The application lifespan is not entered, so no frame source is started.
"""

import pytest
from fastapi.testclient import TestClient

from conftest import poll

import nfc_stream.main as main
from nfc_stream.stream import CaptureSession


@pytest.fixture
def session(monkeypatch, anticollision_frames):
    """Provide a session holding the anticollision exchange."""
    session = CaptureSession()
    for frame in anticollision_frames:
        session.append(frame)
    session.refresh()
    monkeypatch.setattr(main, "_session", session)
    return session


@pytest.fixture
def client():
    return TestClient(main.app)


class TestServiceEndpoints:
    """Info, health and metrics."""

    def test_root(self, client):
        """Verify service information."""
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "running"

    def test_health(self, client):
        """Verify liveness probe."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_metrics(self, client, session):
        """Verify session metrics are reported."""
        data = client.get("/metrics").json()
        assert data["rows"] == 7
        assert data["buffer_size"] == 0

    def test_no_session(self, client, monkeypatch):
        """Verify 503 before the session exists."""
        monkeypatch.setattr(main, "_session", None)
        assert client.get("/frames").status_code == 503


class TestFrameEndpoints:
    """Row queries."""

    def test_frames(self, client, session):
        """Verify labeled rows are returned."""
        rows = client.get("/frames").json()
        assert len(rows) == 7
        assert rows[1]["event"] == "REQA"
        assert rows[1]["data"] == "26"
        assert rows[0]["delta"] is None

    def test_frames_paging(self, client, session):
        """Verify offset and limit."""
        rows = client.get("/frames", params={"offset": 3, "limit": 2}).json()
        assert [r["index"] for r in rows] == [3, 4]
        assert [r["event"] for r in rows] == ["SEL1", "UID"]

    def test_frames_invalid_limit(self, client, session):
        """Verify out of bounds limits are rejected."""
        assert client.get("/frames", params={"limit": 0}).status_code == 422

    def test_single_row(self, client, session):
        """Verify a single row lookup."""
        row = client.get("/frames/6").json()
        assert row["event"] == "SAK"
        assert row["tech"] == "NfcA"

    def test_row_not_found(self, client, session):
        """Verify 404 for rows outside the store."""
        assert client.get("/frames/7").status_code == 404


class TestRangeEndpoint:
    """Time interval queries."""

    def test_range(self, client, session):
        """Verify rows inside the interval."""
        data = client.get("/range", params={"start": 0.0105, "end": 0.0119}).json()
        assert data["rows"] == [3, 4]
        assert data["first"] == 3
        assert data["last"] == 4

    def test_range_empty(self, client, session):
        """Verify an empty interval."""
        data = client.get("/range", params={"start": 5, "end": 6}).json()
        assert data["rows"] == []
        assert data["first"] is None

    def test_range_reversed(self, client, session):
        """Verify reversed intervals are rejected."""
        assert client.get("/range", params={"start": 2, "end": 1}).status_code == 422


class TestControlEndpoints:
    """Reset and display mode."""

    def test_reset(self, client, session):
        """Verify reset empties the capture and bumps the generation."""
        response = client.post("/reset")
        assert response.json() == {"status": "reset", "generation": 1}
        assert client.get("/frames").json() == []

    def test_time_format(self, client, session):
        """Verify switching the time column format."""
        response = client.put("/display/time-format", json={"time_format": "datetime"})
        assert response.status_code == 200
        assert response.json() == {"time_format": "datetime"}
        assert session.time_format.value == "datetime"

    def test_datetime_rows_with_bad_timestamp(self, client, session):
        """Verify a frame with an unconvertible timestamp does not break row pages."""
        session.append(poll([0x26], time_start=0.02, time_end=0.0201, date_time=1e20))
        session.refresh()
        client.put("/display/time-format", json={"time_format": "datetime"})

        response = client.get("/frames")

        assert response.status_code == 200
        assert response.json()[7]["time"] == "0.020000"

    def test_invalid_time_format(self, client, session):
        """Verify unknown formats are rejected."""
        response = client.put("/display/time-format", json={"time_format": "ticks"})
        assert response.status_code == 422

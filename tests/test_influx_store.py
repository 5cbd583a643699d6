"""Tests for the InfluxDB store adapter against a fake client."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest

from app.schemas import SensorReading
from services.errors import StorageError
from storage.influx import InfluxSensorStore, StoreTimeouts


def _store(client, timeouts: StoreTimeouts = StoreTimeouts()) -> InfluxSensorStore:
    return InfluxSensorStore(client=client, bucket="sensor_data", org="myorg", timeouts=timeouts)


def _row(sensor_id: str, hour: int, location: str = "lab") -> dict:
    return {
        "_time": datetime(2024, 1, 1, hour, tzinfo=timezone.utc),
        "sensor_id": sensor_id,
        "location": location,
        "temperature": 20.0 + hour,
        "humidity": 50.0,
        "pressure": 1000.0,
        "altitude": 10.0,
    }


def test_write_reading_targets_configured_bucket_and_org(fake_client) -> None:
    store = _store(fake_client)
    reading = SensorReading(id="sensor_1", timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc), temperature=1.5)

    asyncio.run(store.write_reading(reading))

    assert len(fake_client.writer.calls) == 1
    call = fake_client.writer.calls[0]
    assert call["bucket"] == "sensor_data"
    assert call["org"] == "myorg"
    assert "sensor_id=sensor_1" in call["record"].to_line_protocol()


def test_write_failure_becomes_storage_error(fake_client) -> None:
    fake_client.writer.error = ConnectionError("connection refused")
    store = _store(fake_client)
    reading = SensorReading(id="sensor_1", timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc))

    with pytest.raises(StorageError) as excinfo:
        asyncio.run(store.write_reading(reading))

    assert excinfo.value.message == "Failed to write to database"
    assert isinstance(excinfo.value.__cause__, ConnectionError)


def test_write_timeout_becomes_storage_error(fake_client) -> None:
    fake_client.writer.delay = 0.5
    store = _store(fake_client, StoreTimeouts(write=0.05))
    reading = SensorReading(id="sensor_1", timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc))

    with pytest.raises(StorageError):
        asyncio.run(store.write_reading(reading))


def test_query_recent_passes_params_and_decodes_rows(fake_client) -> None:
    fake_client.querier.rows = [_row("sensor_2", 3), _row("sensor_1", 2)]
    store = _store(fake_client)

    readings = asyncio.run(store.query_recent(limit=2, location="lab"))

    assert [r.id for r in readings] == ["sensor_2", "sensor_1"]
    assert readings[0].temperature == 23.0
    call = fake_client.querier.calls[0]
    assert call["org"] == "myorg"
    assert call["params"]["limit"] == 2
    assert call["params"]["location"] == "lab"
    assert call["params"]["bucket"] == "sensor_data"


def test_query_recent_with_no_rows_returns_empty_list(fake_client) -> None:
    store = _store(fake_client)

    assert asyncio.run(store.query_recent(limit=100)) == []


def test_query_latest_returns_none_when_nothing_matches(fake_client) -> None:
    store = _store(fake_client)

    assert asyncio.run(store.query_latest("missing")) is None
    assert fake_client.querier.calls[0]["params"]["sensor_id"] == "missing"


def test_query_latest_returns_first_row(fake_client) -> None:
    fake_client.querier.rows = [_row("sensor_1", 5)]
    store = _store(fake_client)

    reading = asyncio.run(store.query_latest("sensor_1"))

    assert reading is not None
    assert reading.timestamp == datetime(2024, 1, 1, 5, tzinfo=timezone.utc)


def test_query_failure_becomes_storage_error(fake_client) -> None:
    fake_client.querier.error = RuntimeError("bad flux")
    store = _store(fake_client)

    with pytest.raises(StorageError) as excinfo:
        asyncio.run(store.query_recent(limit=10))

    assert excinfo.value.message == "Failed to query database"


def test_malformed_rows_become_storage_error(fake_client) -> None:
    fake_client.querier.rows = [{"_time": datetime(2024, 1, 1, tzinfo=timezone.utc)}]
    store = _store(fake_client)

    with pytest.raises(StorageError) as excinfo:
        asyncio.run(store.query_latest("sensor_1"))

    assert excinfo.value.message == "Error processing query results"


def test_health_status_reports_client_status(fake_client) -> None:
    fake_client.health_status = "fail"
    store = _store(fake_client)

    assert asyncio.run(store.health_status()) == "fail"


def test_close_closes_client(fake_client) -> None:
    store = _store(fake_client)

    store.close()

    assert fake_client.closed is True

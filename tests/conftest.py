from __future__ import annotations

import time
from types import SimpleNamespace
from typing import Any, Dict, Iterator, List, Optional

import pytest
from fastapi.testclient import TestClient

from app.schemas import SensorReading
from services.errors import StorageError
from services.gateway import SensorGateway


class FakeRecord:
    def __init__(self, values: Dict[str, Any]) -> None:
        self.values = values


class FakeTable:
    def __init__(self, records: List[FakeRecord]) -> None:
        self.records = records


class FakeWriteApi:
    def __init__(self) -> None:
        self.calls: List[Dict[str, Any]] = []
        self.error: Optional[Exception] = None
        self.delay = 0.0

    def write(self, bucket: str, org: str, record: Any) -> None:
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        self.calls.append({"bucket": bucket, "org": org, "record": record})


class FakeQueryApi:
    def __init__(self) -> None:
        self.rows: List[Dict[str, Any]] = []
        self.calls: List[Dict[str, Any]] = []
        self.error: Optional[Exception] = None
        self.delay = 0.0

    def query(self, query: str, org: Optional[str] = None, params: Optional[Dict[str, Any]] = None) -> List[FakeTable]:
        self.calls.append({"query": query, "org": org, "params": params})
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return [FakeTable([FakeRecord(row) for row in self.rows])]


class FakeInfluxClient:
    """Stands in for ``InfluxDBClient`` with the handful of calls the store makes."""

    def __init__(self) -> None:
        self.writer = FakeWriteApi()
        self.querier = FakeQueryApi()
        self.health_status = "pass"
        self.health_error: Optional[Exception] = None
        self.closed = False

    def write_api(self, write_options: Any = None) -> FakeWriteApi:
        return self.writer

    def query_api(self) -> FakeQueryApi:
        return self.querier

    def health(self) -> SimpleNamespace:
        if self.health_error is not None:
            raise self.health_error
        return SimpleNamespace(status=self.health_status)

    def close(self) -> None:
        self.closed = True


class InMemoryStore:
    """Store double keeping readings in a list, newest point wins on lookup."""

    def __init__(self) -> None:
        self.readings: List[SensorReading] = []
        self.recent_calls: List[Dict[str, Any]] = []
        self.health = "pass"
        self.fail_with: Optional[StorageError] = None
        self.closed = False

    async def write_reading(self, reading: SensorReading) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.readings.append(reading.model_copy(deep=True))

    async def query_recent(self, limit: int, location: Optional[str] = None) -> List[SensorReading]:
        self.recent_calls.append({"limit": limit, "location": location})
        if self.fail_with is not None:
            raise self.fail_with
        matches = [r for r in self.readings if location is None or r.location == location]
        matches.sort(key=lambda r: r.timestamp, reverse=True)
        return matches[:limit]

    async def query_latest(self, sensor_id: str) -> Optional[SensorReading]:
        if self.fail_with is not None:
            raise self.fail_with
        matches = [r for r in self.readings if r.id == sensor_id]
        if not matches:
            return None
        return max(matches, key=lambda r: r.timestamp)

    async def health_status(self) -> str:
        if self.fail_with is not None:
            raise self.fail_with
        return self.health

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_client() -> FakeInfluxClient:
    return FakeInfluxClient()


@pytest.fixture
def memory_store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def gateway(memory_store: InMemoryStore) -> SensorGateway:
    return SensorGateway(store=memory_store)  # type: ignore[arg-type]


@pytest.fixture
def api_client(memory_store: InMemoryStore, monkeypatch) -> Iterator[TestClient]:
    gateways: Dict[str, SensorGateway] = {}

    def build_test_gateway() -> SensorGateway:
        gateway = gateways.get("default")
        if gateway is None:
            gateway = SensorGateway(store=memory_store)  # type: ignore[arg-type]
            gateways["default"] = gateway
        return gateway

    build_test_gateway.cache_clear = gateways.clear  # type: ignore[attr-defined]

    monkeypatch.setattr("app.main.build_default_gateway", build_test_gateway)
    monkeypatch.setattr("app.api.build_default_gateway", build_test_gateway)

    from app.main import create_app

    app = create_app()
    with TestClient(app) as client:
        yield client

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Optional, TypeVar

from influxdb_client import InfluxDBClient
from influxdb_client.client.write_api import SYNCHRONOUS

from app.schemas import SensorReading
from models.records import RecordDecodeError, reading_from_row, reading_to_point
from services.errors import StorageError
from settings import get_settings
from storage.flux import FluxQuery, latest_reading_query, recent_readings_query

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class StoreTimeouts:
    """Upper bounds, in seconds, for each kind of store call."""

    write: float = 5.0
    query_recent: float = 10.0
    query_latest: float = 5.0
    health: float = 3.0

    @property
    def longest(self) -> float:
        return max(self.write, self.query_recent, self.query_latest, self.health)


class InfluxSensorStore:
    """Thin adapter over an InfluxDB client for sensor readings."""

    def __init__(
        self,
        client: InfluxDBClient,
        bucket: str,
        org: str,
        timeouts: StoreTimeouts = StoreTimeouts(),
    ) -> None:
        self.client = client
        self.bucket = bucket
        self.org = org
        self.timeouts = timeouts
        self._write_api = client.write_api(write_options=SYNCHRONOUS)
        self._query_api = client.query_api()

    async def write_reading(self, reading: SensorReading) -> None:
        point = reading_to_point(reading)
        await self._call(
            "write",
            self.timeouts.write,
            "Failed to write to database",
            lambda: self._write_api.write(bucket=self.bucket, org=self.org, record=point),
            sensor_id=reading.id,
        )

    async def query_recent(self, limit: int, location: Optional[str] = None) -> list[SensorReading]:
        query = recent_readings_query(self.bucket, limit=limit, location=location)
        rows = await self._query("query_recent", self.timeouts.query_recent, query, location=location, limit=limit)
        return self._decode(rows, "query_recent")

    async def query_latest(self, sensor_id: str) -> Optional[SensorReading]:
        query = latest_reading_query(self.bucket, sensor_id)
        rows = await self._query("query_latest", self.timeouts.query_latest, query, sensor_id=sensor_id)
        readings = self._decode(rows, "query_latest")
        return readings[0] if readings else None

    async def health_status(self) -> str:
        """Return the store's own health status string, e.g. ``"pass"``."""
        health = await self._call(
            "health",
            self.timeouts.health,
            "Database connection failed",
            self.client.health,
        )
        return str(getattr(health, "status", "") or "")

    def close(self) -> None:
        self.client.close()

    async def _query(
        self, operation: str, timeout: float, query: FluxQuery, **context: Any
    ) -> list[dict[str, Any]]:
        def run() -> list[dict[str, Any]]:
            tables = self._query_api.query(query.text, org=self.org, params=query.params)
            return [dict(record.values) for table in tables for record in table.records]

        return await self._call(operation, timeout, "Failed to query database", run, **context)

    @staticmethod
    def _decode(rows: list[dict[str, Any]], operation: str) -> list[SensorReading]:
        try:
            return [reading_from_row(row) for row in rows]
        except RecordDecodeError as exc:
            logger.error(
                "Could not decode query results",
                extra={"operation": operation, "reason": str(exc)},
            )
            raise StorageError("Error processing query results") from exc

    async def _call(
        self,
        operation: str,
        timeout: float,
        message: str,
        func: Callable[[], T],
        **context: Any,
    ) -> T:
        try:
            return await asyncio.wait_for(asyncio.to_thread(func), timeout=timeout)
        except asyncio.TimeoutError as exc:
            logger.error(
                "Store call timed out",
                extra={"operation": operation, "timeout_s": timeout, **context},
            )
            raise StorageError(message) from exc
        except Exception as exc:  # noqa: BLE001 - any client failure is a storage failure
            logger.error(
                "Store call failed",
                extra={"operation": operation, "reason": repr(exc), **context},
            )
            raise StorageError(message) from exc


@lru_cache
def build_default_store() -> InfluxSensorStore:
    """Factory that wires the store from environment settings."""
    settings = get_settings()
    timeouts = StoreTimeouts()
    client = InfluxDBClient(
        url=settings.influx_url,
        token=settings.influx_token,
        org=settings.influx_org,
        timeout=int(timeouts.longest * 1000),
    )
    return InfluxSensorStore(
        client=client,
        bucket=settings.influx_bucket,
        org=settings.influx_org,
        timeouts=timeouts,
    )

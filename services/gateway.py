"""Translation of sensor-data requests into store operations."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import lru_cache
from typing import Callable, NoReturn, Optional

from app.schemas import SensorReading, SensorReadingPayload
from services.errors import NotFoundError, NotImplementedOperationError, StorageError
from storage.influx import InfluxSensorStore, build_default_store

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 100
HEALTHY_STATUS = "pass"


def generate_reading_id(timestamp: datetime) -> str:
    return f"sensor_{int(timestamp.timestamp())}"


class SensorGateway:
    """Maps create/list/get/update/delete onto an append-only store.

    Updates insert a new point under the same id; reads resolve to the most
    recent point. Deletion is not supported.
    """

    def __init__(
        self,
        store: InfluxSensorStore,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.store = store
        self._clock = clock

    async def create(self, payload: SensorReadingPayload) -> SensorReading:
        reading = self._complete(payload, sensor_id=payload.id or None)
        await self.store.write_reading(reading)
        logger.info(
            "Stored sensor reading",
            extra={"operation": "create", "sensor_id": reading.id, "location": reading.location or None},
        )
        return reading

    async def list_recent(self, limit: int = DEFAULT_LIST_LIMIT, location: Optional[str] = None) -> list[SensorReading]:
        if limit <= 0:
            limit = DEFAULT_LIST_LIMIT
        return await self.store.query_recent(limit=limit, location=location or None)

    async def get(self, sensor_id: str) -> SensorReading:
        reading = await self.store.query_latest(sensor_id)
        if reading is None:
            raise NotFoundError()
        return reading

    async def update(self, sensor_id: str, payload: SensorReadingPayload) -> SensorReading:
        reading = self._complete(payload, sensor_id=sensor_id)
        try:
            await self.store.write_reading(reading)
        except StorageError as exc:
            raise StorageError("Failed to update data") from exc
        logger.info(
            "Appended sensor reading",
            extra={"operation": "update", "sensor_id": reading.id, "location": reading.location or None},
        )
        return reading

    async def delete(self, sensor_id: str) -> NoReturn:
        logger.info("Rejected delete request", extra={"operation": "delete", "sensor_id": sensor_id})
        raise NotImplementedOperationError()

    async def is_healthy(self) -> bool:
        try:
            status = await self.store.health_status()
        except StorageError:
            return False
        if status != HEALTHY_STATUS:
            logger.warning("Store reported unhealthy status", extra={"operation": "health", "reason": status})
            return False
        return True

    def _complete(self, payload: SensorReadingPayload, sensor_id: Optional[str]) -> SensorReading:
        timestamp = payload.timestamp or self._clock()
        return SensorReading(
            id=sensor_id or generate_reading_id(timestamp),
            timestamp=timestamp,
            temperature=float(payload.temperature),
            humidity=float(payload.humidity),
            pressure=float(payload.pressure),
            altitude=float(payload.altitude),
            location=payload.location,
        )


@lru_cache
def build_default_gateway() -> SensorGateway:
    """Factory that wires the gateway to the default store."""
    return SensorGateway(store=build_default_store())

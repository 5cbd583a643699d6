"""Mapping between sensor readings and InfluxDB points."""

from __future__ import annotations

from typing import Any, Mapping

from influxdb_client import Point, WritePrecision
from pydantic import ValidationError

from app.schemas import SensorReading

MEASUREMENT = "sensor_readings"
ID_TAG = "sensor_id"
LOCATION_TAG = "location"
FIELDS = ("temperature", "humidity", "pressure", "altitude")


class RecordDecodeError(ValueError):
    """Raised when a query row cannot be turned into a sensor reading."""


def reading_to_point(reading: SensorReading) -> Point:
    """Build the point written for a reading: id and location as tags, measurements as fields."""
    point = (
        Point(MEASUREMENT)
        .tag(ID_TAG, reading.id)
        .tag(LOCATION_TAG, reading.location)
        .time(reading.timestamp, WritePrecision.NS)
    )
    for name in FIELDS:
        point = point.field(name, float(getattr(reading, name)))
    return point


def reading_from_row(values: Mapping[str, Any]) -> SensorReading:
    """Validate a pivoted Flux row into a :class:`SensorReading`."""
    candidate: dict[str, Any] = {
        "id": values.get(ID_TAG),
        "timestamp": values.get("_time"),
        "location": values.get(LOCATION_TAG) or "",
    }
    for name in FIELDS:
        value = values.get(name)
        if value is not None:
            candidate[name] = value
    try:
        return SensorReading.model_validate(candidate)
    except ValidationError as exc:
        raise RecordDecodeError(f"Malformed sensor row: {exc.error_count()} invalid value(s)") from exc

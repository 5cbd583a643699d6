"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, StrictFloat, StrictInt, field_validator


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ResponseStatus(str, Enum):
    """Outcome marker carried by every API envelope."""

    success = "success"
    error = "error"


class SensorReadingPayload(BaseModel):
    """Request body accepted by the create and update endpoints."""

    id: Optional[str] = None
    timestamp: Optional[datetime] = None
    temperature: StrictFloat | StrictInt = 0.0
    humidity: StrictFloat | StrictInt = 0.0
    pressure: StrictFloat | StrictInt = 0.0
    altitude: StrictFloat | StrictInt = 0.0
    location: str = ""

    @field_validator("temperature", "humidity", "pressure", "altitude", mode="before")
    @classmethod
    def _null_measurement_is_zero(cls, value: Any) -> Any:
        return 0.0 if value is None else value

    @field_validator("location", mode="before")
    @classmethod
    def _null_location_is_blank(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("timestamp")
    @classmethod
    def _normalize_timestamp(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        return _as_utc(value)


class SensorReading(BaseModel):
    """A single stored sensor reading."""

    id: str = Field(..., min_length=1)
    timestamp: datetime
    temperature: float = 0.0
    humidity: float = 0.0
    pressure: float = 0.0
    altitude: float = 0.0
    location: str = ""

    @field_validator("timestamp")
    @classmethod
    def _normalize_timestamp(cls, value: datetime) -> datetime:
        return _as_utc(value)


class HealthReport(BaseModel):
    """Payload returned by the health endpoint when the store is reachable."""

    status: str = "healthy"
    timestamp: datetime
    database: str = "connected"


class ApiResponse(BaseModel):
    """Envelope wrapping every JSON response of the versioned API."""

    status: ResponseStatus
    message: str
    data: Optional[Any] = None

    def to_content(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)

"""HTTP route definitions for the service."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from app.schemas import ApiResponse, HealthReport, ResponseStatus, SensorReadingPayload
from services.gateway import DEFAULT_LIST_LIMIT, SensorGateway, build_default_gateway

router = APIRouter()
sensor_router = APIRouter(prefix="/api/v1/sensor-data", tags=["sensor-data"])


def get_gateway() -> SensorGateway:
    return build_default_gateway()


def success_response(status_code: int, message: str, data: Any = None) -> JSONResponse:
    envelope = ApiResponse(status=ResponseStatus.success, message=message, data=data)
    return JSONResponse(status_code=status_code, content=envelope.to_content())


def error_response(status_code: int, message: str) -> JSONResponse:
    envelope = ApiResponse(status=ResponseStatus.error, message=message)
    return JSONResponse(status_code=status_code, content=envelope.to_content())


def parse_limit(raw: Optional[str]) -> int:
    if raw is None:
        return DEFAULT_LIST_LIMIT
    candidate = raw.strip()
    if not candidate:
        return DEFAULT_LIST_LIMIT
    try:
        parsed = int(candidate)
    except ValueError:
        return DEFAULT_LIST_LIMIT
    return parsed if parsed > 0 else DEFAULT_LIST_LIMIT


@sensor_router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Store a new sensor reading.",
)
async def create_sensor_data(
    payload: SensorReadingPayload,
    gateway: SensorGateway = Depends(get_gateway),
) -> JSONResponse:
    reading = await gateway.create(payload)
    return success_response(status.HTTP_201_CREATED, "Sensor data created successfully", reading)


@sensor_router.get(
    "",
    summary="List readings from the last 24 hours, newest first.",
)
async def list_sensor_data(
    limit: Optional[str] = Query(None, description="Maximum rows to return (default 100)."),
    location: Optional[str] = Query(None, description="Only readings tagged with this location."),
    gateway: SensorGateway = Depends(get_gateway),
) -> JSONResponse:
    readings = await gateway.list_recent(limit=parse_limit(limit), location=location)
    return success_response(status.HTTP_200_OK, "Data retrieved successfully", readings)


@sensor_router.get(
    "/{sensor_id}",
    summary="Fetch the most recent reading stored under an id.",
)
async def get_sensor_data(
    sensor_id: str,
    gateway: SensorGateway = Depends(get_gateway),
) -> JSONResponse:
    reading = await gateway.get(sensor_id)
    return success_response(status.HTTP_200_OK, "Data retrieved successfully", reading)


@sensor_router.put(
    "/{sensor_id}",
    summary="Append a new reading under an existing id.",
)
async def update_sensor_data(
    sensor_id: str,
    payload: SensorReadingPayload,
    gateway: SensorGateway = Depends(get_gateway),
) -> JSONResponse:
    reading = await gateway.update(sensor_id, payload)
    return success_response(status.HTTP_200_OK, "Sensor data updated successfully", reading)


@sensor_router.delete(
    "/{sensor_id}",
    summary="Deletion is not supported for time-series data.",
)
async def delete_sensor_data(
    sensor_id: str,
    gateway: SensorGateway = Depends(get_gateway),
) -> None:
    await gateway.delete(sensor_id)


@router.get(
    "/health",
    summary="Store connectivity check.",
)
async def healthcheck(gateway: SensorGateway = Depends(get_gateway)) -> JSONResponse:
    if not await gateway.is_healthy():
        return error_response(status.HTTP_503_SERVICE_UNAVAILABLE, "Database connection failed")
    report = HealthReport(timestamp=datetime.now(timezone.utc))
    return success_response(status.HTTP_200_OK, "Service is healthy", report)


@router.get(
    "/test",
    summary="Liveness probe that does not touch the store.",
)
async def smoke_test() -> dict[str, str]:
    return {"status": "ok", "message": "API is working"}


router.include_router(sensor_router)

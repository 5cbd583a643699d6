from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import error_response, router
from logging_config import configure_logging
from services.errors import BadRequestError, GatewayError
from services.gateway import build_default_gateway
from storage.influx import build_default_store

logger = logging.getLogger(__name__)

CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
CORS_HEADERS = ["Content-Type", "Authorization"]
PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": ", ".join(CORS_METHODS),
    "Access-Control-Allow-Headers": ", ".join(CORS_HEADERS),
}


class StoreUnavailableError(RuntimeError):
    """Raised at startup when the store does not report a passing health check."""


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    gateway = build_default_gateway()
    if not await gateway.is_healthy():
        gateway.store.close()
        build_default_gateway.cache_clear()
        build_default_store.cache_clear()
        raise StoreUnavailableError("Failed to connect to InfluxDB")
    logger.info("Successfully connected to InfluxDB")
    try:
        yield
    finally:
        gateway.store.close()
        build_default_gateway.cache_clear()
        build_default_store.cache_clear()


async def _handle_gateway_error(_request: Request, exc: GatewayError) -> Response:
    return error_response(exc.status_code, exc.message)


async def _handle_validation_error(_request: Request, exc: RequestValidationError) -> Response:
    logger.info(
        "Rejected request body",
        extra={"status_code": BadRequestError.status_code, "reason": f"{len(exc.errors())} validation error(s)"},
    )
    return error_response(BadRequestError.status_code, BadRequestError.default_message)


async def _handle_http_error(_request: Request, exc: StarletteHTTPException) -> Response:
    return error_response(exc.status_code, str(exc.detail))


async def _short_circuit_options(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    if request.method == "OPTIONS":
        return Response(status_code=status.HTTP_200_OK, headers=PREFLIGHT_HEADERS)
    return await call_next(request)


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Sensor Telemetry Gateway",
        description="REST gateway storing sensor readings in InfluxDB.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_exception_handler(GatewayError, _handle_gateway_error)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, _handle_http_error)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
    )
    # Registered last so it wraps CORSMiddleware and answers every OPTIONS itself.
    app.middleware("http")(_short_circuit_options)
    app.include_router(router)
    return app

app = create_app()

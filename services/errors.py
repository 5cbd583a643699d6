"""Error kinds surfaced by the gateway to HTTP callers."""

from __future__ import annotations


class GatewayError(Exception):
    """Base class carrying the HTTP status and the client-facing message."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequestError(GatewayError):
    status_code = 400
    default_message = "Invalid JSON format"


class NotFoundError(GatewayError):
    status_code = 404
    default_message = "Sensor data not found"


class StorageError(GatewayError):
    """The store could not be reached, timed out, or rejected the call."""

    status_code = 500
    default_message = "Failed to query database"


class NotImplementedOperationError(GatewayError):
    status_code = 501
    default_message = "Delete operation not implemented for time series data"

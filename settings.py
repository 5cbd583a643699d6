from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


_INFLUX_URL_ENV = "INFLUXDB_URL"
_INFLUX_TOKEN_ENV = "INFLUXDB_TOKEN"
_INFLUX_ORG_ENV = "INFLUXDB_ORG"
_INFLUX_BUCKET_ENV = "INFLUXDB_BUCKET"
_HOST_ENV = "HOST"
_PORT_ENV = "PORT"
_LOG_LEVEL_ENV = "LOG_LEVEL"


class MissingSettingError(RuntimeError):
    """Raised when a required environment variable is not set."""

    def __init__(self, name: str) -> None:
        super().__init__(f"{name} environment variable is required")
        self.name = name


@dataclass(frozen=True)
class Settings:
    influx_url: str
    influx_token: str
    influx_org: str
    influx_bucket: str
    host: str
    port: int
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_required_env(name: str) -> str:
    value = _read_str_env(name, "")
    if not value:
        raise MissingSettingError(name)
    return value


def _read_port(default: int) -> int:
    value = os.getenv(_PORT_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if 0 < parsed < 65536 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        influx_url=_read_str_env(_INFLUX_URL_ENV, "http://influxdb:8086"),
        influx_token=_read_required_env(_INFLUX_TOKEN_ENV),
        influx_org=_read_str_env(_INFLUX_ORG_ENV, "myorg"),
        influx_bucket=_read_str_env(_INFLUX_BUCKET_ENV, "sensor_data"),
        host=_read_str_env(_HOST_ENV, "0.0.0.0"),
        port=_read_port(8080),
        log_level=_read_log_level("INFO"),
    )


def get_log_level(default: str = "INFO") -> str:
    """Resolve the log level without requiring the rest of the settings."""
    return _read_log_level(default)

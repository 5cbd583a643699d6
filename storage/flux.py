"""Flux query builders.

Every user-supplied value travels in the ``params`` mapping handed to the
query API and is referenced as ``params.<name>`` inside the query text, so
the returned strings never contain request data.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from models.records import MEASUREMENT

RECENT_WINDOW = "-24h"
LATEST_WINDOW = "-30d"

_PIVOT = '|> pivot(rowKey: ["_time"], columnKey: ["_field"], valueColumn: "_value")'


@dataclass(frozen=True)
class FluxQuery:
    text: str
    params: Dict[str, Any] = field(default_factory=dict)


def _source(window: str) -> list[str]:
    return [
        "from(bucket: params.bucket)",
        f"|> range(start: {window})",
        "|> filter(fn: (r) => r._measurement == params.measurement)",
    ]


def recent_readings_query(bucket: str, limit: int, location: Optional[str] = None) -> FluxQuery:
    """Readings from the last day, newest first, optionally for one location."""
    if limit <= 0:
        raise ValueError("limit must be positive")

    params: Dict[str, Any] = {"bucket": bucket, "measurement": MEASUREMENT, "limit": limit}
    lines = _source(RECENT_WINDOW)
    if location:
        lines.append("|> filter(fn: (r) => r.location == params.location)")
        params["location"] = location
    lines.extend(
        [
            _PIVOT,
            "|> group()",
            '|> sort(columns: ["_time"], desc: true)',
            "|> limit(n: params.limit)",
        ]
    )
    return FluxQuery(text="\n".join(lines), params=params)


def latest_reading_query(bucket: str, sensor_id: str) -> FluxQuery:
    """The most recent reading stored under ``sensor_id`` within the last 30 days."""
    params: Dict[str, Any] = {
        "bucket": bucket,
        "measurement": MEASUREMENT,
        "sensor_id": sensor_id,
    }
    lines = _source(LATEST_WINDOW)
    lines.extend(
        [
            "|> filter(fn: (r) => r.sensor_id == params.sensor_id)",
            _PIVOT,
            "|> group()",
            '|> sort(columns: ["_time"], desc: true)',
            "|> limit(n: 1)",
        ]
    )
    return FluxQuery(text="\n".join(lines), params=params)

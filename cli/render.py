from __future__ import annotations

from typing import Any, Dict, Iterable, Sequence

import typer

READING_KEYS = ("id", "timestamp", "location", "temperature", "humidity", "pressure", "altitude")


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_reading(payload: Dict[str, Any], heading: str = "Sensor Reading") -> None:
    echo_heading(heading)
    echo_key_values((key, payload.get(key)) for key in READING_KEYS)


def render_readings(readings: Sequence[Dict[str, Any]]) -> None:
    echo_heading(f"Sensor Readings ({len(readings)})")
    if not readings:
        typer.echo("No readings found.")
        return
    for reading in readings:
        typer.echo(
            f"  - {reading.get('timestamp')} {reading.get('id')}"
            f" [{reading.get('location') or '-'}]"
            f" T={reading.get('temperature')} H={reading.get('humidity')}"
            f" P={reading.get('pressure')} A={reading.get('altitude')}"
        )


def render_health(payload: Dict[str, Any]) -> None:
    echo_heading("Health")
    echo_key_values(
        [
            ("status", payload.get("status")),
            ("database", payload.get("database")),
            ("timestamp", payload.get("timestamp")),
        ]
    )

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_health, render_reading, render_readings


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the sensor telemetry gateway.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


def _build_payload(
    temperature: Optional[float],
    humidity: Optional[float],
    pressure: Optional[float],
    altitude: Optional[float],
    location: Optional[str],
    timestamp: Optional[str],
) -> Dict[str, Any]:
    candidates = {
        "temperature": temperature,
        "humidity": humidity,
        "pressure": pressure,
        "altitude": altitude,
        "location": location,
        "timestamp": timestamp,
    }
    return {key: value for key, value in candidates.items() if value is not None}


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Gateway base URL (defaults to API_BASE_URL env or http://localhost:8080).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each HTTP request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("create")
def create_command(
    ctx: typer.Context,
    sensor_id: Optional[str] = typer.Option(None, "--id", help="Reading id (generated by the server if omitted)."),
    temperature: Optional[float] = typer.Option(None, "--temperature", "-t"),
    humidity: Optional[float] = typer.Option(None, "--humidity"),
    pressure: Optional[float] = typer.Option(None, "--pressure"),
    altitude: Optional[float] = typer.Option(None, "--altitude"),
    location: Optional[str] = typer.Option(None, "--location", "-l"),
    timestamp: Optional[str] = typer.Option(None, "--timestamp", help="ISO-8601 time (defaults to now)."),
) -> None:
    """Store a new sensor reading."""
    state = _get_state(ctx)
    payload = _build_payload(temperature, humidity, pressure, altitude, location, timestamp)
    if sensor_id:
        payload["id"] = sensor_id
    reading = state.client.create_reading(payload)
    typer.secho(f"Reading stored. id={reading.get('id')}", fg=typer.colors.GREEN)
    render_reading(reading)


@app.command("list")
def list_command(
    ctx: typer.Context,
    limit: Optional[int] = typer.Option(None, "--limit", "-n", min=1, help="Maximum readings to show."),
    location: Optional[str] = typer.Option(None, "--location", "-l", help="Only readings for this location."),
) -> None:
    """List readings from the last 24 hours."""
    state = _get_state(ctx)
    readings = state.client.list_readings(limit=limit, location=location)
    render_readings(readings)


@app.command("get")
def get_command(
    ctx: typer.Context,
    sensor_id: str = typer.Argument(..., help="Reading id."),
) -> None:
    """Fetch the most recent reading for an id."""
    state = _get_state(ctx)
    render_reading(state.client.get_reading(sensor_id))


@app.command("update")
def update_command(
    ctx: typer.Context,
    sensor_id: str = typer.Argument(..., help="Reading id."),
    temperature: Optional[float] = typer.Option(None, "--temperature", "-t"),
    humidity: Optional[float] = typer.Option(None, "--humidity"),
    pressure: Optional[float] = typer.Option(None, "--pressure"),
    altitude: Optional[float] = typer.Option(None, "--altitude"),
    location: Optional[str] = typer.Option(None, "--location", "-l"),
    timestamp: Optional[str] = typer.Option(None, "--timestamp", help="ISO-8601 time (defaults to now)."),
) -> None:
    """Append a new reading under an existing id."""
    state = _get_state(ctx)
    payload = _build_payload(temperature, humidity, pressure, altitude, location, timestamp)
    reading = state.client.update_reading(sensor_id, payload)
    typer.secho(f"Reading updated. id={reading.get('id')}", fg=typer.colors.GREEN)
    render_reading(reading)


@app.command("delete")
def delete_command(
    ctx: typer.Context,
    sensor_id: str = typer.Argument(..., help="Reading id."),
) -> None:
    """Request deletion of a reading (the gateway rejects this)."""
    state = _get_state(ctx)
    state.client.delete_reading(sensor_id)


@app.command("health")
def health_command(ctx: typer.Context) -> None:
    """Check gateway and store connectivity."""
    state = _get_state(ctx)
    render_health(state.client.health())

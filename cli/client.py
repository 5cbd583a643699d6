from __future__ import annotations

from typing import Any, Dict, List, NoReturn, Optional

import httpx
import typer

from cli.config import CLIConfig

SENSOR_DATA_PATH = "/api/v1/sensor-data"


class ApiClient:
    """Minimal HTTP client for the sensor gateway."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def create_reading(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", SENSOR_DATA_PATH, json=payload)

    def list_readings(self, limit: Optional[int] = None, location: Optional[str] = None) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {}
        if limit is not None:
            params["limit"] = limit
        if location:
            params["location"] = location
        data = self._request("GET", SENSOR_DATA_PATH, params=params)
        return data or []

    def get_reading(self, sensor_id: str) -> Dict[str, Any]:
        return self._request("GET", f"{SENSOR_DATA_PATH}/{sensor_id}")

    def update_reading(self, sensor_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", f"{SENSOR_DATA_PATH}/{sensor_id}", json=payload)

    def delete_reading(self, sensor_id: str) -> None:
        self._request("DELETE", f"{SENSOR_DATA_PATH}/{sensor_id}")

    def health(self) -> Dict[str, Any]:
        return self._request("GET", "/health")

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.TransportError as exc:
            typer.secho(f"Could not reach {self._config.base_url}: {exc}", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1) from exc
        payload = response.json()
        if not isinstance(payload, dict) or payload.get("status") != "success":
            raise typer.BadParameter("Unexpected response payload from the gateway.")
        return payload.get("data")

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> NoReturn:
        message: str | None = None
        try:
            data = exc.response.json()
            message = data.get("message")
        except Exception:  # noqa: BLE001 - best effort parsing
            message = exc.response.text.strip()
        text = (
            f"Request failed with status {exc.response.status_code}: {message or 'no detail provided.'}"
        )
        typer.secho(text, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

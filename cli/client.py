from __future__ import annotations

from typing import Any, Dict
from urllib.parse import quote

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the dashboard service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.request_timeout)

    def close(self) -> None:
        self._client.close()

    def get_status(self) -> Dict[str, Any]:
        return self._get("/status")

    def get_locations(self) -> Dict[str, Any]:
        return self._get("/locations")

    def get_today(self) -> Dict[str, Any]:
        return self._get("/today")

    def get_location(self, name: str) -> Dict[str, Any]:
        return self._get(f"/locations/{quote(name, safe='')}", missing=f"Location {name} was not found.")

    def select_location(self, name: str) -> Dict[str, Any]:
        try:
            response = self._client.put("/selection", json={"location": name})
            if response.status_code == 404:
                raise typer.BadParameter(f"Location {name} was not found.")
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.TransportError as exc:
            self._handle_transport_error(exc)
        return response.json()

    def _get(self, path: str, missing: str | None = None) -> Dict[str, Any]:
        try:
            response = self._client.get(path)
            if missing is not None and response.status_code == 404:
                raise typer.BadParameter(missing)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.TransportError as exc:
            self._handle_transport_error(exc)
        return response.json()

    def _handle_transport_error(self, exc: httpx.TransportError) -> None:
        typer.secho(
            f"Could not reach {self._config.base_url}: {exc}",
            fg=typer.colors.RED,
            err=True,
        )
        raise typer.Exit(code=1)

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

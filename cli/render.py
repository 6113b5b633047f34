from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

import typer

NO_DATA = "n/a"

_BADGE_COLORS = {
    "excellent": typer.colors.GREEN,
    "good": typer.colors.BLUE,
    "warning": typer.colors.YELLOW,
    "alert": typer.colors.RED,
}


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _badge(quality: Optional[str], badge: Optional[str]) -> str:
    label = quality or "UNKNOWN"
    color = _BADGE_COLORS.get(badge or "alert", typer.colors.RED)
    return typer.style(label, fg=color)


def _flag(in_range: Optional[bool]) -> str:
    if in_range is None:
        return ""
    return "" if in_range else " (out of range)"


def _format_mean(value: Optional[float]) -> str:
    if value is None:
        return NO_DATA
    return f"{value:.1f}°C"


def render_status(payload: Dict[str, Any]) -> None:
    echo_heading("Dashboard Status")
    if not payload.get("has_data"):
        typer.echo("Loading... no readings received yet.")
    echo_key_values(
        [
            ("last_updated", payload.get("last_updated") or NO_DATA),
            ("reading_count", payload.get("reading_count")),
            ("location_count", payload.get("location_count")),
            ("sequence", payload.get("sequence")),
        ]
    )
    last_error = payload.get("last_error")
    if last_error:
        typer.secho(f"last_error: {last_error}", fg=typer.colors.YELLOW)


def render_locations(payload: Dict[str, Any]) -> None:
    echo_heading("Locations")
    locations = payload.get("locations") or []
    if not locations:
        typer.echo("No locations available.")
        return
    selected = payload.get("selected")
    for name in locations:
        marker = "*" if name == selected else "-"
        typer.echo(f"  {marker} {name}")


def render_reading(reading: Dict[str, Any]) -> None:
    flags = reading.get("parameters") or {}
    typer.echo(
        f"  - {reading.get('location_name')} [{_badge(reading.get('quality'), reading.get('badge'))}] "
        f"pH {reading.get('ph')}{_flag(flags.get('ph_in_range'))}, "
        f"{reading.get('temperature_c')}°C{_flag(flags.get('temperature_in_range'))}, "
        f"ORP {reading.get('orp_mv')} mV{_flag(flags.get('orp_in_range'))} "
        f"at {reading.get('timestamp')}"
    )


def render_today(payload: Dict[str, Any]) -> None:
    echo_heading("Today")
    if not payload.get("has_data"):
        typer.echo("Loading... no readings received yet.")
        return
    stats = payload.get("stats") or {}
    echo_key_values(
        [
            ("total", stats.get("total")),
            ("good", stats.get("good_count")),
            ("need_attention", stats.get("bad_count")),
            ("avg_temperature", _format_mean(stats.get("mean_temperature"))),
        ]
    )
    readings = payload.get("readings") or []
    typer.echo()
    if not readings:
        typer.echo("No data available for today.")
        return
    for reading in readings:
        render_reading(reading)


def render_detail(payload: Dict[str, Any]) -> None:
    headline = payload.get("headline") or {}
    echo_heading(f"Location: {payload.get('location_name')}")
    typer.echo(f"Overall quality: {_badge(headline.get('quality'), headline.get('badge'))}")
    echo_key_values(
        [
            ("pH", headline.get("ph")),
            ("temperature", f"{headline.get('temperature_c')}°C"),
            ("ORP", f"{headline.get('orp_mv')} mV"),
            ("updated", headline.get("timestamp")),
        ]
    )

    chart = payload.get("chart") or []
    typer.echo()
    echo_heading("pH Trend")
    for point in chart:
        typer.echo(f"  {point.get('label')}: {point.get('ph')}")

    log = payload.get("log") or []
    typer.echo()
    echo_heading("Status Log")
    for entry in log:
        typer.echo(
            f"  Reading {entry.get('position')} at {entry.get('timestamp')}: "
            f"{_badge(entry.get('quality'), entry.get('badge'))}"
        )


def render_selection(payload: Dict[str, Any]) -> None:
    selected = payload.get("selected")
    if selected is None:
        typer.echo("No location selected.")
        return
    typer.secho(f"Selected {selected}", fg=typer.colors.GREEN)
    detail = payload.get("detail")
    if detail:
        typer.echo()
        render_detail(detail)

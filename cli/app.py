from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import (
    render_detail,
    render_locations,
    render_selection,
    render_status,
    render_today,
)


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for inspecting the water-quality dashboard service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1, message="CLI state is uninitialized.")
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Dashboard API base URL (defaults to DASHBOARD_API_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each API request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, request_timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("status")
def status_command(ctx: typer.Context) -> None:
    """Show dataset freshness and the last fetch error."""
    state = _get_state(ctx)
    render_status(state.client.get_status())


@app.command("locations")
def locations_command(ctx: typer.Context) -> None:
    """List monitored locations; the selected one is starred."""
    state = _get_state(ctx)
    render_locations(state.client.get_locations())


@app.command("today")
def today_command(ctx: typer.Context) -> None:
    """Show today's readings with counters."""
    state = _get_state(ctx)
    render_today(state.client.get_today())


@app.command("location")
def location_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Location name exactly as reported by the source."),
) -> None:
    """Show headline values, pH trend and status log for a location."""
    state = _get_state(ctx)
    render_detail(state.client.get_location(name))


@app.command("select")
def select_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Location to focus in the detail view."),
) -> None:
    """Change the dashboard's selected location."""
    state = _get_state(ctx)
    render_selection(state.client.select_location(name))


@app.command("watch")
def watch_command(
    ctx: typer.Context,
    interval: Optional[float] = typer.Option(
        None,
        "--interval",
        help="Seconds between refreshes (defaults to CLI_WATCH_INTERVAL env or 5).",
    ),
    count: Optional[int] = typer.Option(
        None,
        "--count",
        "-n",
        min=1,
        help="Stop after this many refreshes; runs until interrupted when omitted.",
    ),
) -> None:
    """Re-render today's view on a fixed interval."""
    state = _get_state(ctx)
    delay = interval if interval is not None and interval > 0 else state.config.watch_interval
    iteration = 0
    while count is None or iteration < count:
        if iteration:
            time.sleep(delay)
            typer.echo()
        render_today(state.client.get_today())
        iteration += 1

from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import echo_key_values, render_history, render_latest, render_seed_report
from datastore.errors import StorageError
from datastore.store import SensorStore, build_default_store
from logging_config import configure_logging
from services.seeder import seed_store


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for seeding and reading the building sensor telemetry service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Telemetry API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
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


@app.command("seed")
def seed_command(
    database: Optional[Path] = typer.Option(
        None,
        "--database",
        "-d",
        dir_okay=False,
        help="SQLite file to seed (defaults to DATABASE_PATH env or ./tmp/sensors.sqlite).",
    ),
) -> None:
    """Create the schema and provision the demo sensors with a day of history."""
    configure_logging()
    store = SensorStore(database) if database is not None else build_default_store()
    try:
        store.init_schema()
        report = seed_store(store)
    except StorageError as exc:
        typer.secho(f"Seeding failed: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc
    finally:
        store.close()
    render_seed_report(report)


@app.command("latest")
def latest_command(
    ctx: typer.Context,
    follow: bool = typer.Option(
        False,
        "--follow/--no-follow",
        help="Keep polling like the dashboard does.",
    ),
    interval: Optional[float] = typer.Option(
        None,
        "--interval",
        help="Seconds between polls when following.",
    ),
    count: Optional[int] = typer.Option(
        None,
        "--count",
        min=1,
        help="Stop following after this many polls.",
    ),
) -> None:
    """Show every sensor with its most recent reading."""
    state = _get_state(ctx)
    render_latest(state.client.get_latest())
    if not follow:
        return

    poll_interval = interval if interval is not None else state.config.follow_interval
    polls = 1
    while count is None or polls < count:
        time.sleep(poll_interval)
        typer.echo()
        render_latest(state.client.get_latest())
        polls += 1


@app.command("history")
def history_command(
    ctx: typer.Context,
    sensor_id: str = typer.Argument(..., help="Sensor identifier, e.g. SENS-001."),
    limit: int = typer.Option(100, "--limit", "-n", min=1, help="Maximum readings to show."),
) -> None:
    """Show newest-first readings for one sensor."""
    state = _get_state(ctx)
    render_history(sensor_id, state.client.get_history(sensor_id, limit))


@app.command("health")
def health_command(ctx: typer.Context) -> None:
    """Check that the API is up."""
    state = _get_state(ctx)
    payload = state.client.get_health()
    echo_key_values([("status", payload.get("status")), ("timestamp", payload.get("timestamp"))])


if __name__ == "__main__":
    app()

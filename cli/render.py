from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

import typer

from models.records import SeedReport

_MISSING = "-"


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _fmt(value: Optional[Any], unit: str = "") -> str:
    if value is None:
        return _MISSING
    return f"{value}{unit}"


def render_latest(payload: Dict[str, Any]) -> None:
    echo_heading(f"Latest Readings ({payload.get('count', 0)} sensors)")
    rows = payload.get("data") or []
    if not rows:
        typer.echo("No sensors registered.")
        return
    for row in rows:
        typer.echo(
            f"  {row.get('sensor_id')} [{row.get('element_name') or row.get('element_id')}] "
            f"temp={_fmt(row.get('temperature'), 'C')} "
            f"humidity={_fmt(row.get('humidity'), '%')} "
            f"co2={_fmt(row.get('co2'), 'ppm')} "
            f"at {_fmt(row.get('timestamp'))}"
        )


def render_history(sensor_id: str, payload: Dict[str, Any]) -> None:
    echo_heading(f"History for {sensor_id} ({payload.get('count', 0)} readings)")
    rows = payload.get("data") or []
    if not rows:
        typer.echo("No readings recorded.")
        return
    for row in rows:
        typer.echo(
            f"  {row.get('timestamp')}: "
            f"temp={_fmt(row.get('temperature'), 'C')} "
            f"humidity={_fmt(row.get('humidity'), '%')} "
            f"co2={_fmt(row.get('co2'), 'ppm')}"
        )


def render_seed_report(report: SeedReport) -> None:
    echo_heading("Seed Result")
    echo_key_values(
        [
            ("added", len(report.added)),
            ("duplicates", len(report.duplicates)),
            ("failed", len(report.failed)),
            ("readings", report.reading_count),
        ]
    )
    for sensor_id in report.duplicates:
        typer.echo(f"  - {sensor_id} already exists")
    for sensor_id in report.failed:
        typer.secho(f"  - {sensor_id} could not be added", fg=typer.colors.RED)

from __future__ import annotations

from typing import Any, Iterable

import typer

from app.schemas import Reading


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_reading(reading: Reading, payload: bytes) -> None:
    echo_heading("Reading")
    echo_key_values(
        [
            ("location", f"{reading.state}/{reading.county}/{reading.city}"),
            ("pollution_index", reading.pollution_index),
            ("temperature", reading.temperature),
            ("air_pressure", reading.air_pressure),
            ("week_of_year", reading.week_of_year),
            ("year", reading.year),
        ]
    )
    typer.echo(f"payload: {payload.decode('utf-8')}")

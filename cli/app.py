from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, NoReturn, Optional
from uuid import uuid4

import typer
from pydantic import ValidationError

from app.schemas import Reading
from cli.client import AdapterClient
from cli.config import CLIConfig, load_config
from cli.render import echo_key_values, render_reading
from services.publisher import SAMPLE_READING, PublishError, ReadingPublisher, encode_reading


@dataclass
class CLIState:
    config: CLIConfig
    client: AdapterClient


app = typer.Typer(
    help="Publish synthetic climate readings for the climate updates service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)

_STATE_OPTION = typer.Option(None, "--state", help="Region code (defaults to the sample reading).")
_COUNTY_OPTION = typer.Option(None, "--county", help="County name.")
_CITY_OPTION = typer.Option(None, "--city", help="City name.")
_POLLUTION_OPTION = typer.Option(None, "--pollution-index", help="Pollution code, 100-103 are accepted.")
_TEMPERATURE_OPTION = typer.Option(None, "--temperature", help="Temperature reading.")
_PRESSURE_OPTION = typer.Option(None, "--air-pressure", help="Air pressure reading.")
_WEEK_OPTION = typer.Option(None, "--week", help="Week of year.")
_YEAR_OPTION = typer.Option(None, "--year", help="Year of the reading.")


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


def _fail(message: str) -> NoReturn:
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


def _build_reading(**overrides: Any) -> Reading:
    fields: Dict[str, Any] = SAMPLE_READING.model_dump()
    fields.update({name: value for name, value in overrides.items() if value is not None})
    try:
        return Reading.model_validate(fields)
    except ValidationError as exc:
        _fail(f"Invalid reading: {exc}")


@app.callback()
def main(
    ctx: typer.Context,
    project: Optional[str] = typer.Option(
        None, "--project", "-p", help="Google Cloud project (defaults to PROJECT env)."
    ),
    topic: Optional[str] = typer.Option(
        None, "--topic", "-t", help="Pub/Sub topic id (defaults to TOPIC env)."
    ),
    url: Optional[str] = typer.Option(
        None,
        "--url",
        "-u",
        help="Adapter URL used by 'push' (defaults to ADAPTER_URL env or http://localhost:8080/).",
    ),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="HTTP timeout in seconds."),
) -> None:
    """Entry point for the CLI."""
    config = load_config(project=project, topic=topic, adapter_url=url, timeout=timeout)
    client = AdapterClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("publish")
def publish_command(
    ctx: typer.Context,
    state: Optional[str] = _STATE_OPTION,
    county: Optional[str] = _COUNTY_OPTION,
    city: Optional[str] = _CITY_OPTION,
    pollution_index: Optional[int] = _POLLUTION_OPTION,
    temperature: Optional[float] = _TEMPERATURE_OPTION,
    air_pressure: Optional[float] = _PRESSURE_OPTION,
    week: Optional[int] = _WEEK_OPTION,
    year: Optional[int] = _YEAR_OPTION,
) -> None:
    """Publish one reading to the configured Pub/Sub topic."""
    cli_state = _get_state(ctx)
    config = cli_state.config
    if not config.project or not config.topic:
        _fail("Both a project (--project/PROJECT) and a topic (--topic/TOPIC) are required.")

    reading = _build_reading(
        state=state,
        county=county,
        city=city,
        pollution_index=pollution_index,
        temperature=temperature,
        air_pressure=air_pressure,
        week_of_year=week,
        year=year,
    )
    render_reading(reading, encode_reading(reading))

    publisher = ReadingPublisher(project=config.project, topic=config.topic)
    try:
        message_id = publisher.publish(reading)
    except PublishError as exc:
        _fail(str(exc))
    finally:
        publisher.close()
    typer.secho(
        f"Published the message successfully with the id: {message_id}",
        fg=typer.colors.GREEN,
    )


@app.command("push")
def push_command(
    ctx: typer.Context,
    state: Optional[str] = _STATE_OPTION,
    county: Optional[str] = _COUNTY_OPTION,
    city: Optional[str] = _CITY_OPTION,
    pollution_index: Optional[int] = _POLLUTION_OPTION,
    temperature: Optional[float] = _TEMPERATURE_OPTION,
    air_pressure: Optional[float] = _PRESSURE_OPTION,
    week: Optional[int] = _WEEK_OPTION,
    year: Optional[int] = _YEAR_OPTION,
    message_id: Optional[str] = typer.Option(
        None, "--message-id", help="Notification id (a random one is generated by default)."
    ),
) -> None:
    """Deliver one reading straight to the adapter, simulating a push subscription."""
    cli_state = _get_state(ctx)
    reading = _build_reading(
        state=state,
        county=county,
        city=city,
        pollution_index=pollution_index,
        temperature=temperature,
        air_pressure=air_pressure,
        week_of_year=week,
        year=year,
    )
    render_reading(reading, encode_reading(reading))

    notification_id = message_id or uuid4().hex
    typer.echo(f"Pushing to {cli_state.config.adapter_url} ...")
    status_code = cli_state.client.push_reading(reading, message_id=notification_id)
    typer.secho("Push accepted.", fg=typer.colors.GREEN)
    echo_key_values([("message_id", notification_id), ("status_code", status_code)])

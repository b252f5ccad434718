# -*- coding: utf-8 -*-
import asyncio
import json
import logging
import sys
from functools import wraps
from pathlib import Path
from typing import Annotated, Any, Awaitable, Callable, Optional

import typer
from rich.console import Console

from blackbeard.client import PirateMetricsClient
from blackbeard.config import load_settings, save_settings
from blackbeard.constants import EXIT_CODE_FAILURE
from blackbeard.errors import BlackbeardError, ConfigurationError
from blackbeard.events import EventType
from blackbeard.meta import get_version


LOG = logging.getLogger(__name__)

console = Console()

CLI_MAIN_INTRODUCTION = "Record Pirate Metrics events from the command line."
CLI_KEY_HELP = "Pirate Metrics API key. Overrides BLACKBEARD_API_KEY and config.ini."
CLI_BASE_URL_HELP = "Base URL of the Pirate Metrics API."
CLI_DEBUG_HELP = "Log every outgoing request and enable debug logging."
CLI_OCCURRED_AT_HELP = "When the event occurred, e.g. 2024-01-31T12:00:00Z."
CLI_CONFIG_PATH_HELP = "Use this config.ini instead of ~/.blackbeard/config.ini."

app = typer.Typer(help=CLI_MAIN_INTRODUCTION, add_completion=False)


def configure_logger(debug: bool) -> None:
    level = logging.DEBUG if debug else logging.CRITICAL
    logging.basicConfig(format="%(asctime)s %(name)s => %(message)s", level=level)


def output_exception(exception: Exception) -> None:
    """
    Output an exception message to stderr and exit with its exit code.
    """
    typer.secho(str(exception), fg="red", file=sys.stderr)

    exit_code = EXIT_CODE_FAILURE
    if hasattr(exception, "get_exit_code"):
        exit_code = exception.get_exit_code()

    sys.exit(exit_code)


def handle_cmd_exception(func):
    """
    Decorator turning library errors into a red message and an exit code.
    """

    @wraps(func)
    def inner(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except typer.BadParameter:
            raise
        except BlackbeardError as e:
            LOG.exception("Expected BlackbeardError happened: %s", e)
            output_exception(e)

    return inner


def run_with_client(
    ctx: typer.Context, call: Callable[[PirateMetricsClient], Awaitable[str]]
) -> None:
    """
    Build a client from the global options, run one submission and print the
    response body.
    """
    settings = load_settings(**ctx.obj)

    if settings.debug:
        logging.getLogger("blackbeard").setLevel(logging.INFO)

    async def _run() -> str:
        async with PirateMetricsClient(settings) as client:
            return await call(client)

    result = asyncio.run(_run())
    console.print(result, markup=False, highlight=False)


def version_callback(value: bool) -> None:
    if value:
        console.print(f"blackbeard {get_version() or 'unknown'}")
        raise typer.Exit()


@app.callback()
def cli(
    ctx: typer.Context,
    key: Annotated[Optional[str], typer.Option(help=CLI_KEY_HELP)] = None,
    base_url: Annotated[Optional[str], typer.Option(help=CLI_BASE_URL_HELP)] = None,
    debug: Annotated[bool, typer.Option("--debug", help=CLI_DEBUG_HELP)] = False,
    config_path: Annotated[
        Optional[Path], typer.Option("--config", help=CLI_CONFIG_PATH_HELP)
    ] = None,
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, is_eager=True),
    ] = None,
):
    """
    Record Pirate Metrics events from the command line.
    """
    configure_logger(debug)

    ctx.obj = {
        "api_key": key,
        "base_url": base_url,
        # Only an explicit --debug overrides the environment and config.ini
        "debug": True if debug else None,
        "config_path": config_path,
    }


@app.command()
@handle_cmd_exception
def acquisition(
    ctx: typer.Context,
    email: str,
    level: Annotated[Optional[float], typer.Option(help="Numerical value to track.")] = None,
    occurred_at: Annotated[Optional[str], typer.Option(help=CLI_OCCURRED_AT_HELP)] = None,
):
    """
    Send a single acquisition.
    """
    if level is not None and level.is_integer():
        level = int(level)

    run_with_client(
        ctx,
        lambda client: client.acquisition(email, level=level, occurred_at=occurred_at),
    )


@app.command()
@handle_cmd_exception
def activation(
    ctx: typer.Context,
    email: str,
    occurred_at: Annotated[Optional[str], typer.Option(help=CLI_OCCURRED_AT_HELP)] = None,
):
    """
    Send a single activation.
    """
    run_with_client(
        ctx, lambda client: client.activation(email, occurred_at=occurred_at)
    )


@app.command()
@handle_cmd_exception
def retention(
    ctx: typer.Context,
    email: str,
    occurred_at: Annotated[Optional[str], typer.Option(help=CLI_OCCURRED_AT_HELP)] = None,
):
    """
    Send a single retention.
    """
    run_with_client(
        ctx, lambda client: client.retention(email, occurred_at=occurred_at)
    )


@app.command()
@handle_cmd_exception
def referral(
    ctx: typer.Context,
    customer_email: str,
    referree_email: str,
    occurred_at: Annotated[Optional[str], typer.Option(help=CLI_OCCURRED_AT_HELP)] = None,
):
    """
    Send a single referral.
    """
    run_with_client(
        ctx,
        lambda client: client.referral(
            customer_email, referree_email, occurred_at=occurred_at
        ),
    )


@app.command()
@handle_cmd_exception
def revenue(
    ctx: typer.Context,
    email: str,
    amount_in_cents: int,
    occurred_at: Annotated[Optional[str], typer.Option(help=CLI_OCCURRED_AT_HELP)] = None,
):
    """
    Send a single revenue.
    """
    run_with_client(
        ctx,
        lambda client: client.revenue(
            email, amount_in_cents, occurred_at=occurred_at
        ),
    )


def _load_records(file: Any) -> Any:
    try:
        records = json.load(file)
    except json.JSONDecodeError as e:
        raise typer.BadParameter(f"Not valid JSON: {e}", param_hint="FILE")

    if not isinstance(records, list):
        raise typer.BadParameter("Expected a JSON array of events.", param_hint="FILE")

    return records


@app.command()
@handle_cmd_exception
def bulk(
    ctx: typer.Context,
    event_type: Annotated[
        str, typer.Argument(help="acquisitions, activations, retentions, referrals or revenues.")
    ],
    file: Annotated[
        typer.FileText, typer.Argument(help="JSON array of events, '-' for stdin.")
    ],
):
    """
    Send a bundle of events of one type in a single request.
    """
    try:
        parsed_type = EventType.parse(event_type)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="EVENT_TYPE")

    records = _load_records(file)

    run_with_client(ctx, lambda client: client.submit_many(parsed_type, records))


@app.command()
@handle_cmd_exception
def configure(
    ctx: typer.Context,
    key: Annotated[Optional[str], typer.Option(help="API key to store.")] = None,
    base_url: Annotated[Optional[str], typer.Option(help="Base URL to store.")] = None,
    debug: Annotated[
        Optional[bool], typer.Option("--debug/--no-debug", help="Debug flag to store.")
    ] = None,
):
    """
    Store settings in the [pirate_metrics] section of config.ini.
    """
    if key is None and base_url is None and debug is None:
        raise ConfigurationError("Nothing to configure: pass --key, --base-url or --debug.")

    path = save_settings(
        api_key=key,
        base_url=base_url,
        debug=debug,
        config_path=ctx.obj.get("config_path"),
    )
    console.print(f"[green]Saved settings to {path}[/green]")


def main() -> None:
    app(prog_name="blackbeard")

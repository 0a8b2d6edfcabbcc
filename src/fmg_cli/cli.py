"""Typer-based command line interface for the FortiManager/FortiAnalyzer XML API."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.json import JSON
from rich.logging import RichHandler
from rich.table import Table

from fmg_cli import __version__
from fmg_cli.catalog import ALIASES, OPERATIONS
from fmg_cli.commands.adom import adom_app
from fmg_cli.config import Settings
from fmg_cli.connection import (
    HostOption,
    InsecureOption,
    PasswordOption,
    PortOption,
    UsernameOption,
    connection_params,
)
from fmg_cli.io.bulk_input import BulkInputFormat, load_entries
from fmg_cli.models.status import SystemStatus
from fmg_cli.results import Failure
from fmg_cli.sdk import create_client

app = typer.Typer(
    no_args_is_help=True,
    help="CLI for FortiManager/FortiAnalyzer automation via the XML (SOAP) API.",
)
app.add_typer(adom_app, name="adom")
console = Console()


def _render(payload: Any) -> None:
    """Render API payloads in a readable JSON format."""

    console.print(JSON.from_data(payload, default=str))


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def common_options(
    ctx: typer.Context,
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        help="Optional .env file with FMG_CLI_* variables.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log SOAP requests and responses (password redacted).",
    ),
) -> None:
    """Load shared configuration for all commands."""

    _configure_logging(verbose)
    ctx.obj = {"settings": Settings.from_env_file(env_file)}


@app.command("version")
def show_version() -> None:
    """Show the installed fmg-cli version."""

    console.print(f"fmg-cli {__version__}")


@app.command("test-connection")
def test_connection(
    ctx: typer.Context,
    host: HostOption = None,
    username: UsernameOption = None,
    password: PasswordOption = None,
    port: PortOption = None,
    insecure: InsecureOption = False,
) -> None:
    """Validate API access with a system status call."""

    settings: Settings = ctx.obj["settings"]
    params = connection_params(settings, host, username, password, port, insecure)

    result = create_client(params).call("get_system_status")
    if isinstance(result, Failure):
        console.print(f"Connection failed: {result.error}", style="bold red")
        raise typer.Exit(code=1)

    status = SystemStatus.model_validate(result.value)
    table = Table(title=f"System status of {params.host}")
    table.add_column("Field")
    table.add_column("Value")
    for field_name, value in status.model_dump().items():
        table.add_row(field_name, "" if value is None else str(value))
    console.print(table)


@app.command("operations")
def list_operations() -> None:
    """List the supported XML API operations."""

    aliases: dict[str, list[str]] = {}
    for alias, target in ALIASES.items():
        aliases.setdefault(target, []).append(alias)

    table = Table(title="Operations")
    table.add_column("Operation")
    table.add_column("Wire call")
    table.add_column("Result")
    table.add_column("Entries")
    table.add_column("Description")

    for name, spec in sorted(OPERATIONS.items()):
        label = name
        if name in aliases:
            label = f"{name} ({', '.join(aliases[name])})"
        result = spec.payload_key if spec.mode == "payload" else spec.mode
        entries = ", ".join(entry.name for entry in spec.request.entries)
        table.add_row(label, spec.wire_operation, str(result), entries, spec.summary)

    console.print(table)


def _parse_options(pairs: list[str], options_json: str | None) -> dict[str, object]:
    options: dict[str, object] = {}
    if options_json:
        payload: object = json.loads(options_json)
        if not isinstance(payload, dict):
            raise ValueError("--options-json must be a JSON object")
        options.update(payload)
    for pair in pairs:
        key, separator, value = pair.partition("=")
        if not separator or not key.strip():
            raise ValueError(f"Options must look like key=value, got '{pair}'")
        options[key.strip()] = value
    return options


def _parse_entries(pairs: list[str], input_format: BulkInputFormat) -> dict[str, object]:
    entries: dict[str, object] = {}
    for pair in pairs:
        name, separator, source = pair.partition("=")
        if not separator or not source:
            raise ValueError(f"Entries must look like NAME=FILE, got '{pair}'")
        entries[name.strip()] = load_entries(name.strip(), source, input_format)
    return entries


@app.command("call")
def call_operation(
    ctx: typer.Context,
    operation: Annotated[str, typer.Argument(help="Operation name, see 'fmg-cli operations'.")],
    opt: Annotated[
        list[str] | None,
        typer.Option("--opt", "-o", help="Operation option as key=value. Repeatable."),
    ] = None,
    options_json: Annotated[
        str | None,
        typer.Option("--options-json", help="Operation options as a JSON object."),
    ] = None,
    entries: Annotated[
        list[str] | None,
        typer.Option(
            "--entries",
            "-e",
            help="Entry list as NAME=FILE (devices, meta, install_targets, targets).",
        ),
    ] = None,
    input_format: Annotated[
        BulkInputFormat,
        typer.Option("--format", help="Input format for entry files: auto, json, csv."),
    ] = "auto",
    host: HostOption = None,
    username: UsernameOption = None,
    password: PasswordOption = None,
    port: PortOption = None,
    insecure: InsecureOption = False,
) -> None:
    """Invoke any catalog operation and print its result as JSON."""

    if operation not in OPERATIONS and operation not in ALIASES:
        console.print(f"Unknown operation: {operation}", style="bold red")
        raise typer.Exit(code=2)

    try:
        options = _parse_options(opt or [], options_json)
        entry_lists = _parse_entries(entries or [], input_format)
    except (ValueError, OSError) as exc:
        console.print(f"Invalid input: {exc}", style="bold red")
        raise typer.Exit(code=1) from exc

    settings: Settings = ctx.obj["settings"]
    params = connection_params(settings, host, username, password, port, insecure)

    result = create_client(params).call(operation, options, **entry_lists)

    if isinstance(result, Failure):
        console.print(f"{operation} failed: {result.error}", style="bold red")
        raise typer.Exit(code=1)

    _render(result.value)

"""ADOM command group implementation."""

from __future__ import annotations

from collections.abc import Callable
from typing import Annotated, Literal

import typer
from rich.console import Console
from rich.json import JSON
from rich.table import Table

from fmg_cli.config import Settings
from fmg_cli.connection import (
    HostOption,
    InsecureOption,
    PasswordOption,
    PortOption,
    UsernameOption,
    connection_params,
)
from fmg_cli.errors import FmgError
from fmg_cli.io.bulk_input import BulkInputFormat, load_device_entries, load_meta_entries
from fmg_cli.models.spec import OptionBag
from fmg_cli.sdk import create_client
from fmg_cli.services.adom_service import AdomRecord, AdomService

adom_app = typer.Typer(no_args_is_help=True, help="Manage administrative domains (ADOMs).")
console = Console()

OutputFormat = Literal["table", "json"]

DevicesFileOption = Annotated[
    str | None,
    typer.Option(
        "--devices-file",
        help="JSON/CSV file (or '-' for stdin) of serial_number|dev_id, vdom_name|vdom_id.",
    ),
]
FormatOption = Annotated[
    BulkInputFormat,
    typer.Option("--format", help="Input format for entry files: auto, json, csv."),
]


def _build_service(
    ctx: typer.Context,
    host: str | None,
    username: str | None,
    password: str | None,
    port: int | None,
    insecure: bool,
) -> AdomService:
    settings: Settings = ctx.obj["settings"]
    params = connection_params(settings, host, username, password, port, insecure)
    client = create_client(params)
    return AdomService(client)


def _render_adoms(adoms: list[AdomRecord], output: OutputFormat) -> None:
    if output == "json":
        console.print(JSON.from_data(adoms, default=str))
        return

    table = Table(title="ADOMs")
    table.add_column("Name")
    table.add_column("OID")
    table.add_column("Version")
    table.add_column("MR")

    for adom in adoms:
        table.add_row(
            str(adom.get("name", "")),
            str(adom.get("oid", "")),
            str(adom.get("version", "")),
            str(adom.get("mr", "")),
        )

    console.print(table)


def _load_optional(
    loader: Callable[[str, BulkInputFormat], list[OptionBag]],
    file_path: str | None,
    input_format: BulkInputFormat,
) -> list[OptionBag]:
    if file_path is None:
        return []
    return loader(file_path, input_format)


def _handle_api_exception(exc: FmgError) -> None:
    console.print(f"API request failed: {exc}", style="bold red")
    raise typer.Exit(code=1) from exc


def _handle_input_exception(exc: Exception) -> None:
    console.print(f"Invalid input: {exc}", style="bold red")
    raise typer.Exit(code=1) from exc


@adom_app.command("list")
def adom_list(
    ctx: typer.Context,
    output: Annotated[
        OutputFormat,
        typer.Option("--output", help="Response format: table or json."),
    ] = "table",
    host: HostOption = None,
    username: UsernameOption = None,
    password: PasswordOption = None,
    port: PortOption = None,
    insecure: InsecureOption = False,
) -> None:
    """List ADOMs."""

    adoms: list[AdomRecord] = []
    try:
        service = _build_service(ctx, host, username, password, port, insecure)
        adoms = service.list_adoms()
    except FmgError as exc:
        _handle_api_exception(exc)

    _render_adoms(adoms, output)


@adom_app.command("get")
def adom_get(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="ADOM name.")],
    output: Annotated[
        OutputFormat,
        typer.Option("--output", help="Response format: table or json."),
    ] = "table",
    host: HostOption = None,
    username: UsernameOption = None,
    password: PasswordOption = None,
    port: PortOption = None,
    insecure: InsecureOption = False,
) -> None:
    """Get a specific ADOM."""

    adom: AdomRecord | None = None
    try:
        service = _build_service(ctx, host, username, password, port, insecure)
        adom = service.get_adom(name)
    except FmgError as exc:
        _handle_api_exception(exc)

    if adom is None:
        console.print(f"ADOM '{name}' not found", style="bold red")
        raise typer.Exit(code=1)

    _render_adoms([adom], output)


@adom_app.command("add")
def adom_add(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="ADOM name.")],
    version: Annotated[
        str | None,
        typer.Option("--version", help="ADOM major version, e.g. 500. Requires --mr."),
    ] = None,
    mr: Annotated[
        str | None,
        typer.Option("--mr", help="ADOM minor release, e.g. 2. Requires --version."),
    ] = None,
    backup_mode: Annotated[
        bool,
        typer.Option("--backup-mode/--normal-mode", help="Create the ADOM in backup mode."),
    ] = False,
    devices_file: DevicesFileOption = None,
    input_format: FormatOption = "auto",
    host: HostOption = None,
    username: UsernameOption = None,
    password: PasswordOption = None,
    port: PortOption = None,
    insecure: InsecureOption = False,
) -> None:
    """Add an ADOM, optionally assigning devices/vdoms to it.

    Devices file examples:

    CSV:
    serial_number,dev_id,vdom_name
    FGVM010000000001,,root
    ,234,vdomD
    """

    response: object = None
    try:
        devices = _load_optional(load_device_entries, devices_file, input_format)
        service = _build_service(ctx, host, username, password, port, insecure)
        response = service.add_adom(
            name,
            version=version,
            mr=mr,
            backup_mode=backup_mode,
            devices=devices,
        )
    except (ValueError, OSError) as exc:
        _handle_input_exception(exc)
    except FmgError as exc:
        _handle_api_exception(exc)

    console.print(f"ADOM '{name}' created")
    console.print(JSON.from_data(response, default=str))


@adom_app.command("edit")
def adom_edit(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="ADOM name.")],
    version: Annotated[
        str | None,
        typer.Option("--version", help="ADOM major version. Requires --mr."),
    ] = None,
    mr: Annotated[
        str | None,
        typer.Option("--mr", help="ADOM minor release. Requires --version."),
    ] = None,
    backup_mode: Annotated[
        bool | None,
        typer.Option("--backup-mode/--normal-mode", help="Switch the ADOM mode."),
    ] = None,
    devices_file: DevicesFileOption = None,
    meta_file: Annotated[
        str | None,
        typer.Option("--meta-file", help="JSON/CSV file (or '-') of meta field name,value."),
    ] = None,
    input_format: FormatOption = "auto",
    host: HostOption = None,
    username: UsernameOption = None,
    password: PasswordOption = None,
    port: PortOption = None,
    insecure: InsecureOption = False,
) -> None:
    """Edit an ADOM: mode, version, added devices/vdoms and meta fields."""

    response: object = None
    try:
        devices = _load_optional(load_device_entries, devices_file, input_format)
        meta = _load_optional(load_meta_entries, meta_file, input_format)
        service = _build_service(ctx, host, username, password, port, insecure)
        response = service.edit_adom(
            name,
            version=version,
            mr=mr,
            backup_mode=backup_mode,
            devices=devices,
            meta=meta,
        )
    except (ValueError, OSError) as exc:
        _handle_input_exception(exc)
    except FmgError as exc:
        _handle_api_exception(exc)

    console.print(f"ADOM '{name}' updated")
    console.print(JSON.from_data(response, default=str))


@adom_app.command("delete")
def adom_delete(
    ctx: typer.Context,
    name: Annotated[str | None, typer.Argument(help="ADOM name.")] = None,
    oid: Annotated[str | None, typer.Option("--oid", help="Delete by ADOM OID instead.")] = None,
    host: HostOption = None,
    username: UsernameOption = None,
    password: PasswordOption = None,
    port: PortOption = None,
    insecure: InsecureOption = False,
) -> None:
    """Delete an ADOM by name or OID."""

    try:
        service = _build_service(ctx, host, username, password, port, insecure)
        service.delete_adom(name=name, oid=oid)
    except FmgError as exc:
        _handle_api_exception(exc)

    console.print(f"ADOM '{name or oid}' deleted")

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from fmg_cli.cli import app
from fmg_cli.client import FmgClient
from fmg_cli.connection import ConnectionParams
from fmg_cli.errors import TransportFault


def test_adom_list_requires_connection_settings(runner: CliRunner) -> None:
    result = runner.invoke(
        app,
        ["adom", "list"],
        env={
            "FMG_CLI_HOST": "",
            "FMG_CLI_USERNAME": "",
            "FMG_CLI_PASSWORD": "",
        },
    )

    assert result.exit_code == 2


def test_test_connection_success(
    runner: CliRunner,
    connection_args: list[str],
    fmg_client: FmgClient,
    transport: Any,
) -> None:
    del fmg_client
    transport.respond(
        "get_system_status",
        {"get_system_status_response": {"platform_type": "FMG-VM64", "host_name": "fmg"}},
    )

    result = runner.invoke(app, ["test-connection", *connection_args])

    assert result.exit_code == 0
    assert "FMG-VM64" in result.stdout
    assert transport.last_call[0] == "get_system_status"


def test_test_connection_failure(
    runner: CliRunner,
    connection_args: list[str],
    fmg_client: FmgClient,
    transport: Any,
) -> None:
    del fmg_client
    transport.fail_with = TransportFault("connection refused")

    result = runner.invoke(app, ["test-connection", *connection_args])

    assert result.exit_code == 1
    assert "Connection failed: connection refused" in result.stdout


def test_settings_come_from_env_file(
    runner: CliRunner,
    monkeypatch: pytest.MonkeyPatch,
    transport: Any,
    tmp_path: Path,
) -> None:
    captured: list[ConnectionParams] = []

    def _create_client(params: ConnectionParams) -> FmgClient:
        captured.append(params)
        return FmgClient(transport, params.username, params.password)

    monkeypatch.setattr("fmg_cli.cli.create_client", _create_client)
    env_file = tmp_path / ".env"
    env_file.write_text(
        "FMG_CLI_HOST=fmg.lab\nFMG_CLI_USERNAME=admin\nFMG_CLI_PASSWORD=pw\nFMG_CLI_PORT=8443\n",
        encoding="utf-8",
    )

    result = runner.invoke(app, ["--env-file", str(env_file), "call", "get_adom_list"])

    assert result.exit_code == 0
    assert captured[0].endpoint == "https://fmg.lab:8443"
    assert captured[0].verify_ssl is True


def test_call_runs_operation_with_options(
    runner: CliRunner,
    connection_args: list[str],
    fmg_client: FmgClient,
    transport: Any,
) -> None:
    del fmg_client
    transport.respond("add_device", {"add_device_response": {"task_id": "42"}})

    result = runner.invoke(
        app,
        ["call", "add_device", "--opt", "ip=192.0.2.1", "--opt", "name=fw1", *connection_args],
    )

    assert result.exit_code == 0
    assert "42" in result.stdout
    body = transport.last_body()
    assert body["ip"] == "192.0.2.1"
    assert body["adminUser"] == "admin"


def test_call_reads_options_json_and_entry_files(
    runner: CliRunner,
    connection_args: list[str],
    fmg_client: FmgClient,
    transport: Any,
    tmp_path: Path,
) -> None:
    del fmg_client
    devices = tmp_path / "devices.csv"
    devices.write_text("serial_number,vdom_name\nFGVM1,root\nFGVM2,root\n", encoding="utf-8")

    result = runner.invoke(
        app,
        [
            "call",
            "add_adom",
            "--options-json",
            '{"name": "adomA", "version": "600", "mr": "2"}',
            "--entries",
            f"devices={devices}",
            *connection_args,
        ],
    )

    assert result.exit_code == 0
    _, message = transport.last_call
    assert isinstance(message, str)
    assert message.count("<deviceSNVdom>") == 2
    assert "<version>600</version>" in message


def test_call_validation_failure_returns_exit_code_1(
    runner: CliRunner,
    connection_args: list[str],
    fmg_client: FmgClient,
    transport: Any,
) -> None:
    del fmg_client
    result = runner.invoke(app, ["call", "delete_device", *connection_args])

    assert result.exit_code == 1
    assert "delete_device failed: Provide one of" in result.stdout
    assert transport.calls == []


def test_call_unknown_operation_returns_exit_code_2(
    runner: CliRunner,
    connection_args: list[str],
) -> None:
    result = runner.invoke(app, ["call", "reboot_everything", *connection_args])

    assert result.exit_code == 2
    assert "Unknown operation: reboot_everything" in result.stdout


def test_call_rejects_malformed_option(
    runner: CliRunner,
    connection_args: list[str],
) -> None:
    result = runner.invoke(app, ["call", "get_device_list", "--opt", "adom", *connection_args])

    assert result.exit_code == 1
    assert "Invalid input" in result.stdout


def test_adom_list_renders_table(
    runner: CliRunner,
    connection_args: list[str],
    fmg_client: FmgClient,
    transport: Any,
) -> None:
    del fmg_client
    transport.seed_adom("root", "3")
    transport.seed_adom("adomA", "101")

    result = runner.invoke(app, ["adom", "list", *connection_args])

    assert result.exit_code == 0
    assert "root" in result.stdout
    assert "adomA" in result.stdout


def test_adom_get_missing_returns_exit_code_1(
    runner: CliRunner,
    connection_args: list[str],
    fmg_client: FmgClient,
) -> None:
    del fmg_client
    result = runner.invoke(app, ["adom", "get", "missing", *connection_args])

    assert result.exit_code == 1
    assert "ADOM 'missing' not found" in result.stdout


def test_adom_add_with_devices_file(
    runner: CliRunner,
    connection_args: list[str],
    fmg_client: FmgClient,
    transport: Any,
    tmp_path: Path,
) -> None:
    del fmg_client
    devices = tmp_path / "devices.json"
    devices.write_text('[{"dev_id": "234", "vdom_name": "vdomD"}]', encoding="utf-8")

    result = runner.invoke(
        app,
        ["adom", "add", "adomA", "--devices-file", str(devices), *connection_args],
    )

    assert result.exit_code == 0
    assert "ADOM 'adomA' created" in result.stdout
    assert "adomA" in transport.adoms


def test_adom_add_missing_file_returns_exit_code_1(
    runner: CliRunner,
    connection_args: list[str],
) -> None:
    result = runner.invoke(
        app,
        ["adom", "add", "adomA", "--devices-file", "does-not-exist.json", *connection_args],
    )

    assert result.exit_code == 1
    assert "Invalid input" in result.stdout


def test_adom_delete_api_error_returns_exit_code_1(
    runner: CliRunner,
    connection_args: list[str],
    fmg_client: FmgClient,
    transport: Any,
) -> None:
    del fmg_client
    transport.respond(
        "delete_adom",
        {"delete_adom_response": {"error_msg": {"error_code": "1", "error_msg": "bad adom"}}},
    )

    result = runner.invoke(app, ["adom", "delete", "adomA", *connection_args])

    assert result.exit_code == 1
    assert "API request failed: bad adom" in result.stdout

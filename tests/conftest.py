from __future__ import annotations

from typing import cast

import pytest
import xmltodict
from typer.testing import CliRunner

from fmg_cli.client import FmgClient
from fmg_cli.connection import ConnectionParams
from fmg_cli.engine.message import WireMessage, serialize
from fmg_cli.errors import FmgError


class InMemoryTransport:
    """Records wire calls and answers from canned or ADOM-backed responses."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, WireMessage]] = []
        self.responses: dict[str, object] = {}
        self.adoms: dict[str, dict[str, object]] = {}
        self.fail_with: FmgError | None = None

    def seed_adom(self, name: str, oid: str, version: str = "500", mr: str = "0") -> None:
        self.adoms[name] = {"name": name, "oid": oid, "version": version, "mr": mr}

    def respond(self, wire_operation: str, response: object) -> None:
        self.responses[wire_operation] = response

    @property
    def last_call(self) -> tuple[str, WireMessage]:
        return self.calls[-1]

    def last_body(self) -> dict[str, object]:
        """Parse the last message the way the appliance would see it."""

        _, message = self.last_call
        text = message if isinstance(message, str) else serialize(message)
        return cast(dict[str, object], xmltodict.parse(f"<request>{text}</request>")["request"])

    def call(self, operation: str, message: WireMessage) -> dict[str, object]:
        self.calls.append((operation, message))
        if self.fail_with is not None:
            raise self.fail_with
        if operation in self.responses:
            return cast(dict[str, object], self.responses[operation])
        return self._answer(operation)

    def _answer(self, operation: str) -> dict[str, object]:
        ok = {"error_msg": {"error_code": "0", "error_msg": "success"}}
        if operation == "get_adom_list":
            values = list(self.adoms.values())
            payload: object = values if len(values) > 1 else (values[0] if values else None)
            return {"get_adom_list_response": {"adom_info": payload}}
        if operation == "get_adoms":
            body = self.last_body()
            name = str(body.get("names", ""))
            return {"get_adoms_response": {"adom_detail": self.adoms.get(name)}}
        if operation == "add_adom":
            body = self.last_body()
            name = str(body["name"])
            self.seed_adom(name, str(len(self.adoms) + 100), str(body["version"]), str(body["mr"]))
            return {"add_adom_response": ok}
        if operation == "delete_adom":
            body = self.last_body()
            self.adoms.pop(str(body.get("adomName", "")), None)
            return {"delete_adom_response": ok}
        return {f"{operation}_response": ok}


class RecordingReporter:
    def __init__(self) -> None:
        self.faults: list[FmgError] = []

    def report(self, fault: FmgError) -> None:
        self.faults.append(fault)


@pytest.fixture
def transport() -> InMemoryTransport:
    return InMemoryTransport()


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def client(transport: InMemoryTransport, reporter: RecordingReporter) -> FmgClient:
    return FmgClient(transport, "api-user", "super-secret", reporter=reporter)


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def connection_args() -> list[str]:
    return [
        "--host",
        "fmg.example.com",
        "--username",
        "api-user",
        "--password",
        "super-secret",
    ]


@pytest.fixture
def fmg_client(monkeypatch: pytest.MonkeyPatch, transport: InMemoryTransport) -> FmgClient:
    client = FmgClient(transport, "api-user", "super-secret", reporter=RecordingReporter())

    def _create_client(_params: ConnectionParams) -> FmgClient:
        return client

    monkeypatch.setattr("fmg_cli.cli.create_client", _create_client)
    monkeypatch.setattr("fmg_cli.commands.adom.create_client", _create_client)
    return client

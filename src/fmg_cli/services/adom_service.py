"""Business logic for ADOM commands."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TypeAlias, cast

from fmg_cli.client import FmgClient
from fmg_cli.models.spec import OptionBag

AdomRecord: TypeAlias = dict[str, object]


class AdomService:
    """Service wrapper for ADOM operations.

    Failed calls raise the ``FmgError`` carried by the result.
    """

    def __init__(self, client: FmgClient):
        self._client = client

    def list_adoms(self) -> list[AdomRecord]:
        response = self._client.call("get_adom_list").unwrap()
        return self._parse_records(response)

    def get_adom(self, name: str) -> AdomRecord | None:
        response = self._client.call("get_adom_by_name", {"adom": name}).unwrap()
        records = self._parse_records(response)
        return records[0] if records else None

    def add_adom(
        self,
        name: str,
        *,
        version: str | None = None,
        mr: str | None = None,
        backup_mode: bool = False,
        devices: Sequence[OptionBag] = (),
    ) -> object:
        options: dict[str, object] = {
            "name": name,
            "version": version,
            "mr": mr,
            "is_backup_mode": "1" if backup_mode else "0",
        }
        return self._client.call("add_adom", options, devices=list(devices)).unwrap()

    def edit_adom(
        self,
        name: str,
        *,
        version: str | None = None,
        mr: str | None = None,
        backup_mode: bool | None = None,
        devices: Sequence[OptionBag] = (),
        meta: Sequence[OptionBag] = (),
    ) -> object:
        options: dict[str, object] = {"name": name, "version": version, "mr": mr}
        if backup_mode is not None:
            options["is_backup_mode"] = "1" if backup_mode else "0"
        return self._client.call(
            "edit_adom",
            options,
            devices=list(devices),
            meta=list(meta),
        ).unwrap()

    def delete_adom(self, name: str | None = None, oid: str | None = None) -> object:
        return self._client.call("delete_adom", {"adom_name": name, "adom_oid": oid}).unwrap()

    def _parse_records(self, response: object) -> list[AdomRecord]:
        # A single ADOM comes back as a mapping, several as a list.
        if response is None:
            return []
        items: list[object]
        if isinstance(response, list):
            items = cast(list[object], response)
        else:
            items = [response]
        return [
            dict(cast(Mapping[str, object], item)) for item in items if isinstance(item, Mapping)
        ]

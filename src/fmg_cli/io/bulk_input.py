"""Bulk input parsing for repeated operation entries."""

from __future__ import annotations

import csv
import io
import json
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Literal, cast

from pydantic import BaseModel

from fmg_cli.models.entries import AdomTarget, DeviceVdomEntry, InstallTarget, MetaFieldEntry
from fmg_cli.models.spec import OptionBag

BulkInputFormat = Literal["auto", "json", "csv"]
Record = dict[str, object]


def load_device_entries(source: str, input_format: BulkInputFormat = "auto") -> list[OptionBag]:
    """Load device/vdom entries (``devices``) from a JSON/CSV file or stdin."""

    return _load_entries(source, input_format, DeviceVdomEntry, _canonicalize_device)


def load_meta_entries(source: str, input_format: BulkInputFormat = "auto") -> list[OptionBag]:
    """Load ADOM meta field entries (``meta``) from a JSON/CSV file or stdin."""

    return _load_entries(source, input_format, MetaFieldEntry, _canonicalize_meta)


def load_install_targets(source: str, input_format: BulkInputFormat = "auto") -> list[OptionBag]:
    """Load policy package install targets (``install_targets``).

    CSV rows use ``type`` (dev or grp), ``oid``, ``name`` and optionally
    ``vdom_oid``/``vdom_name``. JSON records may also be nested already
    (``{"dev": {"name": "fw1", "vdom": {"name": "root"}}}``).
    """

    return _load_entries(source, input_format, InstallTarget, _canonicalize_install_target)


def load_adom_targets(source: str, input_format: BulkInputFormat = "auto") -> list[OptionBag]:
    """Load global policy assignment targets (``targets``)."""

    return _load_entries(source, input_format, AdomTarget, _canonicalize_adom_target)


ENTRY_LOADERS: dict[str, Callable[[str, BulkInputFormat], list[OptionBag]]] = {
    "devices": load_device_entries,
    "meta": load_meta_entries,
    "install_targets": load_install_targets,
    "targets": load_adom_targets,
}


def load_entries(
    name: str,
    source: str,
    input_format: BulkInputFormat = "auto",
) -> list[OptionBag]:
    """Load entries for the entry argument ``name``."""

    loader = ENTRY_LOADERS.get(name)
    if loader is None:
        raise ValueError(
            f"Unknown entry type '{name}'. Expected one of: {', '.join(ENTRY_LOADERS)}"
        )
    return loader(source, input_format)


def _load_entries(
    source: str,
    input_format: BulkInputFormat,
    model: type[BaseModel],
    canonicalize: Callable[[Record], Record],
) -> list[OptionBag]:
    records = _load_records(source, input_format)
    return [
        model.model_validate(canonicalize(record)).model_dump(exclude_none=True)
        for record in records
    ]


def _load_records(source: str, input_format: BulkInputFormat) -> list[Record]:
    text = _read_text(source)
    resolved_format = _resolve_format(source, text, input_format)

    if resolved_format == "json":
        records = _parse_json(text)
    else:
        records = _parse_csv(text)

    if not records:
        raise ValueError("Input data did not contain any records")
    return records


def _read_text(source: str) -> str:
    if source == "-":
        content = sys.stdin.read()
    else:
        content = Path(source).read_text(encoding="utf-8")

    if not content.strip():
        raise ValueError("Input is empty")
    return content


def _resolve_format(
    source: str,
    text: str,
    input_format: BulkInputFormat,
) -> Literal["json", "csv"]:
    if input_format == "json":
        return "json"
    if input_format == "csv":
        return "csv"

    if source != "-":
        suffix = Path(source).suffix.lower()
        if suffix == ".json":
            return "json"
        if suffix == ".csv":
            return "csv"

    stripped = text.lstrip()
    if stripped.startswith("[") or stripped.startswith("{"):
        return "json"
    return "csv"


def _parse_json(text: str) -> list[Record]:
    payload: object = json.loads(text)
    raw_records: list[object]

    if isinstance(payload, list):
        raw_records = cast(list[object], payload)
    else:
        payload_dict = _normalize_record(payload)
        entries = payload_dict.get("entries") if payload_dict is not None else None
        if not isinstance(entries, list):
            raise ValueError(
                "JSON input must be a list of records or an object with an 'entries' list"
            )
        raw_records = cast(list[object], entries)

    records: list[Record] = []
    for raw_record in raw_records:
        record = _normalize_record(raw_record)
        if record is None:
            raise ValueError("All JSON records must be objects with string keys")
        records.append(record)
    return records


def _parse_csv(text: str) -> list[Record]:
    reader: csv.DictReader[str] = csv.DictReader(io.StringIO(text))
    if not reader.fieldnames:
        raise ValueError("CSV input must include a header row")

    records: list[Record] = []
    for row in reader:
        record: Record = {}
        for key, value in row.items():
            if key:
                record[key.strip()] = value
        records.append(record)
    return records


def _canonicalize_device(record: Record) -> Record:
    return _collect(
        record,
        {
            "serial_number": ["serial_number", "serialNumber", "SN", "sn", "serial"],
            "dev_id": ["dev_id", "devId", "devID", "ID", "id"],
            "vdom_name": ["vdom_name", "vdomName", "vdom"],
            "vdom_id": ["vdom_id", "vdomId", "vdomID"],
        },
    )


def _canonicalize_meta(record: Record) -> Record:
    canonical = _collect(record, {"name": ["name", "Name", "field"]})
    value = _pick(record, ["value", "Value"])
    if value is not None:
        canonical["value"] = str(value)
    return canonical


def _canonicalize_install_target(record: Record) -> Record:
    canonical: Record = {}
    for kind in ("dev", "grp"):
        nested = _normalize_record(record.get(kind))
        if nested is not None:
            canonical[kind] = nested
    if canonical:
        return canonical

    kind = _text(_pick(record, ["type", "kind", "target_type"]))
    if kind is None:
        raise ValueError("Install target rows need a 'type' column (dev or grp)")
    kind = kind.lower()
    if kind in {"device", "dev"}:
        kind = "dev"
    elif kind in {"group", "grp"}:
        kind = "grp"
    else:
        raise ValueError(f"Unsupported install target type: {kind}")

    target = _collect(record, {"oid": ["oid"], "name": ["name"]})
    if kind == "dev":
        vdom = _collect(record, {"oid": ["vdom_oid", "vdomOid"], "name": ["vdom_name", "vdom"]})
        if vdom:
            target["vdom"] = vdom
    return {kind: target}


def _canonicalize_adom_target(record: Record) -> Record:
    canonical = _collect(record, {"name": ["name", "adom", "adom_name"]})
    pkg = _normalize_record(record.get("pkg"))
    if pkg is None:
        pkg = _collect(record, {"oid": ["pkg_oid", "pkgOid"], "name": ["pkg_name", "pkgName"]})
    canonical["pkg"] = pkg
    return canonical


def _collect(record: Record, aliases: dict[str, list[str]]) -> Record:
    canonical: Record = {}
    for key, keys in aliases.items():
        value = _text(_pick(record, keys))
        if value is not None:
            canonical[key] = value
    return canonical


def _pick(source: Record, keys: list[str]) -> object | None:
    for key in keys:
        if key in source:
            return source[key]
    return None


def _text(value: object | None) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    if text == "":
        return None
    return text


def _normalize_record(value: object) -> Record | None:
    if not isinstance(value, dict):
        return None

    normalized: Record = {}
    for key, item in cast(dict[object, object], value).items():
        if not isinstance(key, str):
            return None
        normalized[key] = item
    return normalized

from io import StringIO

import pytest

from fmg_cli.io.bulk_input import (
    load_adom_targets,
    load_device_entries,
    load_entries,
    load_install_targets,
    load_meta_entries,
)


def test_load_device_entries_from_csv_file(tmp_path) -> None:
    source = tmp_path / "devices.csv"
    source.write_text(
        "serial_number,dev_id,vdom_name\nFGVM1,,vdomA\n,234,vdomD\n",
        encoding="utf-8",
    )

    entries = load_device_entries(str(source))

    assert entries == [
        {"serial_number": "FGVM1", "vdom_name": "vdomA"},
        {"dev_id": "234", "vdom_name": "vdomD"},
    ]


def test_load_device_entries_accepts_wire_style_keys(tmp_path) -> None:
    source = tmp_path / "devices.json"
    source.write_text('[{"SN": "FGVM1", "vdomID": 3}]', encoding="utf-8")

    entries = load_device_entries(str(source))

    assert entries == [{"serial_number": "FGVM1", "vdom_id": "3"}]


def test_load_device_entries_rejects_missing_vdom(tmp_path) -> None:
    source = tmp_path / "devices.json"
    source.write_text('[{"serial_number": "FGVM1"}]', encoding="utf-8")

    with pytest.raises(ValueError, match="vdom_name or vdom_id"):
        load_device_entries(str(source))


def test_load_meta_entries_from_stdin(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("sys.stdin", StringIO("name,value\nowner,netops\n"))

    entries = load_meta_entries("-")

    assert entries == [{"name": "owner", "value": "netops"}]


def test_load_install_targets_from_csv_rows(tmp_path) -> None:
    source = tmp_path / "targets.csv"
    source.write_text(
        "type,oid,name,vdom_name\ndev,,fw1,root\ngrp,7,,\n",
        encoding="utf-8",
    )

    entries = load_install_targets(str(source))

    assert entries == [
        {"dev": {"name": "fw1", "vdom": {"name": "root"}}},
        {"grp": {"oid": "7"}},
    ]


def test_load_install_targets_from_nested_json(tmp_path) -> None:
    source = tmp_path / "targets.json"
    source.write_text('{"entries": [{"dev": {"oid": 12}}]}', encoding="utf-8")

    entries = load_install_targets(str(source))

    assert entries == [{"dev": {"oid": "12"}}]


def test_load_install_targets_rejects_unknown_type(tmp_path) -> None:
    source = tmp_path / "targets.csv"
    source.write_text("type,name\nswitch,sw1\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Unsupported install target type"):
        load_install_targets(str(source))


def test_load_adom_targets_from_csv(tmp_path) -> None:
    source = tmp_path / "targets.csv"
    source.write_text("name,pkg_name\nadomA,default\n", encoding="utf-8")

    entries = load_adom_targets(str(source))

    assert entries == [{"name": "adomA", "pkg": {"name": "default"}}]


def test_load_entries_dispatches_by_name(tmp_path) -> None:
    source = tmp_path / "meta.json"
    source.write_text('[{"name": "site", "value": "lab"}]', encoding="utf-8")

    assert load_entries("meta", str(source)) == [{"name": "site", "value": "lab"}]
    with pytest.raises(ValueError, match="Unknown entry type 'widgets'"):
        load_entries("widgets", str(source))


def test_format_detection_falls_back_to_content(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("sys.stdin", StringIO('[{"name": "adomA", "pkg": {"oid": "5"}}]'))

    entries = load_adom_targets("-")

    assert entries == [{"name": "adomA", "pkg": {"oid": "5"}}]


def test_empty_input_is_rejected(tmp_path) -> None:
    source = tmp_path / "devices.csv"
    source.write_text("   \n", encoding="utf-8")

    with pytest.raises(ValueError, match="Input is empty"):
        load_device_entries(str(source))

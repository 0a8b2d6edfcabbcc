import pytest
import xmltodict

from fmg_cli.catalog import get_operation
from fmg_cli.engine.message import build, serialize, to_wire
from fmg_cli.engine.validation import validate
from fmg_cli.errors import ValidationError
from fmg_cli.models.spec import OptionBag

CREDENTIALS: OptionBag = {"service_pass": {"user_id": "api-user", "password": "secret"}}


def _build(operation: str, options: OptionBag, **entries: object) -> dict[str, object] | str:
    request = get_operation(operation).request
    return build(request, validate(request, options, entries), prefix=CREDENTIALS)


def test_plain_options_build_a_mapping() -> None:
    message = _build("add_adom", {"name": "adomA"})

    assert message == {
        "servicePass": {"userID": "api-user", "password": "secret"},
        "name": "adomA",
        "isBackupMode": "0",
        "version": "500",
        "mr": "0",
    }


def test_repeated_device_entries_switch_to_text() -> None:
    message = _build(
        "add_adom",
        {"name": "adomA"},
        devices=[
            {"serial_number": "FGVM1", "vdom_name": "vdomA"},
            {"dev_id": "234", "vdom_name": "vdomD"},
        ],
    )

    assert isinstance(message, str)
    assert message.startswith("<servicePass><userID>api-user</userID>")
    assert message.endswith(
        "<deviceSNVdom><SN>FGVM1</SN><vdomName>vdomA</vdomName></deviceSNVdom>"
        "<deviceIDVdom><ID>234</ID><vdomName>vdomD</vdomName></deviceIDVdom>"
    )


def test_same_named_siblings_are_all_kept() -> None:
    message = _build(
        "add_adom",
        {"name": "adomA"},
        devices=[
            {"serial_number": "FGVM1", "vdom_name": "root"},
            {"serial_number": "FGVM2", "vdom_id": "3"},
        ],
    )

    assert isinstance(message, str)
    parsed = xmltodict.parse(f"<request>{message}</request>")["request"]
    assert parsed["deviceSNVdom"] == [
        {"SN": "FGVM1", "vdomName": "root"},
        {"SN": "FGVM2", "vdomID": "3"},
    ]


def test_single_device_entry_stays_a_mapping() -> None:
    message = _build(
        "edit_adom",
        {"name": "adomA"},
        devices={"dev_id": "234", "vdom_id": "3"},
    )

    assert isinstance(message, dict)
    assert message["addDeviceIDVdom"] == {"ID": "234", "vdomID": "3"}


def test_serial_number_wins_when_both_identifiers_are_present() -> None:
    message = _build(
        "add_adom",
        {"name": "adomA"},
        devices={"serial_number": "FGVM1", "dev_id": "234", "vdom_name": "root"},
    )

    assert isinstance(message, dict)
    assert message["deviceSNVdom"] == {"SN": "FGVM1", "vdomName": "root"}
    assert "deviceIDVdom" not in message


def test_entry_values_are_not_rewritten() -> None:
    message = _build(
        "add_adom",
        {"name": "adomA"},
        devices=[{"serial_number": "devId-lab", "vdom_name": "serialNumber"}],
    )

    assert "<SN>devId-lab</SN><vdomName>serialNumber</vdomName>" in message


def test_meta_fields_are_wrapped() -> None:
    message = _build(
        "edit_adom",
        {"name": "adomA"},
        meta=[{"name": "owner", "value": "netops"}, {"name": "site", "value": "lab"}],
    )

    assert isinstance(message, str)
    assert message.endswith(
        "<metafields>"
        "<metafield><name>owner</name><value>netops</value></metafield>"
        "<metafield><name>site</name><value>lab</value></metafield>"
        "</metafields>"
    )


def test_install_targets_interleave_devices_and_groups() -> None:
    message = _build(
        "add_policy_package",
        {"policy_package_name": "pkg1"},
        install_targets=[
            {"dev": {"name": "fw1", "vdom": {"name": "root"}}},
            {"grp": {"oid": "7"}},
        ],
    )

    assert isinstance(message, str)
    assert (
        "<packageInstallTarget>"
        "<dev><name>fw1</name><vdom><name>root</name></vdom></dev>"
        "<grp><oid>7</oid></grp>"
        "</packageInstallTarget>"
    ) in message


def test_operation_fixups_rename_dev_id() -> None:
    message = _build("get_device_vdom_list", {"dev_id": "234"})

    assert isinstance(message, dict)
    assert message["devID"] == "234"


def test_message_starts_with_credentials() -> None:
    message = _build("get_adom_list", {})

    assert isinstance(message, dict)
    assert next(iter(message)) == "servicePass"


def test_to_wire_recurses_into_nested_options() -> None:
    assert to_wire({"package_install_target": {"dev_id": "1", "run_on_db": "true"}}) == {
        "packageInstallTarget": {"devId": "1", "runOnDB": "true"},
    }


def test_serialize_writes_fragment_without_declaration() -> None:
    assert serialize({"name": "a", "mr": "0"}) == "<name>a</name><mr>0</mr>"


def test_keys_normalizing_to_one_wire_name_are_rejected() -> None:
    with pytest.raises(ValidationError, match="'dev_id' and 'devId' both map to wire name 'devId'"):
        _build("get_device_list", {"dev_id": "1", "devId": "2"})


def test_options_cannot_replace_the_credentials_block() -> None:
    with pytest.raises(ValidationError, match="'credentials service_pass' and 'service_pass'"):
        _build("get_adom_list", {"service_pass": "x"})


def test_to_wire_rejects_colliding_nested_keys() -> None:
    with pytest.raises(ValidationError, match="wire name 'runOnDB'"):
        to_wire({"target": {"run_on_db": "true", "runOnDB": "false"}})

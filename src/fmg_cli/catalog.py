"""Catalog of supported FortiManager/FortiAnalyzer XML API operations.

Every operation is data: its wire call, where the result lives in the response
and the option rules checked before sending. Adding an operation means adding
an entry here.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from types import MappingProxyType

from fmg_cli.engine.naming import DEVICE_ENTRY_FIXUPS
from fmg_cli.errors import UnknownOperationError
from fmg_cli.models.spec import (
    DateRange,
    EntrySpec,
    EntryVariant,
    Floor,
    NumberRange,
    OperationSpec,
    OptionBag,
    RequestSpec,
    UnwrapMode,
)

DEVICE_REF = ("dev_id", "serial_number")

SYSTEM_STATUS_FIELDS: Mapping[str, str] = MappingProxyType(
    {
        "platform_type": "platform_type",
        "version": "version",
        "serial_number": "serial_number",
        "bios_version": "bios_version",
        "host_name": "host_name",
        "max_num_admin_domains": "max_num_admin_domains",
        "max_num_device_group": "max_num_device_group",
        "admin_domain_conf": "admin_domain_conf",
        "fips_mode": "fips_mode",
    }
)


def _check_install_target(entry: OptionBag, options: OptionBag) -> str | None:
    dev = entry.get("dev")
    if not isinstance(dev, Mapping):
        return None
    vdom = dev.get("vdom")
    if vdom is None:
        if str(options.get("fg_is_not_vdom_mode", "0")) != "1":
            return "target is a device and not a vdom while fg_is_not_vdom_mode is not 1"
        return None
    if not isinstance(vdom, Mapping) or (vdom.get("oid") is None and vdom.get("name") is None):
        return "dev.vdom must contain oid or name"
    return None


def _device_vdom_entries(tag_prefix: str) -> EntrySpec:
    return EntrySpec(
        name="devices",
        variants=(
            EntryVariant(key="serial_number", tag=f"{tag_prefix}device_sn_vdom"),
            EntryVariant(key="dev_id", tag=f"{tag_prefix}device_id_vdom"),
        ),
        requires=(("vdom_name", "vdom_id"),),
        fixups=DEVICE_ENTRY_FIXUPS,
    )


META_ENTRIES = EntrySpec(
    name="meta",
    variants=(EntryVariant(key="name", tag="metafield"),),
    requires=(("value",),),
    wrapper="metafields",
)

INSTALL_TARGET_ENTRIES = EntrySpec(
    name="install_targets",
    variants=(
        EntryVariant(key="grp", tag="grp", requires=(("grp.oid", "grp.name"),), nested=True),
        EntryVariant(key="dev", tag="dev", requires=(("dev.oid", "dev.name"),), nested=True),
    ),
    wrapper="package_install_target",
    check=_check_install_target,
)

ADOM_TARGET_ENTRIES = EntrySpec(
    name="targets",
    variants=(EntryVariant(key="name", tag="adom_list"),),
    requires=(("pkg.oid", "pkg.name"),),
    required=True,
)


def _device_ref(spec: RequestSpec | None = None) -> RequestSpec:
    """Add the "exactly one of dev_id or serial_number" rule to a request spec."""

    spec = spec or RequestSpec()
    return replace(
        spec,
        one_of=(DEVICE_REF, *spec.one_of),
        exclusive=(DEVICE_REF, *spec.exclusive),
    )


def _op(
    name: str,
    payload_key: str | None,
    request: RequestSpec | None = None,
    *,
    wire: str | None = None,
    mode: UnwrapMode = "payload",
    fields: Mapping[str, str] | None = None,
    summary: str = "",
) -> OperationSpec:
    wire_operation = wire or name
    return OperationSpec(
        name=name,
        wire_operation=wire_operation,
        container_key=f"{wire_operation}_response",
        payload_key=payload_key,
        request=request or RequestSpec(),
        mode=mode,
        fields=fields,
        summary=summary,
    )


_OPERATIONS = (
    _op(
        "add_adom",
        "error_msg",
        RequestSpec(
            required=("name",),
            defaults={"is_backup_mode": "0", "version": "500", "mr": "0"},
            co_required=(("version", "mr"),),
            entries=(_device_vdom_entries(""),),
        ),
        summary="Add an ADOM, optionally assigning devices/vdoms.",
    ),
    _op(
        "add_device",
        "task_id",
        RequestSpec(
            required=("ip", "name"),
            defaults={"adom": "root", "admin_user": "admin", "password": ""},
        ),
        summary="Import a device by IP as a managed device.",
    ),
    _op(
        "add_group",
        "error_msg",
        RequestSpec(
            required=("name",),
            defaults={"adom": "root"},
            exclusive=(("device_sn", "device_id"),),
        ),
        summary="Add a device group, optionally with one member device.",
    ),
    _op(
        "add_policy_package",
        "policy_package_oid",
        RequestSpec(
            required=("policy_package_name",),
            defaults={"adom": "root", "is_global": "0"},
            local=("fg_is_not_vdom_mode",),
            entries=(INSTALL_TARGET_ENTRIES,),
        ),
        summary="Create, clone or rename a policy package and add install targets.",
    ),
    _op(
        "assign_global_policy",
        "task_id",
        RequestSpec(
            defaults={
                "adom": "Global",
                "policy_package_name": "default",
                "all_objects": "0",
                "install_to_device": "0",
                "check_assignd_dup": "0",
            },
            entries=(ADOM_TARGET_ENTRIES,),
        ),
        summary="Assign a global policy package to ADOMs/packages.",
    ),
    _op(
        "create_script",
        "return",
        RequestSpec(
            required=("adom", "name", "content"),
            defaults={
                "is_global": "0",
                "type": "CLI",
                "description": "created via XML API",
                "overwrite": "0",
            },
        ),
        summary="Create a CLI or TCL script.",
    ),
    _op(
        "delete_adom",
        "error_msg",
        RequestSpec(one_of=(("adom_name", "adom_oid"),), exclusive=(("adom_name", "adom_oid"),)),
        summary="Delete an ADOM by name or OID.",
    ),
    _op(
        "delete_config_rev",
        "error_msg",
        _device_ref(
            RequestSpec(one_of=(("rev_name", "rev_id"),), exclusive=(("rev_name", "rev_id"),))
        ),
        summary="Delete a configuration revision.",
    ),
    _op("delete_device", "task_id", _device_ref(), summary="Delete a managed device."),
    _op(
        "delete_group",
        "error_msg",
        RequestSpec(
            required=("adom",),
            one_of=(("grp_name", "grp_id"),),
            exclusive=(("grp_name", "grp_id"),),
            renames={"grp_name": "name"},
        ),
        summary="Delete a device group.",
    ),
    _op(
        "delete_script",
        None,
        RequestSpec(required=("name",), defaults={"type": "CLI"}),
        mode="constant",
        summary="Delete a script.",
    ),
    _op(
        "edit_adom",
        "error_msg",
        RequestSpec(
            required=("name",),
            co_required=(("version", "mr"),),
            entries=(_device_vdom_entries("add_"), META_ENTRIES),
        ),
        summary="Edit an ADOM: mode, version, devices/vdoms and meta fields.",
    ),
    _op(
        "edit_group_membership",
        "error_msg",
        RequestSpec(
            defaults={"adom": "root"},
            one_of=(
                ("grp_name", "grp_id"),
                (
                    "add_device_sn_list",
                    "add_device_id_list",
                    "del_device_sn_list",
                    "del_device_id_list",
                    "add_group_name_list",
                    "add_group_id_list",
                    "del_group_name_list",
                    "del_group_id_list",
                ),
            ),
            exclusive=(("grp_name", "grp_id"),),
            renames={"grp_name": "name"},
        ),
        summary="Add or remove device group members.",
    ),
    _op(
        "get_adom_by_name",
        "adom_detail",
        RequestSpec(defaults={"adom": "root"}, renames={"adom": "names"}),
        wire="get_adoms",
        summary="Get ADOM details by name.",
    ),
    _op(
        "get_adom_by_oid",
        "adom_detail",
        RequestSpec(defaults={"adom_id": "3"}, renames={"adom_id": "adom_ids"}),
        wire="get_adoms",
        summary="Get ADOM details by OID.",
    ),
    _op("get_adom_list", "adom_info", summary="List ADOMs."),
    _op(
        "get_config",
        "return",
        _device_ref(RequestSpec(required=("revision_number",))),
        summary="Get a configuration revision.",
    ),
    _op(
        "get_config_revision_history",
        "return",
        _device_ref(
            RequestSpec(
                date_ranges=(DateRange("min_checkin_date", "max_checkin_date"),),
                number_ranges=(NumberRange("min_revision_number", "max_revision_number"),),
            )
        ),
        summary="List configuration revision history.",
    ),
    _op(
        "get_device",
        "device_detail",
        _device_ref(
            RequestSpec(renames={"serial_number": "serial_numbers", "dev_id": "dev_ids"})
        ),
        wire="get_devices",
        summary="Get device details.",
    ),
    _op("get_device_license_list", "return", summary="List device licenses."),
    _op(
        "get_device_list",
        "device_detail",
        RequestSpec(defaults={"adom": "root", "detail": "1"}),
        summary="List managed devices.",
    ),
    _op(
        "get_device_vdom_list",
        "return",
        RequestSpec(
            one_of=(("dev_name", "dev_id"),),
            exclusive=(("dev_name", "dev_id"),),
            fixups=(("devId", "devID"),),
        ),
        summary="List the vdoms of a device.",
    ),
    _op(
        "get_faz_archive",
        "file_list",
        RequestSpec(required=("adom", "dev_id", "file_name", "type")),
        summary="Download an archived file (base64).",
    ),
    _op("get_faz_config", "config", summary="Get the FortiAnalyzer/FortiManager configuration."),
    _op(
        "get_faz_generated_report",
        "return",
        RequestSpec(required=("adom", "report_date", "report_name")),
        summary="Download a generated report (base64).",
    ),
    _op(
        "get_group",
        "group_detail",
        RequestSpec(
            defaults={"adom": "root"},
            one_of=(("name", "grp_id"),),
            renames={"name": "names", "grp_id": "grp_ids"},
        ),
        wire="get_groups",
        summary="Get device group details.",
    ),
    _op(
        "get_group_list",
        "group_detail",
        RequestSpec(defaults={"adom": "root", "detail": "1"}),
        summary="List device groups.",
    ),
    _op("get_instlog", "inst_log", _device_ref(), summary="Get installation logs of a device."),
    _op(
        "get_package_list",
        "return",
        RequestSpec(defaults={"adom": "root"}),
        summary="List policy packages.",
    ),
    _op(
        "get_script",
        "return",
        RequestSpec(required=("script_name",), renames={"script_name": "name"}),
        summary="Get script details.",
    ),
    _op(
        "get_script_log",
        "return",
        _device_ref(RequestSpec(required=("script_name",))),
        summary="Get the log of a script run on a device.",
    ),
    _op(
        "get_script_log_summary",
        "return",
        _device_ref(RequestSpec(defaults={"max_logs": "1000"})),
        summary="Summarize scripts run on a device.",
    ),
    _op(
        "get_system_status",
        None,
        mode="fields",
        fields=SYSTEM_STATUS_FIELDS,
        summary="Get appliance system status.",
    ),
    _op(
        "get_task_detail",
        "task_list",
        RequestSpec(required=("task_id",), defaults={"adom": "root"}),
        wire="get_task_list",
        summary="Get task details.",
    ),
    _op(
        "import_policy",
        "report",
        RequestSpec(
            one_of=(("adom_name", "adom_id"), ("dev_name", "dev_id"), ("vdom_name", "vdom_id")),
            exclusive=(("adom_name", "adom_id"), ("dev_name", "dev_id"), ("vdom_name", "vdom_id")),
            renames={"adom_id": "adom_oid"},
        ),
        summary="Import a device policy into the configuration database.",
    ),
    _op(
        "install_config",
        "task_id",
        _device_ref(
            RequestSpec(
                required=("adom", "pkgoid"),
                renames={"rev_name": "new_rev_name", "validate": "install_validate"},
            )
        ),
        summary="Install a policy package to a device.",
    ),
    _op(
        "list_faz_generated_reports",
        "report_list",
        RequestSpec(
            defaults={"adom": "root"},
            date_ranges=(DateRange("start_date", "end_date", strict=True),),
        ),
        summary="List generated reports.",
    ),
    _op("list_revision_id", "rev_id", _device_ref(), summary="Get revision IDs of a device."),
    _op(
        "remove_faz_archive",
        "error_msg",
        RequestSpec(required=("adom", "dev_id", "file_name", "type")),
        summary="Remove an archived file.",
    ),
    _op(
        "retrieve_config",
        "task_id",
        _device_ref(RequestSpec(renames={"rev_name": "new_rev_name"})),
        summary="Retrieve a device configuration into the database.",
    ),
    _op(
        "revert_config",
        "error_msg",
        _device_ref(RequestSpec(required=("rev_id",))),
        summary="Revert a device to a configuration revision.",
    ),
    _op(
        "run_faz_report",
        "error_msg",
        RequestSpec(required=("report_template",), defaults={"adom": "root"}),
        summary="Run a report template.",
    ),
    _op(
        "run_script",
        "task_id",
        RequestSpec(
            required=("name", "serial_number"),
            defaults={"is_global": "false", "run_on_db": "false", "type": "CLI"},
        ),
        summary="Run a script on a device or the database.",
    ),
    _op(
        "search_faz_log",
        "logs.data",
        RequestSpec(
            required=("device_name",),
            defaults={
                "adom": "root",
                "check_archive": "0",
                "compression": "tar",
                "content": "logs",
                "format": "rawFormat",
                "log_type": "traffic",
                "max_num_matches": "10",
                "start_index": "1",
            },
            floors=(Floor("max_num_matches", 1, "10"), Floor("start_index", 1, "1")),
        ),
        summary="Search device logs.",
    ),
    _op(
        "set_faz_config",
        "task_id",
        RequestSpec(required=("config",), defaults={"adom": "root"}),
        summary="Apply CLI configuration to the appliance.",
    ),
)

OPERATIONS: Mapping[str, OperationSpec] = MappingProxyType({op.name: op for op in _OPERATIONS})

ALIASES: Mapping[str, str] = MappingProxyType(
    {
        "edit_policy_package": "add_policy_package",
        "get_fmg_config": "get_faz_config",
        "set_fmg_config": "set_faz_config",
    }
)


def get_operation(name: str) -> OperationSpec:
    """Look up an operation by name or alias."""

    try:
        return OPERATIONS[ALIASES.get(name, name)]
    except KeyError:
        raise UnknownOperationError(name) from None

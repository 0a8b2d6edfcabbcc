"""Option key to wire field name conversion.

The FortiManager XML API mostly uses lowerCamelCase element names, but a number
of names capitalize more than one letter of a word (``deviceSN``, ``runOnDB``,
``addDeviceIDVdom``) or replace a whole word (``serialNumber`` becomes ``SN``
inside device/vdom entries). Those cannot be derived from word boundaries, so
they live in ordered fixup tables that are applied by exact substring
replacement after plain camel-casing.
"""

from __future__ import annotations

from typing import TypeAlias

import re
from collections.abc import Iterable

Fixups: TypeAlias = tuple[tuple[str, str], ...]

# Applied to every generated field name. No replacement may produce text that
# another pattern matches, which keeps ``fixup`` idempotent.
FIELD_FIXUPS: Fixups = (
    ("userId", "userID"),
    ("deviceSn", "deviceSN"),
    ("deviceId", "deviceID"),
    ("DeviceSn", "DeviceSN"),
    ("DeviceId", "DeviceID"),
    ("GroupId", "GroupID"),
    ("runOnDb", "runOnDB"),
    ("dlpArchiveType", "DLPArchiveType"),
)

# Applied only inside device/vdom entries (deviceSNVdom, addDeviceIDVdom, ...).
DEVICE_ENTRY_FIXUPS: Fixups = (
    ("serialNumber", "SN"),
    ("devId", "ID"),
    ("vdomId", "vdomID"),
)

_SNAKE_BOUNDARY_ACRONYM = re.compile(r"([A-Z]+)([A-Z][a-z])")
_SNAKE_BOUNDARY_WORD = re.compile(r"([a-z\d])([A-Z])")


def camelize(key: str) -> str:
    """Convert ``snake_case`` into ``snakeCase``, leaving other letters untouched."""

    head, *rest = key.split("_")
    return head + "".join(word[:1].upper() + word[1:] for word in rest)


def fixup(text: str, fixups: Iterable[tuple[str, str]] = FIELD_FIXUPS) -> str:
    """Apply a fixup table to generated text by exact, ordered substring replacement."""

    for pattern, replacement in fixups:
        text = text.replace(pattern, replacement)
    return text


def normalize(key: str, fixups: Iterable[tuple[str, str]] = FIELD_FIXUPS) -> str:
    """Map an option key to its wire field name."""

    return fixup(camelize(key), fixups)


def snake_case(tag: str) -> str:
    """Map a wire tag back to a response key (``addAdomResponse`` -> ``add_adom_response``)."""

    text = _SNAKE_BOUNDARY_ACRONYM.sub(r"\1_\2", tag)
    text = _SNAKE_BOUNDARY_WORD.sub(r"\1_\2", text)
    return text.replace("-", "_").replace(".", "_").lower()

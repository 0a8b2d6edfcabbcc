"""Wire message construction.

A message is normally a mapping of unique wire field names that the transport
serializes with xmltodict. When an entry argument is given as a sequence, its
entries become sibling elements that may share a name (``deviceSNVdom`` twice)
or interleave with differently named ones (``dev`` then ``grp``). A mapping
cannot express that, so the whole message switches to serialized text: the
mapping part is written first and each entry fragment is appended in input
order.
"""

from __future__ import annotations

from typing import TypeAlias

from collections.abc import Mapping

import xmltodict

from fmg_cli.engine.naming import FIELD_FIXUPS, Fixups, normalize
from fmg_cli.engine.validation import ValidatedOptions, select_variant
from fmg_cli.errors import ValidationError
from fmg_cli.models.spec import EntrySpec, OptionBag, RequestSpec

WireMessage: TypeAlias = dict[str, object] | str


def build(
    spec: RequestSpec,
    validated: ValidatedOptions,
    prefix: OptionBag | None = None,
) -> WireMessage:
    """Build the wire message for already validated options.

    ``prefix`` (the credentials block) is placed before the operation fields.
    Returns a mapping, or a text blob when any entry argument is a sequence.
    """

    fixups: Fixups = FIELD_FIXUPS + spec.fixups
    message: dict[str, object] = {}
    sources: dict[str, str] = {}
    if prefix:
        _merge(message, sources, prefix, fixups, label="credentials {}")
    _merge(message, sources, validated.fields, fixups)

    repeated: list[tuple[EntrySpec, tuple[OptionBag, ...]]] = []
    for name, value in validated.entries.items():
        entry_spec = _entry_spec(spec, name)
        if isinstance(value, Mapping):
            element = _entry_element(entry_spec, value, fixups)
            if entry_spec.wrapper:
                element = {normalize(entry_spec.wrapper, fixups): element}
            for tag, content in element.items():
                _claim(sources, tag, f"{name} entry")
                message[tag] = content
        else:
            repeated.append((entry_spec, value))

    if not repeated:
        return message

    parts = [serialize(message)] if message else []
    for entry_spec, entries in repeated:
        parts.append(_serialize_entries(entry_spec, entries, fixups))
    return "".join(parts)


def to_wire(options: OptionBag, fixups: Fixups = FIELD_FIXUPS) -> dict[str, object]:
    """Rename option keys to wire names, recursing into nested mappings.

    Raises ``ValidationError`` when two keys map to the same wire name.
    """

    wire: dict[str, object] = {}
    _merge(wire, {}, options, fixups)
    return wire


def _merge(
    wire: dict[str, object],
    sources: dict[str, str],
    options: OptionBag,
    fixups: Fixups,
    label: str = "{}",
) -> None:
    for key, value in options.items():
        name = normalize(key, fixups)
        _claim(sources, name, label.format(key))
        wire[name] = _value_to_wire(value, fixups)


def _claim(sources: dict[str, str], name: str, source: str) -> None:
    if name in sources:
        raise ValidationError(
            f"Options '{sources[name]}' and '{source}' both map to wire name '{name}'"
        )
    sources[name] = source


def serialize(message: Mapping[str, object]) -> str:
    """Serialize a wire mapping to an XML fragment (no declaration, many roots allowed)."""

    return xmltodict.unparse(message, full_document=False)


def _value_to_wire(value: object, fixups: Fixups) -> object:
    if isinstance(value, Mapping):
        return to_wire(value, fixups)
    if isinstance(value, (list, tuple)):
        return [_value_to_wire(item, fixups) for item in value]
    return value


def _entry_spec(spec: RequestSpec, name: str) -> EntrySpec:
    entry_spec = spec.entry_spec(name)
    if entry_spec is None:
        raise ValidationError(f"Operation does not accept '{name}' entries")
    return entry_spec


def _entry_element(entry_spec: EntrySpec, entry: OptionBag, fixups: Fixups) -> dict[str, object]:
    variant = select_variant(entry_spec, entry)
    if variant is None:
        raise ValidationError(f"{entry_spec.name}: entry does not match any element variant")

    content: object
    if variant.nested:
        content = entry[variant.key]
    else:
        # Identifying keys of the other variants do not belong in this element.
        others = {other.key for other in entry_spec.variants if other is not variant}
        content = {key: value for key, value in entry.items() if key not in others}
    if not isinstance(content, Mapping):
        raise ValidationError(f"{entry_spec.name}: '{variant.key}' must be a mapping")

    tag = normalize(variant.tag, fixups)
    return {tag: to_wire(content, fixups + entry_spec.fixups)}


def _serialize_entries(
    entry_spec: EntrySpec,
    entries: tuple[OptionBag, ...],
    fixups: Fixups,
) -> str:
    fragments = [serialize(_entry_element(entry_spec, entry, fixups)) for entry in entries]
    if not entry_spec.wrapper:
        return "".join(fragments)
    wrapper = normalize(entry_spec.wrapper, fixups)
    return f"<{wrapper}>{''.join(fragments)}</{wrapper}>"

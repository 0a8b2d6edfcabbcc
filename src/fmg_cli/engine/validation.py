"""Option validation run before a request message is built."""

from __future__ import annotations

from typing import TypeAlias

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType

from fmg_cli.errors import ValidationError
from fmg_cli.models.spec import EntrySpec, EntryVariant, OptionBag, RequestSpec

logger = logging.getLogger(__name__)

EntryValue: TypeAlias = OptionBag | tuple[OptionBag, ...]


def _empty_entries() -> Mapping[str, EntryValue]:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class ValidatedOptions:
    """Options after checks, soft filtering, defaults and renames.

    ``entries`` holds a single mapping for an entry argument passed as one
    mapping, or a tuple for one passed as a sequence.
    """

    fields: Mapping[str, object]
    entries: Mapping[str, EntryValue] = field(default_factory=_empty_entries)


def validate(
    spec: RequestSpec,
    options: OptionBag | None = None,
    entries: Mapping[str, object] | None = None,
) -> ValidatedOptions:
    """Validate caller options against ``spec``.

    Hard rule violations raise ``ValidationError``. Soft filters (date and
    number ranges, floors) never raise: bad values are logged and left out.
    """

    present = {key: value for key, value in (options or {}).items() if value is not None}

    _check_required(spec, present)
    _check_one_of(spec, present)
    _check_exclusive(spec, present)
    _check_co_required(spec, present)

    fields = dict(present)
    for date_range in spec.date_ranges:
        _apply_date_range(fields, date_range.low, date_range.high, date_range.strict)
    for number_range in spec.number_ranges:
        _apply_number_range(fields, number_range.low, number_range.high)
    for floor in spec.floors:
        _apply_floor(fields, floor.key, floor.minimum, floor.default)
    for key, default in spec.defaults.items():
        fields.setdefault(key, default)

    validated_entries = _validate_entries(spec, entries or {}, fields)

    renamed: dict[str, object] = {}
    sources: dict[str, str] = {}
    for key, value in fields.items():
        if key in spec.local:
            continue
        target = str(spec.renames.get(key, key))
        if target in sources:
            raise ValidationError(
                f"Options '{sources[target]}' and '{key}' both set '{target}'"
            )
        sources[target] = key
        renamed[target] = value

    return ValidatedOptions(
        fields=MappingProxyType(renamed),
        entries=MappingProxyType(validated_entries),
    )


def _check_required(spec: RequestSpec, present: OptionBag) -> None:
    missing = [key for key in spec.required if key not in present]
    if missing:
        raise ValidationError(f"Missing required option(s): {', '.join(missing)}")


def _check_one_of(spec: RequestSpec, present: OptionBag) -> None:
    for group in spec.one_of:
        if not any(key in present for key in group):
            raise ValidationError(f"Provide one of: {' or '.join(group)}")


def _check_exclusive(spec: RequestSpec, present: OptionBag) -> None:
    for group in spec.exclusive:
        supplied = [key for key in group if key in present]
        if len(supplied) > 1:
            raise ValidationError(f"Options are mutually exclusive: {', '.join(supplied)}")


def _check_co_required(spec: RequestSpec, present: OptionBag) -> None:
    for group in spec.co_required:
        supplied = [key for key in group if key in present]
        if supplied and len(supplied) != len(group):
            missing = [key for key in group if key not in present]
            raise ValidationError(
                f"Option(s) {', '.join(missing)} required when {', '.join(supplied)} provided"
            )


def parse_wire_date(value: object) -> str | None:
    """Parse a loosely formatted date/time into the appliance format, or None.

    Values carrying a UTC offset are converted to UTC first.
    """

    parsed = _parse_date(value)
    return None if parsed is None else format_wire_date(parsed)


def format_wire_date(value: datetime) -> str:
    # Years are always four digits here, unlike strftime("%Y").
    return value.isoformat(timespec="seconds")


def _parse_date(value: object) -> datetime | None:
    if not isinstance(value, datetime):
        try:
            value = datetime.fromisoformat(str(value).strip())
        except ValueError:
            return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _parse_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _apply_date_range(fields: dict[str, object], low: str, high: str, strict: bool) -> None:
    if low in fields and high in fields:
        low_date = _parse_date(fields[low])
        high_date = _parse_date(fields[high])
        if low_date is None or high_date is None:
            logger.warning(
                "Invalid date format in %s/%s, executing without date filter", low, high
            )
        elif high_date < low_date or (strict and high_date == low_date):
            logger.warning(
                "%s comes before %s, executing without date filter", high, low
            )
        else:
            fields[low] = format_wire_date(low_date)
            fields[high] = format_wire_date(high_date)
            return
        del fields[low]
        del fields[high]
        return

    for key in (low, high):
        if key not in fields:
            continue
        parsed = parse_wire_date(fields[key])
        if parsed is None:
            logger.warning("Invalid date format in %s, executing without it", key)
            del fields[key]
        else:
            fields[key] = parsed


def _apply_number_range(fields: dict[str, object], low: str, high: str) -> None:
    if low in fields and high in fields:
        low_value = _parse_int(fields[low])
        high_value = _parse_int(fields[high])
        if low_value is not None and high_value is not None and high_value >= low_value:
            return
        logger.warning(
            "%s/%s are not an ascending integer range, executing without that filter",
            low,
            high,
        )
        del fields[low]
        del fields[high]
        return

    for key in (low, high):
        if key in fields and _parse_int(fields[key]) is None:
            logger.warning("%s is not an integer, executing without it", key)
            del fields[key]


def _apply_floor(fields: dict[str, object], key: str, minimum: int, default: str) -> None:
    if key not in fields:
        return
    value = _parse_int(fields[key])
    if value is None or value < minimum:
        logger.warning("%s must be at least %d, using %s", key, minimum, default)
        fields[key] = default


def _validate_entries(
    spec: RequestSpec,
    entries: Mapping[str, object],
    fields: OptionBag,
) -> dict[str, EntryValue]:
    validated: dict[str, EntryValue] = {}

    for name, value in entries.items():
        entry_spec = spec.entry_spec(name)
        if entry_spec is None:
            raise ValidationError(f"Operation does not accept '{name}' entries")
        if value is None or value is False:
            continue

        if isinstance(value, Mapping):
            _check_entry(entry_spec, value, name, fields)
            validated[name] = MappingProxyType(dict(value))
        elif isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
            if not value:
                continue
            items: list[OptionBag] = []
            for index, item in enumerate(value):
                label = f"{name}[{index}]"
                if not isinstance(item, Mapping):
                    raise ValidationError(f"{label}: entry must be a mapping")
                _check_entry(entry_spec, item, label, fields)
                items.append(MappingProxyType(dict(item)))
            validated[name] = tuple(items)
        else:
            raise ValidationError(f"{name}: must be a mapping or a sequence of mappings")

    for entry_spec in spec.entries:
        if entry_spec.required and entry_spec.name not in validated:
            raise ValidationError(f"Missing required entries: {entry_spec.name}")

    return validated


def select_variant(entry_spec: EntrySpec, entry: OptionBag) -> EntryVariant | None:
    """Pick the element variant whose identifying key is present in ``entry``."""

    for variant in entry_spec.variants:
        if entry.get(variant.key) is not None:
            return variant
    return None


def lookup(entry: OptionBag, path: str) -> object | None:
    """Read a dotted path (``pkg.oid``) from a nested entry."""

    current: object = entry
    for part in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
    return current


def _check_entry(entry_spec: EntrySpec, entry: OptionBag, label: str, fields: OptionBag) -> None:
    variant = select_variant(entry_spec, entry)
    if variant is None:
        keys = " or ".join(variant.key for variant in entry_spec.variants)
        raise ValidationError(f"{label}: entry must contain {keys}")

    for group in (*entry_spec.requires, *variant.requires):
        if all(lookup(entry, path) is None for path in group):
            raise ValidationError(f"{label}: entry must contain {' or '.join(group)}")

    if entry_spec.check is not None:
        problem = entry_spec.check(entry, fields)
        if problem:
            raise ValidationError(f"{label}: {problem}")

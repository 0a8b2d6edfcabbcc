"""Static request/response metadata for catalog operations."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Literal, TypeAlias

from fmg_cli.engine.naming import Fixups

OptionBag: TypeAlias = Mapping[str, object]
EntryCheck: TypeAlias = Callable[[OptionBag, OptionBag], str | None]

UnwrapMode = Literal["payload", "fields", "constant"]


def _frozen(mapping: Mapping[str, object] | None = None) -> Mapping[str, object]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True, slots=True)
class EntryVariant:
    """Element tag chosen for an entry when ``key`` is present in it.

    With ``nested`` the entry is ``{key: {...}}`` and the inner mapping becomes
    the element content (install targets: ``{"dev": {...}}``).
    """

    key: str
    tag: str
    requires: tuple[tuple[str, ...], ...] = ()
    nested: bool = False


@dataclass(frozen=True, slots=True)
class EntrySpec:
    """Rules for one "one or many" sub-entry argument."""

    name: str
    variants: tuple[EntryVariant, ...]
    requires: tuple[tuple[str, ...], ...] = ()
    wrapper: str | None = None
    fixups: Fixups = ()
    required: bool = False
    check: EntryCheck | None = None


@dataclass(frozen=True, slots=True)
class DateRange:
    low: str
    high: str
    strict: bool = False


@dataclass(frozen=True, slots=True)
class NumberRange:
    low: str
    high: str


@dataclass(frozen=True, slots=True)
class Floor:
    key: str
    minimum: int
    default: str


@dataclass(frozen=True, slots=True)
class RequestSpec:
    """Option rules for one operation."""

    required: tuple[str, ...] = ()
    defaults: Mapping[str, object] = field(default_factory=_frozen)
    one_of: tuple[tuple[str, ...], ...] = ()
    exclusive: tuple[tuple[str, ...], ...] = ()
    co_required: tuple[tuple[str, ...], ...] = ()
    renames: Mapping[str, object] = field(default_factory=_frozen)
    date_ranges: tuple[DateRange, ...] = ()
    number_ranges: tuple[NumberRange, ...] = ()
    floors: tuple[Floor, ...] = ()
    entries: tuple[EntrySpec, ...] = ()
    fixups: Fixups = ()
    local: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "defaults", _frozen(self.defaults))
        object.__setattr__(self, "renames", _frozen(self.renames))

    def entry_spec(self, name: str) -> EntrySpec | None:
        for entry in self.entries:
            if entry.name == name:
                return entry
        return None


@dataclass(frozen=True, slots=True)
class OperationSpec:
    """Catalog entry: how to call an operation and where its result lives."""

    name: str
    wire_operation: str
    container_key: str
    payload_key: str | None
    request: RequestSpec = field(default_factory=RequestSpec)
    mode: UnwrapMode = "payload"
    fields: Mapping[str, str] | None = None
    summary: str = ""

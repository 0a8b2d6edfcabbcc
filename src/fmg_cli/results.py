"""Result values returned by every catalog operation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, TypeAlias

from fmg_cli.errors import FmgError


@dataclass(frozen=True, slots=True)
class Success:
    """Payload extracted from a successful call."""

    value: object
    ok: Literal[True] = True

    def unwrap(self) -> object:
        return self.value


@dataclass(frozen=True, slots=True)
class Failure:
    """Typed error produced by validation, transport or unwrapping."""

    error: FmgError
    ok: Literal[False] = False

    def unwrap(self) -> object:
        raise self.error


CallResult: TypeAlias = Success | Failure

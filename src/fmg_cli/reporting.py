"""Failure reporting hook invoked by the client before returning a Failure."""

from __future__ import annotations

import logging
from typing import Protocol

from fmg_cli.errors import FmgError

logger = logging.getLogger(__name__)


class ErrorReporter(Protocol):
    def report(self, fault: FmgError) -> None: ...


class LoggingErrorReporter:
    """Default reporter: one ERROR record per failed call."""

    def __init__(self, log: logging.Logger | None = None):
        self._log = log or logger

    def report(self, fault: FmgError) -> None:
        self._log.error("%s: %s", fault.code, fault)

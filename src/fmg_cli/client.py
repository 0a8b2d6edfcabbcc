"""Call boundary for catalog operations.

Every operation runs validate -> build -> transport -> unwrap. Engine errors
are reported and returned as ``Failure``; only unknown operation names raise.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from functools import partial

from fmg_cli.catalog import ALIASES, OPERATIONS, get_operation
from fmg_cli.engine.message import build
from fmg_cli.engine.unwrap import unwrap, unwrap_constant, unwrap_fields
from fmg_cli.engine.validation import validate
from fmg_cli.errors import FmgError, ParseError, ValidationError
from fmg_cli.models.spec import OperationSpec, OptionBag
from fmg_cli.reporting import ErrorReporter, LoggingErrorReporter
from fmg_cli.results import CallResult, Failure, Success
from fmg_cli.transport import Transport

logger = logging.getLogger(__name__)


class FmgClient:
    """Invoke catalog operations by name or as attributes.

    ``client.add_adom({"name": "adomA"}, devices=[...])`` is the same as
    ``client.call("add_adom", {"name": "adomA"}, devices=[...])``.
    """

    def __init__(
        self,
        transport: Transport,
        username: str,
        password: str,
        reporter: ErrorReporter | None = None,
    ):
        self._transport = transport
        self._username = username
        self._password = password
        self._reporter = reporter or LoggingErrorReporter()

    def call(
        self,
        operation: str,
        options: OptionBag | None = None,
        entries: object = None,
        /,
        **named_entries: object,
    ) -> CallResult:
        spec = get_operation(operation)
        if entries is not None:
            if not spec.request.entries:
                return self._fail(spec, ValidationError(f"{operation} does not accept entries"))
            named_entries = {spec.request.entries[0].name: entries, **named_entries}

        try:
            return Success(self._execute(spec, options, named_entries))
        except FmgError as exc:
            return self._fail(spec, exc)

    def _execute(
        self,
        spec: OperationSpec,
        options: OptionBag | None,
        entries: Mapping[str, object],
    ) -> object:
        validated = validate(spec.request, options, entries)
        message = build(spec.request, validated, prefix=self._credentials())
        logger.debug("Calling %s as %s", spec.name, spec.wire_operation)
        raw = self._transport.call(spec.wire_operation, message)

        if spec.mode == "constant":
            return unwrap_constant(raw)
        if spec.mode == "fields":
            if spec.fields is None:
                raise ParseError(f"{spec.name} has no field list")
            return unwrap_fields(raw, spec.fields, spec.container_key)
        if spec.payload_key is None:
            raise ParseError(f"{spec.name} has no payload key")
        return unwrap(raw, spec.container_key, spec.payload_key)

    def _credentials(self) -> OptionBag:
        return {"service_pass": {"user_id": self._username, "password": self._password}}

    def _fail(self, spec: OperationSpec, error: FmgError) -> Failure:
        try:
            self._reporter.report(error)
        except Exception:
            logger.exception("Error reporter failed while reporting %s", spec.name)
        return Failure(error)

    def __getattr__(self, name: str) -> Callable[..., CallResult]:
        if name in OPERATIONS or name in ALIASES:
            return partial(self.call, name)
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def __dir__(self) -> list[str]:
        return sorted({*super().__dir__(), *OPERATIONS, *ALIASES})

"""Response envelope unwrapping."""

from __future__ import annotations

from collections.abc import Mapping
from typing import cast

from fmg_cli.errors import ApiError, ParseError

ERROR_KEY = "error_msg"
DELETE_SCRIPT_SUCCESS = "0"


def unwrap(raw: object, container_key: str, payload_key: str) -> object:
    """Return the payload of a standard response envelope.

    ``payload_key`` may be a dotted path (``logs.data``) when the payload sits
    deeper inside the container.
    """

    container = _container(raw, container_key)
    raise_for_error(container)

    current: object = container
    for part in payload_key.split("."):
        if not isinstance(current, Mapping) or part not in current:
            raise ParseError(f"Response '{container_key}' has no '{payload_key}' payload")
        current = cast(Mapping[str, object], current)[part]
    return current


def unwrap_fields(
    raw: object,
    fields: Mapping[str, str],
    container_key: str | None = None,
) -> dict[str, object]:
    """Extract a fixed set of fields from a response that has no payload key.

    ``fields`` maps result keys to response keys. Absent fields are ``None``.
    """

    source = _container(raw, container_key) if container_key else _as_mapping(raw, "response")
    raise_for_error(source)
    return {result_key: source.get(response_key) for result_key, response_key in fields.items()}


def unwrap_constant(raw: object, value: str = DELETE_SCRIPT_SUCCESS) -> str:
    """Success value for operations whose response carries nothing to read."""

    del raw
    return value


def raise_for_error(container: Mapping[str, object]) -> None:
    """Raise ``ApiError`` when the container holds a non-zero embedded error block."""

    block = container.get(ERROR_KEY)
    if block is None:
        return
    if not isinstance(block, Mapping):
        raise ParseError(f"Malformed error block: {block!r}")

    error = cast(Mapping[str, object], block)
    raw_code = error.get("error_code", 0)
    try:
        code = int(str(raw_code).strip() or 0)
    except ValueError as exc:
        raise ParseError(f"Non-numeric error_code: {raw_code!r}") from exc

    if code != 0:
        raise ApiError(str(error.get("error_msg") or "Unknown API error"), error_code=code)


def _container(raw: object, container_key: str) -> Mapping[str, object]:
    response = _as_mapping(raw, "response")
    if container_key not in response:
        raise ParseError(f"Response has no '{container_key}' container")
    container = response[container_key]
    if container is None:
        return {}
    return _as_mapping(container, container_key)


def _as_mapping(value: object, label: str) -> Mapping[str, object]:
    if not isinstance(value, Mapping):
        raise ParseError(f"Expected '{label}' to be a mapping, got {type(value).__name__}")
    return cast(Mapping[str, object], value)

"""Error types raised by the request engine and returned by the client."""

from __future__ import annotations


class FmgError(Exception):
    """Base class for every failure a catalog operation can produce."""

    code = "fmg_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(FmgError):
    """Bad, missing or contradictory caller options. Raised before any network call."""

    code = "validation_error"


class TransportFault(FmgError):
    """Network, TLS, HTTP or SOAP-level failure of the single transport attempt."""

    code = "transport_fault"


class ApiError(FmgError):
    """The appliance answered with a non-zero embedded error code."""

    code = "api_error"

    def __init__(self, message: str, error_code: int):
        super().__init__(message)
        self.error_code = error_code

    def __str__(self) -> str:
        return f"{self.message} (error_code={self.error_code})"


class ParseError(FmgError):
    """The response envelope did not have the shape the catalog expects."""

    code = "parse_error"


class UnknownOperationError(KeyError):
    """Programmer error: the operation name is not in the catalog."""

    def __init__(self, operation: str):
        super().__init__(operation)
        self.operation = operation

    def __str__(self) -> str:
        return f"Unknown operation: {self.operation}"

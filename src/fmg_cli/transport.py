"""SOAP transport for the FortiManager/FortiAnalyzer XML API."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Protocol, TypeAlias, cast
from xml.parsers.expat import ExpatError

import requests
import xmltodict

from fmg_cli.engine.message import WireMessage, serialize
from fmg_cli.engine.naming import camelize, snake_case
from fmg_cli.errors import TransportFault

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "http://r200806.ws.fmg.fortinet.com/"
SOAP_ENV_NAMESPACE = "http://schemas.xmlsoap.org/soap/envelope/"

_PASSWORD_RE = re.compile(r"<password>.*?</password>", re.DOTALL)

Response: TypeAlias = dict[str, object]


class Transport(Protocol):
    """Single synchronous request/response call used by the client."""

    def call(self, operation: str, message: WireMessage) -> Response: ...


class SoapTransport:
    """Post SOAP 1.1 envelopes over HTTPS and decode the reply body.

    The ``requests`` session is kept for the lifetime of the transport and is
    not safe to share between threads.
    """

    def __init__(
        self,
        endpoint: str,
        namespace: str = DEFAULT_NAMESPACE,
        verify: bool = True,
        timeout: float = 30,
        session: requests.Session | None = None,
    ):
        self._endpoint = endpoint
        self._namespace = namespace
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.verify = verify

    def call(self, operation: str, message: WireMessage) -> Response:
        wire_operation = camelize(operation)
        envelope = self.envelope(wire_operation, message)
        logger.debug("%s request: %s", wire_operation, _PASSWORD_RE.sub("<password>***</password>", envelope))

        try:
            response = self._session.post(
                self._endpoint,
                data=envelope.encode("utf-8"),
                headers={
                    "Content-Type": "text/xml; charset=utf-8",
                    "SOAPAction": f'"{self._namespace}{wire_operation}"',
                },
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise TransportFault(f"{wire_operation} request failed: {exc}") from exc

        logger.debug("%s response (HTTP %s): %s", wire_operation, response.status_code, response.text)

        try:
            document = xmltodict.parse(response.content, xml_attribs=False)
        except ExpatError as exc:
            if response.status_code >= 400:
                raise TransportFault(
                    f"HTTP {response.status_code}: {response.text[:200]}"
                ) from exc
            raise TransportFault(f"Malformed XML in {wire_operation} response: {exc}") from exc

        body = decode_body(document)
        fault = body.get("fault")
        if fault is not None:
            raise TransportFault(f"SOAP fault: {_fault_message(fault)}")
        if response.status_code >= 400:
            raise TransportFault(f"HTTP {response.status_code}: {response.text[:200]}")
        return body

    def envelope(self, wire_operation: str, message: WireMessage) -> str:
        content = message if isinstance(message, str) else serialize(message)
        return (
            '<?xml version="1.0" encoding="UTF-8"?>'
            f'<soapenv:Envelope xmlns:soapenv="{SOAP_ENV_NAMESPACE}" xmlns:ns="{self._namespace}">'
            f"<soapenv:Body><ns:{wire_operation}>{content}</ns:{wire_operation}></soapenv:Body>"
            "</soapenv:Envelope>"
        )


def decode_body(document: object) -> Response:
    """Return the SOAP Body content with namespace prefixes stripped and snake_case keys."""

    decoded = _decode(document)
    envelope = decoded.get("envelope") if isinstance(decoded, dict) else None
    body = envelope.get("body") if isinstance(envelope, dict) else None
    if not isinstance(body, dict):
        raise TransportFault("Response is not a SOAP envelope with a body")
    return cast(Response, body)


def _decode(value: object) -> object:
    if isinstance(value, Mapping):
        return {
            snake_case(str(key).rpartition(":")[2]): _decode(item)
            for key, item in cast(Mapping[object, object], value).items()
        }
    if isinstance(value, list):
        return [_decode(item) for item in cast(list[object], value)]
    return value


def _fault_message(fault: object) -> str:
    if isinstance(fault, Mapping):
        fault_map = cast(Mapping[str, object], fault)
        return str(fault_map.get("faultstring") or fault_map.get("faultcode") or "unknown")
    return str(fault)

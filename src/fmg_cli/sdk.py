"""Client construction from resolved connection parameters."""

from __future__ import annotations

from fmg_cli.client import FmgClient
from fmg_cli.connection import ConnectionParams
from fmg_cli.transport import SoapTransport


def create_client(connection: ConnectionParams) -> FmgClient:
    """Create an XML API client talking SOAP to the configured appliance."""

    transport = SoapTransport(
        connection.endpoint,
        namespace=connection.namespace,
        verify=connection.verify_ssl,
        timeout=connection.timeout,
    )
    return FmgClient(transport, connection.username, connection.password)

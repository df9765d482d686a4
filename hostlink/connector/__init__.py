"""
Connectors - one contract for reaching a host.

Provides:
- Connector: command execution and file transfer
- GatherFacts: host fact collection
- LocalConnector: the local machine
- new_connector(): pick a connector from configuration
"""

import socket
from typing import Optional

from hostlink.config import LOCAL_CONNECTOR, ConnectorConfig
from hostlink.connector.base import Connector, GatherFacts, gather_facts, supports_facts
from hostlink.connector.local import LocalConnector
from hostlink.errors import UnsupportedConnectorError
from hostlink.runner import CommandRunner

__all__ = [
    "Connector",
    "GatherFacts",
    "LocalConnector",
    "gather_facts",
    "is_local_host",
    "new_connector",
    "supports_facts",
]

LOCAL_HOSTS = {"localhost", "127.0.0.1", "::1"}


def is_local_host(host: str) -> bool:
    """Check if a host name refers to this machine."""
    host = host.strip().lower()
    if host in LOCAL_HOSTS:
        return True
    return host == socket.gethostname().lower()


def new_connector(
    config: ConnectorConfig, runner: Optional[CommandRunner] = None
) -> Connector:
    """
    Create the connector a host's configuration asks for.

    Args:
        config: Connector configuration
        runner: Command runner for the connector (default: SubprocessRunner)

    Returns:
        Connector instance (not yet initialized)

    Raises:
        UnsupportedConnectorError: If no connector handles the configuration

    Example:
        config = ConnectorConfig.from_vars({"connector": {"type": "local"}})
        with new_connector(config) as connector:
            print(connector.execute_command(None, "id"))
    """
    if config.type == LOCAL_CONNECTOR:
        return LocalConnector(runner=runner)
    if not config.type and is_local_host(config.host):
        return LocalConnector(runner=runner)
    raise UnsupportedConnectorError(config.type or f"<remote host {config.host}>")

__version__ = "0.1.0"

from hostlink.config import ConnectorConfig, Settings
from hostlink.connector import (
    Connector,
    GatherFacts,
    LocalConnector,
    gather_facts,
    new_connector,
    supports_facts,
)
from hostlink.context import Context
from hostlink.errors import (
    CommandCancelled,
    CommandError,
    ConnectorError,
    ContextCancelled,
    ContextError,
    DeadlineExceeded,
    DirectoryError,
    FactsError,
    TransferError,
    UnsupportedConnectorError,
)
from hostlink.logging import get_logger, setup_logging

"""
Foundations of hostlink:
    Connector is the contract for running commands and moving files on a host.
    GatherFacts is the optional capability of describing that host.
    LocalConnector fulfils both for the machine hostlink runs on.
    Context carries cancellation and deadlines into every operation.
"""

__all__ = [
    "CommandCancelled",
    "CommandError",
    "Connector",
    "ConnectorConfig",
    "ConnectorError",
    "Context",
    "ContextCancelled",
    "ContextError",
    "DeadlineExceeded",
    "DirectoryError",
    "FactsError",
    "GatherFacts",
    "LocalConnector",
    "Settings",
    "TransferError",
    "UnsupportedConnectorError",
    "gather_facts",
    "get_logger",
    "new_connector",
    "setup_logging",
]

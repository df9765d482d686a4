"""
Configuration for hostlink.

Settings come from the environment:
    HOSTLINK_LOG_LEVEL        - log level (default: INFO)
    HOSTLINK_COMMAND_TIMEOUT  - default command deadline in seconds

Connector selection comes from host variables, e.g.:
    {"inventory_hostname": "node1", "connector": {"type": "local"}}
"""

import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

LOCAL_CONNECTOR = "local"


@dataclass
class Settings:
    """Process-wide settings."""
    log_level: str = "INFO"
    command_timeout: Optional[float] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Load settings from environment variables.

        Args:
            environ: Mapping to read (default: os.environ)

        Raises:
            ValueError: If HOSTLINK_COMMAND_TIMEOUT is not a positive number
        """
        env = os.environ if environ is None else environ

        timeout = None
        raw = env.get("HOSTLINK_COMMAND_TIMEOUT", "").strip()
        if raw:
            try:
                timeout = float(raw)
            except ValueError:
                raise ValueError(
                    f"HOSTLINK_COMMAND_TIMEOUT must be a number, got {raw!r}"
                )
            if timeout <= 0:
                raise ValueError(
                    f"HOSTLINK_COMMAND_TIMEOUT must be positive, got {raw!r}"
                )

        return cls(
            log_level=env.get("HOSTLINK_LOG_LEVEL", "INFO").strip().upper() or "INFO",
            command_timeout=timeout,
        )


@dataclass
class ConnectorConfig:
    """How to reach one host."""
    type: str = ""
    host: str = "localhost"

    @classmethod
    def from_vars(cls, host_vars: Mapping[str, Any]) -> "ConnectorConfig":
        """
        Build config from a host's variables.

        Reads host_vars["connector"]["type"/"host"], falling back to
        "inventory_hostname" or "host" for the host name.
        """
        connector = host_vars.get("connector") or {}
        if not isinstance(connector, Mapping):
            raise ValueError(
                f"connector must be a mapping, got {type(connector).__name__}"
            )

        host = (
            connector.get("host")
            or host_vars.get("inventory_hostname")
            or host_vars.get("host")
            or "localhost"
        )
        return cls(
            type=str(connector.get("type") or "").strip().lower(),
            host=str(host),
        )

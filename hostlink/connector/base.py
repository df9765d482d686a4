"""
Base connector interfaces.

Every backend implements Connector. Backends that can describe their host
also implement GatherFacts.
"""

from abc import ABC, abstractmethod
from typing import Any, BinaryIO, Dict, Optional

from hostlink.context import Context


class Connector(ABC):
    """
    Abstract base class for command execution and file transfer.

    Implementations:
    - LocalConnector: Act on the local machine

    Every method takes a Context first; None means a background context.
    """

    @abstractmethod
    def init(self, ctx: Optional[Context] = None) -> None:
        """
        Prepare the connector for use.

        Safe to call when there is nothing to prepare.
        """
        pass

    @abstractmethod
    def close(self, ctx: Optional[Context] = None) -> None:
        """
        Release connector resources.

        Safe to call when there is nothing to release.
        """
        pass

    @abstractmethod
    def put_file(
        self, ctx: Optional[Context], src: bytes, dst: str, mode: int
    ) -> None:
        """
        Write bytes to a file on the target.

        Missing parent directories are created with the same mode. An
        existing destination is truncated and replaced.

        Args:
            ctx: Cancellation context
            src: File content
            dst: Destination path
            mode: Permission bits (e.g. 0o644)

        Raises:
            DirectoryError: If the parent directory can't be created
            TransferError: If the file can't be written
        """
        pass

    @abstractmethod
    def fetch_file(self, ctx: Optional[Context], src: str, dst: BinaryIO) -> None:
        """
        Stream a file from the target into a writer.

        Args:
            ctx: Cancellation context
            src: Source path
            dst: Binary writer receiving the content

        Raises:
            TransferError: If the source can't be opened or the copy fails
            ContextError: If the context ends mid-copy

        Note:
            Bytes already written to dst before a failure are not rolled back.
        """
        pass

    @abstractmethod
    def execute_command(self, ctx: Optional[Context], command: str) -> bytes:
        """
        Run a shell command on the target.

        The command is handed to a shell unmodified. It must come from a
        trusted source; quoting and escaping are the caller's job.

        Args:
            ctx: Cancellation context
            command: Shell command string

        Returns:
            Combined stdout and stderr

        Raises:
            CommandError: On spawn failure or non-zero exit (carries output)
            CommandCancelled: If the context ends before the command does
        """
        pass

    def __enter__(self):
        """Context manager entry - prepares the connector."""
        self.init()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - releases the connector."""
        self.close()


class GatherFacts(ABC):
    """Capability: describe the target host."""

    @abstractmethod
    def info(self, ctx: Optional[Context] = None) -> Optional[Dict[str, Any]]:
        """
        Gather host facts.

        Returns:
            Fact document with "os" and "process" sections, or None when the
            backend has no facts for this platform

        Raises:
            FactsError: If any fact source fails
        """
        pass


def supports_facts(connector: Connector) -> bool:
    """Check if a connector implements GatherFacts."""
    return isinstance(connector, GatherFacts)


def gather_facts(
    ctx: Optional[Context], connector: Connector
) -> Optional[Dict[str, Any]]:
    """
    Gather facts through a connector, if it supports them.

    Returns:
        Fact document, or None if the connector has no facts to offer
    """
    if not isinstance(connector, GatherFacts):
        return None
    return connector.info(ctx)

"""
Error types for hostlink.

Every failure a connector reports derives from ConnectorError, so callers
can catch the whole family in one place.
"""

from typing import Optional


class ConnectorError(Exception):
    """Base class for all connector failures."""

    pass


class ContextError(ConnectorError):
    """Raised when an operation stops because its context is done."""

    pass


class ContextCancelled(ContextError):
    """The context was cancelled."""

    pass


class DeadlineExceeded(ContextError):
    """The context deadline passed."""

    pass


class DirectoryError(ConnectorError):
    """Destination directory could not be prepared."""

    def __init__(self, message: str, path: str):
        super().__init__(message)
        self.path = path


class TransferError(ConnectorError):
    """Open, read, write or copy failure during a file transfer."""

    def __init__(self, message: str, path: str):
        super().__init__(message)
        self.path = path


class CommandError(ConnectorError):
    """
    Command could not be spawned or exited non-zero.

    Attributes:
        command: The command (as run) that failed
        exit_code: Process exit status, None if it never ran to completion
        output: Combined stdout/stderr captured before the failure
    """

    def __init__(
        self,
        message: str,
        command: str,
        exit_code: Optional[int] = None,
        output: bytes = b"",
    ):
        super().__init__(message)
        self.command = command
        self.exit_code = exit_code
        self.output = output


class CommandCancelled(CommandError):
    """Command was terminated because its context is done."""

    pass


class FactsError(ConnectorError):
    """A fact source failed while assembling the fact document."""

    def __init__(self, message: str, step: str):
        super().__init__(message)
        self.step = step


class UnsupportedConnectorError(ConnectorError):
    """No connector in this package handles the requested type."""

    def __init__(self, connector_type: str):
        super().__init__(f"Unsupported connector type: {connector_type!r}")
        self.connector_type = connector_type

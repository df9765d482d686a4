"""
Logging for hostlink.

Example:
    from hostlink.logging import get_logger

    logger = get_logger(__name__)
    logger.debug("Running command")
    logger.error("Failed to fetch file", exc_info=True)
"""

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

HOSTLINK_THEME = Theme({
    "log.time": "dim cyan",
    "log.level.debug": "dim blue",
    "log.level.info": "green",
    "log.level.warning": "yellow",
    "log.level.error": "bold red",
    "log.level.critical": "bold white on red",
})

# Diagnostics go to stderr so command output on stdout stays clean
console = Console(theme=HOSTLINK_THEME, stderr=True)

_initialized = False


def setup_logging(
    level: str = "INFO",
    show_time: bool = True,
    show_path: bool = False,
    rich_tracebacks: bool = True,
) -> None:
    """
    Initialize hostlink logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        show_time: Show timestamps in log output
        show_path: Show file path in log output
        rich_tracebacks: Use rich formatting for tracebacks

    Note:
        Only the first call installs the handler. Use set_level() to change
        verbosity afterwards.
    """
    global _initialized

    if _initialized:
        return

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    handler = RichHandler(
        console=console,
        show_time=show_time,
        show_path=show_path,
        rich_tracebacks=rich_tracebacks,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    root = logging.getLogger("hostlink")
    root.handlers = [handler]
    root.setLevel(numeric_level)
    root.propagate = False

    _initialized = True


def set_level(level: str) -> None:
    """Change the hostlink log level after setup."""
    logging.getLogger("hostlink").setLevel(
        getattr(logging, level.upper(), logging.INFO)
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a given module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    if not _initialized:
        setup_logging()

    return logging.getLogger(name)


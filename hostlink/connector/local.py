"""
Local connector - run commands and move files on the local machine.
"""

import io
import os
import platform as platform_module
from pathlib import Path
from typing import Any, BinaryIO, Callable, Dict, Optional, TypeVar

from hostlink.connector.base import Connector, GatherFacts
from hostlink.context import Context, ensure_context
from hostlink.errors import ConnectorError, DirectoryError, FactsError, TransferError
from hostlink.logging import get_logger
from hostlink.parsing import parse_delimited_mapping, parse_delimited_records
from hostlink.runner import CommandRunner, SubprocessRunner

logger = get_logger(__name__)

SHELL = "/bin/sh"
OS_RELEASE = "/etc/os-release"
CPU_INFO = "/proc/cpuinfo"
MEM_INFO = "/proc/meminfo"
COPY_CHUNK_SIZE = 64 * 1024

T = TypeVar("T")


class LocalConnector(Connector, GatherFacts):
    """
    Connector for the machine hostlink runs on.

    Files are handled with direct filesystem calls; commands go through the
    injected runner as `/bin/sh -c <command>`. The connector holds no other
    state and does no locking, so concurrent callers must coordinate
    themselves.

    Example:
        connector = LocalConnector()
        output = connector.execute_command(None, "uname -a")
        facts = connector.info()
    """

    def __init__(self, runner: Optional[CommandRunner] = None):
        """
        Initialize local connector.

        Args:
            runner: Command runner (default: SubprocessRunner)
        """
        self.runner = runner or SubprocessRunner()

    def init(self, ctx: Optional[Context] = None) -> None:
        """No-op for local connector."""
        pass

    def close(self, ctx: Optional[Context] = None) -> None:
        """No-op for local connector."""
        pass

    def put_file(
        self, ctx: Optional[Context], src: bytes, dst: str, mode: int
    ) -> None:
        ensure_context(ctx).check()

        parent = os.path.dirname(dst)
        if parent and not os.path.exists(parent):
            try:
                _make_dirs(parent, mode)
            except OSError as e:
                logger.debug("Failed to create local dir for %s: %s", dst, e)
                raise DirectoryError(
                    f"Failed to create directory {parent}: {e}", path=parent
                ) from e

        try:
            Path(dst).write_bytes(src)
            os.chmod(dst, mode)
        except OSError as e:
            logger.debug("Failed to write local file %s: %s", dst, e)
            raise TransferError(f"Failed to write {dst}: {e}", path=dst) from e

    def fetch_file(self, ctx: Optional[Context], src: str, dst: BinaryIO) -> None:
        ctx = ensure_context(ctx)
        ctx.check()

        try:
            source = open(src, "rb")
        except OSError as e:
            logger.debug("Failed to open local file %s: %s", src, e)
            raise TransferError(f"Failed to open {src}: {e}", path=src) from e

        with source:
            while True:
                ctx.check()
                try:
                    chunk = source.read(COPY_CHUNK_SIZE)
                    if not chunk:
                        break
                    dst.write(chunk)
                except OSError as e:
                    logger.debug("Failed to copy local file %s: %s", src, e)
                    raise TransferError(f"Failed to copy {src}: {e}", path=src) from e

    def execute_command(self, ctx: Optional[Context], command: str) -> bytes:
        logger.debug("exec local command: %s", command)
        return self.runner.run(ctx, SHELL, ["-c", command])

    def info(self, ctx: Optional[Context] = None) -> Optional[Dict[str, Any]]:
        system = platform_module.system()
        if system != "Linux":
            logger.debug("Unsupported platform for facts: %s", system)
            return None

        os_facts: Dict[str, Any] = {}
        os_facts["release"] = _step(
            "os-release",
            lambda: parse_delimited_mapping(self._read(ctx, OS_RELEASE), "="),
        )
        os_facts["kernel_version"] = _step(
            "kernel_version", lambda: self._query(ctx, "uname -r")
        )
        os_facts["hostname"] = _step("hostname", lambda: self._query(ctx, "hostname"))
        os_facts["architecture"] = _step(
            "architecture", lambda: self._query(ctx, "arch")
        )

        process_facts: Dict[str, Any] = {}
        process_facts["cpuInfo"] = _step(
            "cpuinfo",
            lambda: parse_delimited_records(self._read(ctx, CPU_INFO), ":"),
        )
        process_facts["memInfo"] = _step(
            "meminfo",
            lambda: parse_delimited_mapping(self._read(ctx, MEM_INFO), ":"),
        )

        return {
            "os": os_facts,
            "process": process_facts,
        }

    def _read(self, ctx: Optional[Context], path: str) -> bytes:
        buffer = io.BytesIO()
        self.fetch_file(ctx, path, buffer)
        return buffer.getvalue()

    def _query(self, ctx: Optional[Context], command: str) -> str:
        """Run a one-line command and drop its trailing newline."""
        output = self.execute_command(ctx, command).decode("utf-8", errors="replace")
        if output.endswith("\n"):
            output = output[:-1]
        return output


def _step(name: str, read: Callable[[], T]) -> T:
    """Run one fact source, tagging any failure with its name."""
    try:
        return read()
    except ConnectorError as e:
        raise FactsError(f"Failed to gather {name}: {e}", step=name) from e


def _make_dirs(path: str, mode: int) -> None:
    """Create path and any missing parents, each with mode."""
    missing = []
    current = path
    while current and not os.path.exists(current):
        missing.append(current)
        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent

    for directory in reversed(missing):
        try:
            os.mkdir(directory, mode)
        except FileExistsError:
            pass

"""
Command runners - the process-spawning half of a connector.

Connectors never spawn processes themselves; they hand a program and its
arguments to a CommandRunner. Tests substitute a fake runner to avoid
starting real processes.
"""

import os
import selectors
import signal
import subprocess
import time
from abc import ABC, abstractmethod
from typing import List, Optional

from hostlink.context import Context, ensure_context
from hostlink.errors import CommandCancelled, CommandError, ContextError
from hostlink.logging import get_logger

logger = get_logger(__name__)

READ_SIZE = 64 * 1024


class CommandRunner(ABC):
    """
    Abstract base class for command execution providers.

    Implementations:
    - SubprocessRunner: Spawn a local process
    """

    @abstractmethod
    def run(self, ctx: Optional[Context], program: str, args: List[str]) -> bytes:
        """
        Run a program and return its combined output.

        Args:
            ctx: Cancellation context (None = background)
            program: Program path
            args: Arguments passed to the program

        Returns:
            Combined stdout and stderr as bytes

        Raises:
            CommandError: If the program can't be spawned or exits non-zero
            CommandCancelled: If the context is done before the program exits
        """
        pass


class SubprocessRunner(CommandRunner):
    """
    Runner backed by subprocess.

    The child runs in its own session so that cancellation can kill the
    whole process group, including anything a shell started. Processes
    that escape the group can keep the output pipe open; once the group is
    killed the runner reads for at most kill_grace seconds, then closes the
    pipe and returns.
    """

    def __init__(self, poll_interval: float = 0.05, kill_grace: float = 0.5):
        """
        Initialize runner.

        Args:
            poll_interval: Seconds between context checks while waiting
            kill_grace: Seconds to keep reading output after a kill
        """
        self.poll_interval = poll_interval
        self.kill_grace = kill_grace

    def run(self, ctx: Optional[Context], program: str, args: List[str]) -> bytes:
        ctx = ensure_context(ctx)
        argv = [program, *args]
        command = " ".join(argv)

        err = ctx.error()
        if err is not None:
            raise CommandCancelled(
                f"Command not started: {err}", command=command
            ) from err

        try:
            process = subprocess.Popen(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                start_new_session=True,
            )
        except OSError as e:
            raise CommandError(
                f"Failed to start {program}: {e}", command=command
            ) from e

        chunks: List[bytes] = []
        try:
            err = self._communicate(ctx, process, chunks)
        finally:
            process.stdout.close()
            if process.poll() is None:
                self._kill(process)
            process.wait()

        output = b"".join(chunks)
        if err is not None:
            raise CommandCancelled(
                f"Command terminated: {err}",
                command=command,
                output=output,
            ) from err
        if process.returncode != 0:
            raise CommandError(
                f"Command exited with status {process.returncode}",
                command=command,
                exit_code=process.returncode,
                output=output,
            )
        return output

    def _communicate(
        self, ctx: Context, process: subprocess.Popen, chunks: List[bytes]
    ) -> Optional[ContextError]:
        """
        Collect output until the process exits or ctx is done.

        Returns:
            The context error if the process was killed, else None
        """
        fd = process.stdout.fileno()
        reading = True

        with selectors.DefaultSelector() as selector:
            selector.register(fd, selectors.EVENT_READ)

            while reading or process.poll() is None:
                err = ctx.error()
                if err is not None:
                    self._kill(process)
                    if reading:
                        self._drain(selector, fd, chunks)
                    return err

                if not reading:
                    # Output closed early; wait for the exit status
                    try:
                        process.wait(timeout=self._wait_time(ctx))
                    except subprocess.TimeoutExpired:
                        pass
                    continue

                for _key, _events in selector.select(timeout=self._wait_time(ctx)):
                    data = os.read(fd, READ_SIZE)
                    if not data:
                        reading = False
                        break
                    chunks.append(data)

        return None

    def _drain(self, selector, fd: int, chunks: List[bytes]) -> None:
        """Read what is left in the pipe, for at most kill_grace seconds."""
        end = time.monotonic() + self.kill_grace
        while True:
            left = end - time.monotonic()
            if left <= 0:
                return
            for _key, _events in selector.select(timeout=left):
                data = os.read(fd, READ_SIZE)
                if not data:
                    return
                chunks.append(data)

    def _wait_time(self, ctx: Context) -> float:
        remaining = ctx.remaining()
        if remaining is None:
            return self.poll_interval
        return max(0.001, min(self.poll_interval, remaining))

    @staticmethod
    def _kill(process: subprocess.Popen) -> None:
        """Kill the process group started for process."""
        try:
            os.killpg(process.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass
        except PermissionError:
            logger.debug("Falling back to killing pid %s only", process.pid)
            process.kill()

"""
Cancellation context passed to every connector operation.

A Context carries a cancellation flag and an optional deadline. Children
inherit both from their parent: cancelling a parent cancels its children,
and a child's deadline never outlives its parent's.

Example:
    ctx = Context.background().with_timeout(30)
    output = connector.execute_command(ctx, "apt-get update")

    # From another thread
    ctx.cancel()
"""

import threading
import time
from typing import Optional, Set, Type

from hostlink.errors import ContextCancelled, ContextError, DeadlineExceeded


class Context:
    """
    Cancellation and deadline carrier.

    Contexts are safe to share between threads. Use background() for a root
    that never ends, then derive children with with_cancel(),
    with_timeout() or with_deadline().
    """

    def __init__(
        self,
        parent: Optional["Context"] = None,
        deadline: Optional[float] = None,
    ):
        """
        Initialize context.

        Args:
            parent: Parent context (None for a root)
            deadline: Absolute time.monotonic() value after which the
                context is done (None = no deadline of its own)
        """
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._reason: Optional[Type[ContextError]] = None
        self._children: Set["Context"] = set()
        self._parent = parent

        if parent is not None and parent.deadline is not None:
            if deadline is None or parent.deadline < deadline:
                deadline = parent.deadline
        self.deadline = deadline

        if parent is not None:
            parent._attach(self)

    @classmethod
    def background(cls) -> "Context":
        """Root context: never cancelled, no deadline."""
        return cls()

    def with_cancel(self) -> "Context":
        """Child context that can be cancelled on its own."""
        return Context(parent=self)

    def with_deadline(self, deadline: float) -> "Context":
        """Child context done at the given time.monotonic() value."""
        return Context(parent=self, deadline=deadline)

    def with_timeout(self, seconds: float) -> "Context":
        """Child context done after the given number of seconds."""
        return self.with_deadline(time.monotonic() + seconds)

    def cancel(self) -> None:
        """Cancel this context and all of its children. Idempotent."""
        self._finish(ContextCancelled)

    def error(self) -> Optional[ContextError]:
        """
        Why the context is done.

        Returns:
            None while the context is live, otherwise a new
            ContextCancelled or DeadlineExceeded instance
        """
        if self._reason is None and self._expired():
            self._finish(DeadlineExceeded)

        reason = self._reason
        if reason is None:
            return None
        if reason is DeadlineExceeded:
            return DeadlineExceeded("context deadline exceeded")
        return ContextCancelled("context cancelled")

    def done(self) -> bool:
        """Check if the context is cancelled or expired."""
        return self.error() is not None

    def check(self) -> None:
        """
        Raise if the context is done.

        Raises:
            ContextCancelled: If the context was cancelled
            DeadlineExceeded: If the deadline passed
        """
        err = self.error()
        if err is not None:
            raise err

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline (None if there is none)."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the context is done or timeout elapses.

        Args:
            timeout: Maximum seconds to wait (None = wait indefinitely)

        Returns:
            True if the context is done
        """
        remaining = self.remaining()
        if remaining is not None and (timeout is None or remaining < timeout):
            timeout = remaining
        self._done.wait(timeout)
        return self.done()

    def _expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def _attach(self, child: "Context") -> None:
        with self._lock:
            reason = self._reason
            if reason is None:
                # Expired children finish on their own; stop tracking them
                self._children = {c for c in self._children if not c._expired()}
                self._children.add(child)
        if reason is not None:
            child._finish(reason)

    def _detach(self, child: "Context") -> None:
        with self._lock:
            self._children.discard(child)

    def _finish(self, reason: Type[ContextError]) -> None:
        with self._lock:
            if self._reason is not None:
                return
            self._reason = reason
            children, self._children = self._children, set()
        self._done.set()
        if self._parent is not None:
            self._parent._detach(self)
        for child in children:
            child._finish(reason)


def ensure_context(ctx: Optional[Context]) -> Context:
    """Return ctx, or a background context when None."""
    return ctx if ctx is not None else Context.background()

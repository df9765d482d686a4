"""
Unit tests for hostlink contexts.

Tests cancellation propagation and deadlines.
"""

import time

import pytest

from hostlink.context import Context, ensure_context
from hostlink.errors import ContextCancelled, DeadlineExceeded


class TestContextCancellation:
    """Tests for explicit cancellation."""

    def test_background_is_never_done(self):
        """Test that a background context stays live."""
        ctx = Context.background()

        assert not ctx.done()
        assert ctx.error() is None
        assert ctx.remaining() is None
        ctx.check()

    def test_cancel_marks_done(self):
        """Test that cancel() finishes the context with ContextCancelled."""
        ctx = Context.background().with_cancel()
        ctx.cancel()

        assert ctx.done()
        assert isinstance(ctx.error(), ContextCancelled)
        with pytest.raises(ContextCancelled):
            ctx.check()

    def test_cancel_is_idempotent(self):
        """Test that cancelling twice keeps the first reason."""
        ctx = Context.background().with_cancel()
        ctx.cancel()
        ctx.cancel()

        assert isinstance(ctx.error(), ContextCancelled)

    def test_parent_cancel_reaches_children(self):
        """Test that cancelling a parent cancels its descendants."""
        parent = Context.background().with_cancel()
        child = parent.with_cancel()
        grandchild = child.with_timeout(60)

        parent.cancel()

        assert child.done()
        assert grandchild.done()
        assert isinstance(grandchild.error(), ContextCancelled)

    def test_child_cancel_leaves_parent_alive(self):
        """Test that cancelling a child does not touch its parent."""
        parent = Context.background().with_cancel()
        child = parent.with_cancel()

        child.cancel()

        assert child.done()
        assert not parent.done()

    def test_child_of_cancelled_parent_starts_done(self):
        """Test deriving from an already-cancelled context."""
        parent = Context.background().with_cancel()
        parent.cancel()

        assert parent.with_cancel().done()

    def test_ensure_context_defaults_to_background(self):
        """Test that None becomes a live background context."""
        ctx = ensure_context(None)
        assert not ctx.done()

        existing = Context.background()
        assert ensure_context(existing) is existing


class TestContextDeadline:
    """Tests for deadlines and timeouts."""

    def test_timeout_expires(self):
        """Test that a short timeout ends with DeadlineExceeded."""
        ctx = Context.background().with_timeout(0.05)

        assert ctx.wait(2) is True
        assert isinstance(ctx.error(), DeadlineExceeded)

    def test_wait_returns_false_while_live(self):
        """Test that wait() times out on a live context."""
        ctx = Context.background().with_cancel()

        start = time.monotonic()
        assert ctx.wait(0.05) is False
        assert time.monotonic() - start < 1

    def test_child_deadline_capped_by_parent(self):
        """Test that a child never outlives its parent's deadline."""
        parent = Context.background().with_timeout(1)
        child = parent.with_timeout(60)

        assert child.deadline == parent.deadline

    def test_child_can_shorten_deadline(self):
        """Test that a child may expire before its parent."""
        parent = Context.background().with_timeout(60)
        child = parent.with_timeout(1)

        assert child.deadline < parent.deadline

    def test_remaining_counts_down(self):
        """Test remaining() for a context with a deadline."""
        ctx = Context.background().with_timeout(30)

        remaining = ctx.remaining()
        assert remaining is not None
        assert 0 < remaining <= 30


class TestContextChildTracking:
    """Tests that finished children are released by their parent."""

    def test_expired_children_released(self):
        """Test that many short-lived timeouts don't accumulate on a root."""
        root = Context.background()

        for _ in range(1000):
            assert root.with_timeout(0.0).done()

        assert len(root._children) == 0

    def test_cancelled_child_released(self):
        """Test that a cancelled child is dropped from its parent."""
        root = Context.background()
        child = root.with_cancel()
        assert len(root._children) == 1

        child.cancel()

        assert len(root._children) == 0
        assert not root.done()

    def test_unchecked_expired_children_pruned(self):
        """Test that expired children nobody checked are dropped on the next attach."""
        root = Context.background()
        for _ in range(10):
            root.with_timeout(0.0)

        live = root.with_cancel()

        assert root._children == {live}

    def test_parent_cancel_after_child_release(self):
        """Test that cancelling the parent still reaches live children."""
        root = Context.background().with_cancel()
        released = root.with_cancel()
        released.cancel()
        live = root.with_cancel()

        root.cancel()

        assert live.done()
        assert isinstance(live.error(), ContextCancelled)

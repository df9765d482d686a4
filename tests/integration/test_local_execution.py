"""
Integration tests for the local connector.

Runs real processes through SubprocessRunner and reads real host facts.
"""

import io
import os
import platform
import shutil
import threading
import time

import pytest

from hostlink.connector import LocalConnector
from hostlink.context import Context
from hostlink.errors import (
    CommandCancelled,
    CommandError,
    ContextCancelled,
    DeadlineExceeded,
)
from hostlink.runner import SubprocessRunner


class TestExecuteCommand:
    """Real command execution."""

    def setup_method(self):
        """Fresh connector for each test."""
        self.connector = LocalConnector()

    def test_echo(self):
        """Test a successful command."""
        output = self.connector.execute_command(Context.background(), "echo hello")

        assert b"hello" in output

    def test_combined_output(self):
        """Test that stderr is captured with stdout."""
        output = self.connector.execute_command(None, "echo out; echo err 1>&2")

        assert b"out" in output
        assert b"err" in output

    def test_non_zero_exit(self):
        """Test that a non-zero exit status raises."""
        with pytest.raises(CommandError) as exc_info:
            self.connector.execute_command(None, "exit 3")

        assert exc_info.value.exit_code == 3
        assert not isinstance(exc_info.value, CommandCancelled)

    def test_output_kept_on_failure(self):
        """Test that output produced before failing comes with the error."""
        with pytest.raises(CommandError) as exc_info:
            self.connector.execute_command(None, "echo partial; exit 2")

        assert b"partial" in exc_info.value.output

    def test_already_cancelled_context(self):
        """Test that a cancelled context returns promptly without running."""
        ctx = Context.background().with_cancel()
        ctx.cancel()

        start = time.monotonic()
        with pytest.raises(CommandCancelled) as exc_info:
            self.connector.execute_command(ctx, "sleep 5")

        assert time.monotonic() - start < 1
        assert isinstance(exc_info.value.__cause__, ContextCancelled)

    def test_cancel_while_running(self):
        """Test that cancelling mid-command kills the process."""
        ctx = Context.background().with_cancel()
        timer = threading.Timer(0.2, ctx.cancel)
        timer.start()

        start = time.monotonic()
        try:
            with pytest.raises(CommandCancelled) as exc_info:
                self.connector.execute_command(ctx, "echo started; sleep 10")
        finally:
            timer.cancel()

        assert time.monotonic() - start < 5
        assert isinstance(exc_info.value.__cause__, ContextCancelled)
        assert b"started" in exc_info.value.output

    def test_deadline(self):
        """Test that an expiring context stops a long command."""
        ctx = Context.background().with_timeout(0.2)

        start = time.monotonic()
        with pytest.raises(CommandCancelled) as exc_info:
            self.connector.execute_command(ctx, "sleep 10")

        assert time.monotonic() - start < 5
        assert isinstance(exc_info.value.__cause__, DeadlineExceeded)

    @pytest.mark.skipif(shutil.which("setsid") is None, reason="setsid not installed")
    def test_deadline_with_detached_grandchild(self):
        """Test that a process outside the killed group doesn't hold the call open."""
        ctx = Context.background().with_timeout(0.3)

        start = time.monotonic()
        with pytest.raises(CommandCancelled) as exc_info:
            self.connector.execute_command(ctx, "echo begin; setsid sleep 4 & sleep 10")

        assert time.monotonic() - start < 2
        assert isinstance(exc_info.value.__cause__, DeadlineExceeded)
        assert b"begin" in exc_info.value.output

    def test_spawn_failure(self):
        """Test that a missing program raises CommandError without exit code."""
        runner = SubprocessRunner()

        with pytest.raises(CommandError) as exc_info:
            runner.run(None, "/nonexistent/program", [])

        assert exc_info.value.exit_code is None


class TestFileRoundTrip:
    """Real files through put_file and fetch_file."""

    def test_put_then_fetch(self, tmp_path):
        """Test that fetched content matches what was put."""
        connector = LocalConnector()
        dst = tmp_path / "etc" / "app" / "config.ini"
        content = b"[main]\nkey = value\n"

        connector.put_file(None, content, str(dst), 0o755)
        out = io.BytesIO()
        connector.fetch_file(None, str(dst), out)

        assert out.getvalue() == content


def _fact_sources_available() -> bool:
    if platform.system() != "Linux":
        return False
    if not all(os.path.exists(p) for p in ("/etc/os-release", "/proc/cpuinfo", "/proc/meminfo")):
        return False
    return all(shutil.which(cmd) for cmd in ("uname", "hostname", "arch"))


@pytest.mark.skipif(not _fact_sources_available(), reason="Linux fact sources not available")
class TestRealFacts:
    """Fact gathering against this host."""

    def test_fact_document(self):
        """Test that the real document is populated."""
        facts = LocalConnector().info(Context.background().with_timeout(30))

        assert facts["os"]["hostname"]
        assert facts["os"]["kernel_version"]
        assert facts["os"]["architecture"]
        assert not facts["os"]["hostname"].endswith("\n")
        assert isinstance(facts["os"]["release"], dict)
        assert len(facts["process"]["memInfo"]) > 0
        assert "MemTotal" in facts["process"]["memInfo"]
        assert isinstance(facts["process"]["cpuInfo"], list)

    def test_kernel_matches_platform(self):
        """Test that the kernel version agrees with the platform module."""
        facts = LocalConnector().info()

        assert facts["os"]["kernel_version"] == platform.release()

"""Unit tests for OperationContext cancellation."""

from __future__ import annotations

import threading
import time

import pytest

from floe_catalog import context as context_module
from floe_catalog.context import OperationContext, run_in_context
from floe_catalog.errors import ErrorKind, OperationCancelledError


class TestOperationContext:
    """Tests for OperationContext state."""

    def test_not_cancelled_initially(self) -> None:
        """Test a fresh context is live and has no deadline."""
        ctx = OperationContext()

        assert not ctx.cancelled
        assert ctx.remaining() is None

    def test_cancel(self) -> None:
        """Test cancel marks the context cancelled, repeatedly."""
        ctx = OperationContext()
        ctx.cancel()
        ctx.cancel()

        assert ctx.cancelled

    def test_deadline_expires(self) -> None:
        """Test a zero timeout is already expired."""
        ctx = OperationContext(timeout=0)

        assert ctx.cancelled
        assert ctx.remaining() == 0.0

    def test_negative_timeout_rejected(self) -> None:
        """Test negative timeouts are invalid."""
        with pytest.raises(ValueError, match="timeout"):
            OperationContext(timeout=-1)

    def test_raise_if_cancelled(self) -> None:
        """Test raise_if_cancelled reports the operation name."""
        ctx = OperationContext()
        ctx.raise_if_cancelled("load_table")
        ctx.cancel()

        with pytest.raises(OperationCancelledError) as exc_info:
            ctx.raise_if_cancelled("load_table")

        assert exc_info.value.operation == "load_table"
        assert exc_info.value.kind is ErrorKind.CANCELLED


class TestRun:
    """Tests for running calls under a context."""

    def test_returns_result(self) -> None:
        """Test the function result is returned."""
        ctx = OperationContext(poll_interval=0.01)

        assert ctx.run("add", lambda a, b: a + b, 1, b=2) == 3

    def test_propagates_exception(self) -> None:
        """Test exceptions from the call reach the caller unchanged."""
        ctx = OperationContext(poll_interval=0.01)

        def fail() -> None:
            raise KeyError("boom")

        with pytest.raises(KeyError, match="boom"):
            ctx.run("fail", fail)

    def test_cancelled_before_call(self) -> None:
        """Test a cancelled context never invokes the function."""
        ctx = OperationContext()
        ctx.cancel()
        called = []

        with pytest.raises(OperationCancelledError):
            ctx.run("noop", lambda: called.append(True))

        assert called == []

    def test_cancel_while_running(self) -> None:
        """Test cancelling a started call returns promptly with an unknown outcome."""
        ctx = OperationContext(poll_interval=0.01)
        release = threading.Event()
        threading.Timer(0.05, ctx.cancel).start()

        start = time.monotonic()
        try:
            with pytest.raises(OperationCancelledError) as exc_info:
                ctx.run("slow", release.wait, 5)
            elapsed = time.monotonic() - start
        finally:
            release.set()

        assert elapsed < 2
        assert exc_info.value.outcome_unknown is True

    def test_cancelled_before_call_outcome_known(self) -> None:
        """Test a call that never started reports a known outcome."""
        ctx = OperationContext()
        ctx.cancel()

        with pytest.raises(OperationCancelledError) as exc_info:
            ctx.run("noop", lambda: None)

        assert exc_info.value.outcome_unknown is False

    def test_queued_call_is_withdrawn(self) -> None:
        """Test a call still waiting for a worker never runs once cancelled."""
        release = threading.Event()
        blockers = [
            context_module._executor.submit(release.wait, 5)
            for _ in range(context_module.MAX_WORKERS)
        ]
        ctx = OperationContext(poll_interval=0.01)
        called = []
        threading.Timer(0.05, ctx.cancel).start()

        try:
            with pytest.raises(OperationCancelledError) as exc_info:
                ctx.run("queued", lambda: called.append(True))
        finally:
            release.set()
            for blocker in blockers:
                blocker.result(timeout=5)

        assert exc_info.value.outcome_unknown is False
        assert called == []

    def test_runs_on_shared_pool(self) -> None:
        """Test calls run on the module's worker threads."""
        ctx = OperationContext(poll_interval=0.01)

        thread_name = ctx.run("name", lambda: threading.current_thread().name)

        assert thread_name.startswith("floe-catalog")

    def test_deadline_while_running(self) -> None:
        """Test the deadline interrupts a slow call."""
        ctx = OperationContext(timeout=0.05, poll_interval=0.01)
        release = threading.Event()

        with pytest.raises(OperationCancelledError):
            ctx.run("slow", release.wait, 5)
        release.set()


class TestRunInContext:
    """Tests for run_in_context."""

    def test_without_context_calls_directly(self) -> None:
        """Test None runs the function in the calling thread."""
        caller = threading.current_thread()

        assert run_in_context(None, "op", threading.current_thread) is caller

    def test_with_context(self) -> None:
        """Test a context runs the function through OperationContext.run."""
        ctx = OperationContext(poll_interval=0.01)

        assert run_in_context(ctx, "op", str.upper, "abc") == "ABC"

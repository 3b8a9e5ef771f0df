"""Cancellable execution context for catalog operations.

Every catalog operation accepts an optional OperationContext. The backend
call is submitted to a shared thread pool while the caller waits on it; when
the context is cancelled or its deadline passes, the caller gets
OperationCancelledError right away.

PyIceberg clients are blocking and cannot abort a request already sent. A
call that is still queued is withdrawn; a call that is already running is
abandoned and finishes on its own, so the error reports
``outcome_unknown=True``.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import ParamSpec, TypeVar

from floe_catalog.errors import OperationCancelledError

P = ParamSpec("P")
R = TypeVar("R")

DEFAULT_POLL_INTERVAL = 0.05
MAX_WORKERS = 16

# Shared by every context; abandoned calls hold a worker until they return
_executor = ThreadPoolExecutor(max_workers=MAX_WORKERS, thread_name_prefix="floe-catalog")


class OperationContext:
    """Cancellation token with an optional deadline.

    Attributes:
        deadline: Monotonic time after which the context counts as cancelled.

    Example:
        >>> ctx = OperationContext(timeout=30.0)
        >>> catalog.load_table(("bronze", "customers"), context=ctx)
        >>> ctx.cancel()  # from another thread
    """

    def __init__(
        self,
        *,
        timeout: float | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        """Initialize OperationContext.

        Args:
            timeout: Seconds until the context expires. None means no deadline.
            poll_interval: How often a waiting call re-checks cancellation.
        """
        if timeout is not None and timeout < 0:
            msg = f"timeout must be >= 0, got: {timeout}"
            raise ValueError(msg)
        self.deadline = time.monotonic() + timeout if timeout is not None else None
        self._poll_interval = poll_interval
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        """Cancel the context. Safe to call from any thread, more than once."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        """Return True if cancelled or past the deadline."""
        if self._cancelled.is_set():
            return True
        return self.deadline is not None and time.monotonic() >= self.deadline

    def remaining(self) -> float | None:
        """Return seconds left before the deadline, or None without a deadline."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def raise_if_cancelled(self, operation: str | None = None) -> None:
        """Raise OperationCancelledError if the context is cancelled."""
        if self.cancelled:
            raise OperationCancelledError(operation)

    def run(
        self,
        operation: str,
        func: Callable[P, R],
        *args: P.args,
        **kwargs: P.kwargs,
    ) -> R:
        """Run ``func`` in a worker thread, abandoning it on cancellation.

        Args:
            operation: Operation name, used in the cancellation error.
            func: Blocking backend call.
            *args: Positional arguments for ``func``.
            **kwargs: Keyword arguments for ``func``.

        Returns:
            The return value of ``func``.

        Raises:
            OperationCancelledError: If the context is cancelled before or
                while ``func`` runs. ``outcome_unknown`` is True when ``func``
                had already started and was left running.
        """
        self.raise_if_cancelled(operation)

        future: Future[R] = _executor.submit(func, *args, **kwargs)

        while True:
            done, _ = wait([future], timeout=self._poll_interval)
            if done:
                return future.result()
            if self.cancelled:
                if future.cancel():
                    raise OperationCancelledError(operation)
                if future.done():
                    return future.result()
                raise OperationCancelledError(operation, outcome_unknown=True)


def run_in_context(
    context: OperationContext | None,
    operation: str,
    func: Callable[P, R],
    *args: P.args,
    **kwargs: P.kwargs,
) -> R:
    """Run ``func`` under ``context``, or directly when no context is given."""
    if context is None:
        return func(*args, **kwargs)
    return context.run(operation, func, *args, **kwargs)

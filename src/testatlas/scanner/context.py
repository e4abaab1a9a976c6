"""Cancellation token with an optional deadline.

``ScanContext`` plays the role a context object plays in a request
pipeline: every blocking step of a scan polls ``done()`` so that a
``cancel()`` from any thread, or an expired deadline, stops discovery and
lets workers abandon their work promptly.

Contexts form a chain: ``with_timeout()`` derives a child that is done
when it is cancelled, when its own deadline passes, or when any ancestor
is done. Cancelling a child never affects its parent.
"""

from __future__ import annotations

import threading
import time

CANCELLED = "cancelled"
TIMEOUT = "timeout"


class ScanContext:
    """Thread-safe cancellation flag plus deadline.

    Args:
        timeout: Seconds until the context expires, or None for no
            deadline.
        parent: Context whose completion also completes this one.
    """

    def __init__(self, timeout: float | None = None, parent: ScanContext | None = None) -> None:
        self._event = threading.Event()
        self._parent = parent
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    def cancel(self) -> None:
        """Mark the context cancelled. Idempotent."""
        self._event.set()

    def with_timeout(self, timeout: float | None) -> ScanContext:
        """Derive a child context expiring after ``timeout`` seconds."""
        return ScanContext(timeout=timeout, parent=self)

    @property
    def deadline(self) -> float | None:
        """Effective ``time.monotonic()`` deadline, the earliest in the chain."""
        deadlines = [self._deadline]
        if self._parent is not None:
            deadlines.append(self._parent.deadline)
        known = [d for d in deadlines if d is not None]
        return min(known) if known else None

    def remaining(self) -> float | None:
        """Seconds until the deadline (never negative), or None."""
        deadline = self.deadline
        if deadline is None:
            return None
        return max(0.0, deadline - time.monotonic())

    @property
    def reason(self) -> str | None:
        """``"cancelled"``, ``"timeout"`` or None while the context is live."""
        if self._event.is_set():
            return CANCELLED
        if self._deadline is not None and time.monotonic() >= self._deadline:
            return TIMEOUT
        if self._parent is not None:
            return self._parent.reason
        return None

    def done(self) -> bool:
        return self.reason is not None

    @property
    def cancelled(self) -> bool:
        return self.reason == CANCELLED

    @property
    def expired(self) -> bool:
        return self.reason == TIMEOUT

    def __repr__(self) -> str:
        return f"ScanContext(reason={self.reason!r}, remaining={self.remaining()!r})"

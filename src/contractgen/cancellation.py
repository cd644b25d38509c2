"""
Per-target cancellation tokens.

Each target task gets its own token, so cancelling or timing out one target
never touches another. Cancellation is cooperative: emitters check the token
between types and the assembler commits through it right before publishing
its staging directory. After that commit the task can no longer be
cancelled, so a target is never reported as timed out once its new tree is
going into place.
"""

from __future__ import annotations

import threading
import time
from typing import Optional

from contractgen.errors import TargetTimeoutError


class CancellationToken:
    """
    Cancellation flag plus an optional deadline for one target.

    The deadline starts counting when :meth:`start` is called (when the task
    actually begins running, not when it is queued).
    """

    def __init__(self, target: str, timeout_seconds: Optional[float] = None):
        self.target = target
        self.timeout_seconds = timeout_seconds
        self._event = threading.Event()
        self._deadline: Optional[float] = None
        self._lock = threading.Lock()
        self._committed = False

    def start(self) -> None:
        if self.timeout_seconds is not None and self._deadline is None:
            self._deadline = time.monotonic() + self.timeout_seconds

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() > self._deadline

    @property
    def committed(self) -> bool:
        return self._committed

    def cancel(self) -> bool:
        """
        Request cancellation.

        Returns:
            False when the task already committed its output; the request is
            ignored and the task runs to completion.
        """
        with self._lock:
            if self._committed:
                return False
            self._event.set()
            return True

    @property
    def cancelled(self) -> bool:
        return self._event.is_set() or self.expired

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise TargetTimeoutError(self.target, self.timeout_seconds)

    def commit(self) -> None:
        """
        Pass the point of no return.

        Raises:
            TargetTimeoutError: The token was cancelled or expired first.
        """
        with self._lock:
            self.raise_if_cancelled()
            self._committed = True


__all__ = ["CancellationToken"]

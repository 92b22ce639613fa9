from __future__ import annotations

import threading
from typing import Optional


class CompletionTracker:
    """Counter of in-flight jobs used to wait for the pipeline to drain."""

    def __init__(self):
        self._outstanding = 0
        self._cond = threading.Condition()

    @property
    def outstanding(self) -> int:
        with self._cond:
            return self._outstanding

    def add(self, n: int = 1) -> None:
        """Record n new in-flight jobs. Call before the jobs are visible to workers."""
        if n < 1:
            raise ValueError("add() expects a positive count")
        with self._cond:
            self._outstanding += n

    def done(self) -> None:
        """Mark one job as completed, successfully or not."""
        with self._cond:
            if self._outstanding == 0:
                raise RuntimeError("done() called with no outstanding jobs")
            self._outstanding -= 1
            if self._outstanding == 0:
                self._cond.notify_all()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until no job is outstanding. Returns False if the timeout elapsed first."""
        with self._cond:
            return self._cond.wait_for(lambda: self._outstanding == 0, timeout=timeout)

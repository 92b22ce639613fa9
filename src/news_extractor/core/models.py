from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict


@dataclass(frozen=True)
class Job:
    """A unit of work pairing a title with the URL to fetch."""

    title: str
    url: str
    row_number: int = 0


@dataclass(frozen=True)
class Result:
    """A completed job's title paired with its extracted content."""

    title: str
    content: str


@dataclass
class RunReport:
    """Summary report of a pipeline run."""

    rows_read: int = 0
    jobs_skipped: int = 0
    jobs_submitted: int = 0
    jobs_succeeded: int = 0
    jobs_failed: int = 0
    elapsed_s: float = 0.0
    failures: Dict[str, int] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def completed(self) -> int:
        """Jobs that finished, successfully or not."""
        return self.jobs_succeeded + self.jobs_failed

    def record_success(self) -> None:
        """Count one successfully written job. Safe to call from workers."""
        with self._lock:
            self.jobs_succeeded += 1

    def record_failure(self, key: str) -> None:
        """Count one dropped job under the given failure kind. Safe to call from workers."""
        with self._lock:
            self.jobs_failed += 1
            self.failures[key] = self.failures.get(key, 0) + 1

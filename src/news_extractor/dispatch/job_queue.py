from __future__ import annotations

import threading
from collections import deque
from typing import Deque, Optional

from news_extractor.core.errors import QueueClosedError
from news_extractor.core.models import Job


class JobQueue:
    """
    Bounded FIFO buffer between the source reader and the worker pool.

    ``submit`` blocks while the buffer is full, ``get`` blocks while it is empty
    and still open. Once closed and drained, ``get`` returns ``None`` so each
    worker can exit its loop.
    """

    def __init__(self, capacity: int = 1000):
        if capacity < 1:
            raise ValueError("queue capacity must be at least 1")
        self.capacity = capacity
        self._items: Deque[Job] = deque()
        self._closed = False
        self._lock = threading.Lock()
        self._not_full = threading.Condition(self._lock)
        self._not_empty = threading.Condition(self._lock)

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def submit(self, job: Job) -> None:
        """Append a job, waiting for free space when the buffer is at capacity."""
        with self._not_full:
            while len(self._items) >= self.capacity and not self._closed:
                self._not_full.wait()
            if self._closed:
                raise QueueClosedError("submit() called after close()")
            self._items.append(job)
            self._not_empty.notify()

    def get(self) -> Optional[Job]:
        """Take the next job, or return ``None`` once the queue is closed and empty."""
        with self._not_empty:
            while not self._items and not self._closed:
                self._not_empty.wait()
            if not self._items:
                return None
            job = self._items.popleft()
            self._not_full.notify()
            return job

    def close(self) -> None:
        """Signal that no more jobs will be submitted. Idempotent."""
        with self._lock:
            self._closed = True
            self._not_empty.notify_all()
            self._not_full.notify_all()

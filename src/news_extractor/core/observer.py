from __future__ import annotations

import logging
from typing import Optional, Protocol

from news_extractor.core.models import Job, RunReport
from news_extractor.utils.logging import get_logger


class PipelineObserver(Protocol):
    """Receives pipeline events. Implementations must be safe to call from worker threads."""

    def run_started(self, workers: int, queue_capacity: int) -> None: ...

    def row_skipped(self, row_number: int, reason: str) -> None: ...

    def job_succeeded(self, job: Job, worker_id: int) -> None: ...

    def job_failed(self, job: Job, error: BaseException, worker_id: int) -> None: ...

    def run_finished(self, report: RunReport) -> None: ...


class NullObserver:
    """Observer that ignores every event."""

    def run_started(self, workers: int, queue_capacity: int) -> None:
        pass

    def row_skipped(self, row_number: int, reason: str) -> None:
        pass

    def job_succeeded(self, job: Job, worker_id: int) -> None:
        pass

    def job_failed(self, job: Job, error: BaseException, worker_id: int) -> None:
        pass

    def run_finished(self, report: RunReport) -> None:
        pass


class LoggingObserver:
    """Observer that turns pipeline events into log records."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.log = logger or get_logger("news_extractor.pipeline")

    def run_started(self, workers: int, queue_capacity: int) -> None:
        self.log.info("Run started: workers=%s queue_capacity=%s", workers, queue_capacity)

    def row_skipped(self, row_number: int, reason: str) -> None:
        self.log.warning("Row %s skipped: %s", row_number, reason)

    def job_succeeded(self, job: Job, worker_id: int) -> None:
        self.log.debug("Title written: %s (worker=%s row=%s)", job.title, worker_id, job.row_number)

    def job_failed(self, job: Job, error: BaseException, worker_id: int) -> None:
        self.log.warning("Error scraping url: %s (worker=%s, %s)", job.url, worker_id, error)

    def run_finished(self, report: RunReport) -> None:
        self.log.info(
            "Run done: rows=%s submitted=%s succeeded=%s failed=%s skipped=%s elapsed=%.1fs failures=%s",
            report.rows_read,
            report.jobs_submitted,
            report.jobs_succeeded,
            report.jobs_failed,
            report.jobs_skipped,
            report.elapsed_s,
            report.failures,
        )

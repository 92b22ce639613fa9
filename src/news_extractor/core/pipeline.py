from __future__ import annotations

import time
from typing import Optional

from news_extractor.core.models import RunReport
from news_extractor.core.observer import LoggingObserver, PipelineObserver
from news_extractor.dispatch.job_queue import JobQueue
from news_extractor.dispatch.tracker import CompletionTracker
from news_extractor.dispatch.worker_pool import WorkerPool
from news_extractor.fetch.extractor import ContentExtractor
from news_extractor.sinks.base import ResultSink
from news_extractor.source.csv_reader import CsvSourceReader


class ExtractionPipeline:
    """
    Drives one run: source reader -> bounded job queue -> worker pool -> sink.

    The reader thread (the caller) blocks on ``submit`` when the queue is
    full, then waits on the completion tracker once the input is exhausted.
    The sink is opened before any worker starts and closed after the drain.
    """

    def __init__(
        self,
        extractor: ContentExtractor,
        workers: int = 100,
        queue_capacity: int = 1000,
        observer: Optional[PipelineObserver] = None,
        progress_every: int = 1000,
    ):
        """
        Args:
            extractor: Fetch-and-extract collaborator shared by all workers.
            workers: Number of worker threads.
            queue_capacity: Maximum number of jobs buffered ahead of the workers.
            observer: Receives pipeline events; defaults to a logging observer.
            progress_every: Each worker logs a progress line after this many rows.
        """
        if workers < 1:
            raise ValueError("workers must be at least 1")
        if queue_capacity < 1:
            raise ValueError("queue_capacity must be at least 1")
        self.extractor = extractor
        self.workers = workers
        self.queue_capacity = queue_capacity
        self.observer = observer or LoggingObserver()
        self.progress_every = progress_every

    def run(self, reader: CsvSourceReader, sink: ResultSink) -> RunReport:
        """
        Process every job from ``reader`` and write results to ``sink``.

        Raises the reader's or sink's open errors before any work starts.
        Per-job failures are counted in the returned report.
        """
        started = time.monotonic()
        report = RunReport()

        reader.open()
        try:
            sink.open()
        except Exception:
            reader.close()
            raise

        queue = JobQueue(self.queue_capacity)
        tracker = CompletionTracker()
        pool = WorkerPool(
            queue=queue,
            tracker=tracker,
            extractor=self.extractor,
            sink=sink,
            size=self.workers,
            observer=self.observer,
            report=report,
            progress_every=self.progress_every,
        )

        self.observer.run_started(self.workers, self.queue_capacity)
        try:
            pool.start()
            try:
                for job in reader.iter_jobs():
                    tracker.add(1)
                    try:
                        queue.submit(job)
                    except Exception:
                        tracker.done()
                        raise
                    report.jobs_submitted += 1
            finally:
                queue.close()

            tracker.wait()
            pool.join()
        finally:
            sink.close()
            reader.close()

        report.rows_read = reader.rows_read
        report.jobs_skipped = reader.rows_skipped
        report.elapsed_s = time.monotonic() - started
        self.observer.run_finished(report)
        return report

from __future__ import annotations

import threading
from typing import List, Optional

from news_extractor.core.models import Job, Result, RunReport
from news_extractor.core.observer import NullObserver, PipelineObserver
from news_extractor.dispatch.job_queue import JobQueue
from news_extractor.dispatch.tracker import CompletionTracker
from news_extractor.fetch.extractor import ContentExtractor
from news_extractor.sinks.base import ResultSink
from news_extractor.utils.logging import get_logger


class WorkerPool:
    """
    Fixed set of threads that pull jobs, run the extractor and hand results to the sink.

    A failing job is logged, counted and dropped; it never stops the pool. Every
    pulled job is reported to the completion tracker exactly once.
    """

    def __init__(
        self,
        queue: JobQueue,
        tracker: CompletionTracker,
        extractor: ContentExtractor,
        sink: ResultSink,
        size: int = 100,
        observer: Optional[PipelineObserver] = None,
        report: Optional[RunReport] = None,
        progress_every: int = 1000,
    ):
        if size < 1:
            raise ValueError("worker pool size must be at least 1")
        self.queue = queue
        self.tracker = tracker
        self.extractor = extractor
        self.sink = sink
        self.size = size
        self.observer = observer or NullObserver()
        self.report = report or RunReport()
        self.progress_every = max(1, progress_every)
        self._threads: List[threading.Thread] = []
        self.log = get_logger("news_extractor.workers")

    def start(self) -> None:
        """Launch the worker threads."""
        if self._threads:
            raise RuntimeError("worker pool already started")
        for worker_id in range(self.size):
            t = threading.Thread(
                target=self._run,
                args=(worker_id,),
                name=f"extract-worker-{worker_id}",
                daemon=True,
            )
            self._threads.append(t)
            t.start()
        self.log.debug("Started %s workers", self.size)

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for every worker to observe queue exhaustion and exit."""
        for t in self._threads:
            t.join(timeout)

    def alive(self) -> int:
        return sum(1 for t in self._threads if t.is_alive())

    def _run(self, worker_id: int) -> None:
        written = 0
        while True:
            job = self.queue.get()
            if job is None:
                break
            try:
                if self._process(job, worker_id):
                    written += 1
                    if written % self.progress_every == 0:
                        self.log.info("Worker %s wrote %s rows", worker_id, written)
            finally:
                self.tracker.done()
        self.log.debug("Worker %s exiting after %s rows", worker_id, written)

    def _process(self, job: Job, worker_id: int) -> bool:
        try:
            content = self.extractor.extract(job.url)
            self.sink.write(Result(title=job.title, content=content))
        except Exception as e:
            self.report.record_failure(getattr(e, "kind", type(e).__name__))
            self._notify("job_failed", job, e, worker_id)
            return False

        self.report.record_success()
        self._notify("job_succeeded", job, worker_id)
        return True

    def _notify(self, event: str, *args) -> None:
        # A broken observer must not take a worker down with it.
        try:
            getattr(self.observer, event)(*args)
        except Exception as e:
            self.log.warning("Observer %s failed (%s: %s)", event, type(e).__name__, e)

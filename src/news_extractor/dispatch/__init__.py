from news_extractor.dispatch.job_queue import JobQueue
from news_extractor.dispatch.tracker import CompletionTracker
from news_extractor.dispatch.worker_pool import WorkerPool

__all__ = [
    "CompletionTracker",
    "JobQueue",
    "WorkerPool",
]

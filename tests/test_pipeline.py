"""
Integration tests for the extraction pipeline.
Runs the full reader -> queue -> workers -> sink path against temporary CSV
files with an in-memory extractor in place of HTTP.
"""

import csv
import os
import shutil
import tempfile
import threading
import unittest
from unittest.mock import Mock

from news_extractor.core.errors import FetchError, MissingColumnsError, SinkOpenError
from news_extractor.core.models import Job, Result, RunReport
from news_extractor.core.observer import NullObserver
from news_extractor.core.pipeline import ExtractionPipeline
from news_extractor.dispatch.job_queue import JobQueue
from news_extractor.dispatch.tracker import CompletionTracker
from news_extractor.dispatch.worker_pool import WorkerPool
from news_extractor.sinks.csv_sink import CsvResultSink
from news_extractor.source.csv_reader import CsvSourceReader


class MappingExtractor:
    """Returns content from a dict; unknown urls fail like a 404."""

    def __init__(self, contents):
        self.contents = contents
        self.calls = []
        self._lock = threading.Lock()

    def extract(self, url: str) -> str:
        with self._lock:
            self.calls.append(url)
        if url not in self.contents:
            raise FetchError(url, "status code error: 404", status_code=404)
        return self.contents[url]


class FailingExtractor:
    def extract(self, url: str) -> str:
        raise FetchError(url, "request failed: ConnectionError")


class GatedExtractor:
    """Blocks every call until the gate is opened."""

    def __init__(self):
        self.gate = threading.Event()
        self.started = threading.Semaphore(0)

    def extract(self, url: str) -> str:
        self.started.release()
        self.gate.wait()
        return f"content of {url}"


class PipelineTestCase(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.input_path = os.path.join(self.temp_dir, "in.csv")
        self.output_path = os.path.join(self.temp_dir, "out.csv")

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _write_input(self, rows, header=("title", "url")):
        with open(self.input_path, "w", encoding="utf-8", newline="") as f:
            w = csv.writer(f)
            w.writerow(header)
            w.writerows(rows)

    def _read_output(self):
        with open(self.output_path, "r", encoding="utf-8", newline="") as f:
            return list(csv.reader(f))

    def _run(self, extractor, workers=4, capacity=10):
        pipeline = ExtractionPipeline(
            extractor, workers=workers, queue_capacity=capacity, observer=NullObserver()
        )
        return pipeline.run(CsvSourceReader(self.input_path), CsvResultSink(self.output_path))


class TestExtractionPipeline(PipelineTestCase):
    def test_scenario_skips_empty_title_and_writes_successes(self):
        self._write_input([("A", "u1"), ("", "u2"), ("B", "u3")])
        extractor = MappingExtractor({"u1": "c1", "u3": "c3"})

        report = self._run(extractor)

        rows = self._read_output()
        self.assertEqual(rows[0], ["title", "content"])
        self.assertEqual(sorted(map(tuple, rows[1:])), [("A", "c1"), ("B", "c3")])
        self.assertNotIn("u2", extractor.calls)
        self.assertEqual(report.rows_read, 3)
        self.assertEqual(report.jobs_skipped, 1)
        self.assertEqual(report.jobs_submitted, 2)
        self.assertEqual(report.jobs_succeeded, 2)
        self.assertEqual(report.jobs_failed, 0)

    def test_always_failing_extractor_writes_header_only(self):
        self._write_input([(f"t{i}", f"u{i}") for i in range(50)])

        report = self._run(FailingExtractor(), workers=8, capacity=4)

        self.assertEqual(self._read_output(), [["title", "content"]])
        self.assertEqual(report.jobs_submitted, 50)
        self.assertEqual(report.jobs_failed, 50)
        self.assertEqual(report.completed, report.jobs_submitted)
        self.assertEqual(report.failures, {"transport_error": 50})

    def test_mixed_failures_are_counted_by_kind(self):
        self._write_input([("A", "u1"), ("B", "missing"), ("C", "u3")])
        report = self._run(MappingExtractor({"u1": "c1", "u3": "c3"}))

        self.assertEqual(report.jobs_succeeded, 2)
        self.assertEqual(report.failures, {"http_404": 1})
        self.assertEqual(len(self._read_output()), 3)

    def test_identical_output_sets_across_worker_counts(self):
        rows = [(f"title {i}", f"u{i}") for i in range(300)]
        contents = {f"u{i}": f"content {i} " + "lorem " * (i % 7) for i in range(300) if i % 11}
        self._write_input(rows)

        outputs = []
        for workers in (1, 10, 200):
            report = self._run(MappingExtractor(contents), workers=workers, capacity=16)
            self.assertEqual(report.completed, 300)
            out = self._read_output()
            self.assertEqual(out[0], ["title", "content"])
            outputs.append(set(map(tuple, out[1:])))

        self.assertEqual(outputs[0], outputs[1])
        self.assertEqual(outputs[0], outputs[2])
        self.assertEqual(len(outputs[0]), len(contents))
        for title, content in outputs[0]:
            idx = title.split()[1]
            self.assertEqual(content, contents[f"u{idx}"])

    def test_empty_input_produces_header_only(self):
        self._write_input([])
        report = self._run(MappingExtractor({}))
        self.assertEqual(self._read_output(), [["title", "content"]])
        self.assertEqual(report.jobs_submitted, 0)

    def test_missing_columns_abort_before_output(self):
        self._write_input([("A", "u1")], header=("title", "link"))
        extractor = MappingExtractor({"u1": "c1"})
        with self.assertRaises(MissingColumnsError):
            self._run(extractor)
        self.assertEqual(extractor.calls, [])
        self.assertFalse(os.path.exists(self.output_path))

    def test_unwritable_output_aborts(self):
        self._write_input([("A", "u1")])
        self.output_path = self.temp_dir
        with self.assertRaises(SinkOpenError):
            self._run(MappingExtractor({"u1": "c1"}))

    def test_observer_receives_events(self):
        self._write_input([("A", "u1"), ("", "u2"), ("B", "bad")])
        observer = Mock()
        pipeline = ExtractionPipeline(MappingExtractor({"u1": "c1"}), workers=2, queue_capacity=2, observer=observer)

        report = pipeline.run(CsvSourceReader(self.input_path), CsvResultSink(self.output_path))

        observer.run_started.assert_called_once_with(2, 2)
        self.assertEqual(observer.job_succeeded.call_count, 1)
        self.assertEqual(observer.job_failed.call_count, 1)
        failed_job = observer.job_failed.call_args.args[0]
        self.assertEqual(failed_job.url, "bad")
        observer.run_finished.assert_called_once_with(report)

    def test_invalid_input_byte_does_not_abort_run(self):
        with open(self.input_path, "wb") as f:
            f.write(b"title,url\nA,u1\nB\xff,u2\nC,u3\n")
        extractor = MappingExtractor({"u1": "c1", "u2": "c2", "u3": "c3"})

        report = self._run(extractor)

        self.assertEqual(report.jobs_submitted, 3)
        self.assertEqual(report.jobs_succeeded, 3)
        titles = sorted(row[0] for row in self._read_output()[1:])
        self.assertEqual(titles, ["A", "B\ufffd", "C"])

    def test_csv_error_mid_file_still_drains(self):
        too_long = "x" * (csv.field_size_limit() + 10)
        with open(self.input_path, "w", encoding="utf-8", newline="") as f:
            f.write(f"title,url\nA,u1\nB,u2\nC,{too_long}\nD,u4\n")

        report = self._run(MappingExtractor({"u1": "c1", "u2": "c2", "u4": "c4"}), workers=2, capacity=1)

        self.assertEqual(report.rows_read, 2)
        self.assertEqual(report.jobs_submitted, 2)
        self.assertEqual(report.completed, 2)
        self.assertEqual(sorted(map(tuple, self._read_output()[1:])), [("A", "c1"), ("B", "c2")])

    def test_rejects_invalid_sizes(self):
        with self.assertRaises(ValueError):
            ExtractionPipeline(FailingExtractor(), workers=0)
        with self.assertRaises(ValueError):
            ExtractionPipeline(FailingExtractor(), queue_capacity=0)


class TestWorkerPool(unittest.TestCase):
    def test_backpressure_small_capacity_loses_nothing(self):
        queue = JobQueue(2)
        tracker = CompletionTracker()
        extractor = GatedExtractor()
        sink = Mock()
        report = RunReport()
        pool = WorkerPool(queue, tracker, extractor, sink, size=1, report=report)
        pool.start()

        submitted = []

        def producer():
            for i in range(5):
                tracker.add(1)
                queue.submit(Job(title=f"t{i}", url=f"u{i}"))
                submitted.append(i)
            queue.close()

        t = threading.Thread(target=producer, daemon=True)
        t.start()

        # One job held by the paused worker, two buffered, producer blocked on the fourth.
        self.assertTrue(extractor.started.acquire(timeout=2))
        t.join(0.3)
        self.assertTrue(t.is_alive())
        self.assertEqual(len(submitted), 3)
        self.assertEqual(len(queue), 2)

        extractor.gate.set()
        t.join(5)
        self.assertTrue(tracker.wait(timeout=5))
        pool.join(5)

        self.assertEqual(pool.alive(), 0)
        written = sorted(c.args[0].title for c in sink.write.call_args_list)
        self.assertEqual(written, ["t0", "t1", "t2", "t3", "t4"])
        self.assertEqual(report.jobs_succeeded, 5)

    def test_sink_failure_is_contained(self):
        queue = JobQueue(10)
        tracker = CompletionTracker()
        sink = Mock()
        sink.write.side_effect = [OSError("disk full"), None, None]
        report = RunReport()
        pool = WorkerPool(queue, tracker, MappingExtractor({"a": "1", "b": "2", "c": "3"}), sink, size=1, report=report)

        for url in ("a", "b", "c"):
            tracker.add(1)
            queue.submit(Job(title=url, url=url))
        queue.close()
        pool.start()

        self.assertTrue(tracker.wait(timeout=5))
        pool.join(5)
        self.assertEqual(report.jobs_succeeded, 2)
        self.assertEqual(report.failures, {"OSError": 1})

    def test_failing_observer_does_not_stop_workers(self):
        queue = JobQueue(2)
        tracker = CompletionTracker()
        observer = Mock()
        observer.job_succeeded.side_effect = RuntimeError("observer broke")
        observer.job_failed.side_effect = RuntimeError("observer broke")
        sink = Mock()
        report = RunReport()
        extractor = MappingExtractor({f"u{i}": "c" for i in range(0, 20, 2)})
        pool = WorkerPool(queue, tracker, extractor, sink, size=2, observer=observer, report=report)
        pool.start()

        for i in range(20):
            tracker.add(1)
            queue.submit(Job(title=f"t{i}", url=f"u{i}"))
        self.assertEqual(pool.alive(), 2)
        queue.close()

        self.assertTrue(tracker.wait(timeout=5))
        pool.join(5)
        self.assertEqual(report.jobs_succeeded, 10)
        self.assertEqual(report.jobs_failed, 10)
        self.assertEqual(sink.write.call_count, 10)
        self.assertEqual(observer.job_succeeded.call_count + observer.job_failed.call_count, 20)

    def test_results_carry_job_title(self):
        queue = JobQueue(1)
        tracker = CompletionTracker()
        sink = Mock()
        pool = WorkerPool(queue, tracker, MappingExtractor({"u": "body"}), sink, size=3)
        pool.start()
        tracker.add(1)
        queue.submit(Job(title="Headline", url="u"))
        queue.close()
        self.assertTrue(tracker.wait(timeout=5))
        pool.join(5)
        sink.write.assert_called_once_with(Result(title="Headline", content="body"))

    def test_start_twice_raises(self):
        queue = JobQueue(1)
        pool = WorkerPool(queue, CompletionTracker(), FailingExtractor(), Mock(), size=1)
        pool.start()
        try:
            with self.assertRaises(RuntimeError):
                pool.start()
        finally:
            queue.close()
            pool.join(5)

    def test_rejects_empty_pool(self):
        with self.assertRaises(ValueError):
            WorkerPool(JobQueue(1), CompletionTracker(), FailingExtractor(), Mock(), size=0)


if __name__ == "__main__":
    unittest.main()

from __future__ import annotations

import csv
import threading
from pathlib import Path
from typing import IO, Optional

from news_extractor.core.errors import SinkOpenError
from news_extractor.core.models import Result
from news_extractor.utils.logging import get_logger

HEADER = ("title", "content")


class CsvResultSink:
    """
    Sink that writes results to a two-column CSV file.

    The header is written once by ``open()``, before any worker runs. Each
    ``write()`` appends a single row under a lock, so rows from concurrent
    workers never interleave. Both fields are always quoted.
    """

    def __init__(self, path: str, encoding: str = "utf-8"):
        self.path = path
        self.encoding = encoding
        self._fh: Optional[IO[str]] = None
        self._writer = None
        self._lock = threading.Lock()
        self._rows_written = 0
        self.log = get_logger("news_extractor.sink.csv")

    @property
    def rows_written(self) -> int:
        return self._rows_written

    def open(self) -> None:
        """Create (or truncate) the output file and write the header."""
        if self._fh is not None:
            raise RuntimeError("csv sink already open")
        try:
            self._ensure_parent_dir(self.path)
            fh = open(self.path, "w", newline="", encoding=self.encoding)
        except OSError as e:
            raise SinkOpenError(f"Cannot create output file {self.path}: {e}") from e

        csv.writer(fh).writerow(HEADER)
        self._fh = fh
        self._writer = csv.writer(fh, quoting=csv.QUOTE_ALL)
        self.log.info("CSV output opened: path=%s", self.path)

    def write(self, result: Result) -> None:
        """Append one row. Safe to call from many threads."""
        with self._lock:
            if self._writer is None:
                raise RuntimeError("csv sink is not open")
            self._writer.writerow((result.title, result.content))
            self._rows_written += 1

    def close(self) -> None:
        """Flush and close the output file. Idempotent."""
        with self._lock:
            if self._fh is None:
                return
            self._fh.flush()
            self._fh.close()
            self._fh = None
            self._writer = None
        self.log.info("CSV output closed: path=%s rows=%d", self.path, self._rows_written)

    def __enter__(self) -> "CsvResultSink":
        self.open()
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _ensure_parent_dir(self, path: str) -> None:
        parent = Path(path).parent
        if str(parent) not in {"", "."}:
            parent.mkdir(parents=True, exist_ok=True)

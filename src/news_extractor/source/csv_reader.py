from __future__ import annotations

import csv
from typing import IO, Iterator, List, Optional

from news_extractor.core.errors import MissingColumnsError, SourceOpenError
from news_extractor.core.models import Job
from news_extractor.core.observer import NullObserver, PipelineObserver
from news_extractor.utils.logging import get_logger


class CsvSourceReader:
    """
    Streams jobs out of a CSV file whose header names a title and a url column.

    Columns are located by exact, case-sensitive name and may sit at any
    position; other columns are ignored. Undecodable bytes are replaced
    (``errors="replace"``) so they only affect the cell they occur in.
    """

    def __init__(
        self,
        path: str,
        title_column: str = "title",
        url_column: str = "url",
        encoding: str = "utf-8",
        errors: str = "replace",
        observer: Optional[PipelineObserver] = None,
    ):
        self.path = path
        self.title_column = title_column
        self.url_column = url_column
        self.encoding = encoding
        self.errors = errors
        self.observer = observer or NullObserver()
        self._fh: Optional[IO[str]] = None
        self._reader = None
        self._title_idx = -1
        self._url_idx = -1
        self.rows_read = 0
        self.rows_skipped = 0
        self.log = get_logger("news_extractor.source.csv")

    def open(self) -> None:
        """Open the file and validate its header."""
        try:
            fh = open(self.path, "r", newline="", encoding=self.encoding, errors=self.errors)
        except OSError as e:
            raise SourceOpenError(f"Cannot open input file {self.path}: {e}") from e

        reader = csv.reader(fh)
        try:
            header = next(reader, None)
        except (csv.Error, UnicodeDecodeError) as e:
            fh.close()
            raise SourceOpenError(f"Cannot read header of {self.path}: {e}") from e

        try:
            self._title_idx, self._url_idx = self._locate_columns(header or [])
        except MissingColumnsError:
            fh.close()
            raise

        self._fh = fh
        self._reader = reader
        self.log.info(
            "CSV input opened: path=%s title_col=%s url_col=%s",
            self.path,
            self._title_idx,
            self._url_idx,
        )

    def iter_jobs(self) -> Iterator[Job]:
        """Yield one job per data row with a non-empty title and url."""
        if self._reader is None:
            raise RuntimeError("csv source is not open")

        while True:
            try:
                row = next(self._reader)
            except StopIteration:
                break
            except (csv.Error, UnicodeDecodeError) as e:
                # Unrecoverable mid-file; what was read so far still gets processed.
                self.log.error("Stopped reading %s after %s rows: %s", self.path, self.rows_read, e)
                break

            self.rows_read += 1
            title = self._cell(row, self._title_idx)
            url = self._cell(row, self._url_idx)

            if not title or not url:
                self.rows_skipped += 1
                self.observer.row_skipped(self.rows_read, "title or url is empty")
                continue

            yield Job(title=title, url=url, row_number=self.rows_read)

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None
            self._reader = None

    def __enter__(self) -> "CsvSourceReader":
        self.open()
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _locate_columns(self, header: List[str]) -> tuple[int, int]:
        title_idx = url_idx = -1
        for i, name in enumerate(header):
            if name == self.title_column and title_idx == -1:
                title_idx = i
            elif name == self.url_column and url_idx == -1:
                url_idx = i

        missing = []
        if title_idx == -1:
            missing.append(self.title_column)
        if url_idx == -1:
            missing.append(self.url_column)
        if missing:
            raise MissingColumnsError(missing)
        return title_idx, url_idx

    @staticmethod
    def _cell(row: List[str], idx: int) -> str:
        return row[idx].strip() if idx < len(row) else ""

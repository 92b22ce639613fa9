from __future__ import annotations

from typing import Iterable, Optional


class PipelineError(Exception):
    """Base class for all pipeline errors."""


class SourceOpenError(PipelineError):
    """The input file could not be opened."""


class MissingColumnsError(PipelineError, ValueError):
    """The input header lacks one or more required columns."""

    def __init__(self, missing: Iterable[str]):
        self.missing = sorted(missing)
        super().__init__(f"Required columns not found in header: {', '.join(self.missing)}")


class SinkOpenError(PipelineError):
    """The output file could not be created."""


class QueueClosedError(PipelineError, RuntimeError):
    """A job was submitted after the queue was closed."""


class FetchError(PipelineError):
    """Retrieving a document failed (non-success status or transport error)."""

    def __init__(self, url: str, message: str, status_code: Optional[int] = None):
        self.url = url
        self.status_code = status_code
        super().__init__(f"{message} ({url})")

    @property
    def kind(self) -> str:
        if self.status_code is not None:
            return f"http_{self.status_code}"
        return "transport_error"


class ExtractionError(PipelineError):
    """A fetched document could not be turned into content."""

    def __init__(self, url: str, message: str):
        self.url = url
        super().__init__(f"{message} ({url})")

    @property
    def kind(self) -> str:
        return "extraction_error"

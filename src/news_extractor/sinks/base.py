from __future__ import annotations
from typing import Protocol
from news_extractor.core.models import Result

class ResultSink(Protocol):
    """Protocol for output sinks shared by all workers."""

    def open(self) -> None: ...

    def write(self, result: Result) -> None: ...

    def close(self) -> None: ...

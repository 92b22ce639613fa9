from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from news_extractor.config_models import PipelineSettings
from news_extractor.core.observer import LoggingObserver, PipelineObserver
from news_extractor.core.pipeline import ExtractionPipeline
from news_extractor.fetch.extractor import ContentExtractor, HtmlRegionExtractor
from news_extractor.http.client import RequestsHttpClient
from news_extractor.sinks.csv_sink import CsvResultSink
from news_extractor.source.csv_reader import CsvSourceReader


@dataclass(frozen=True)
class BuiltComponents:
    pipeline: ExtractionPipeline
    reader: CsvSourceReader
    sink: CsvResultSink
    extractor: ContentExtractor
    observer: PipelineObserver


class ComponentFactory:
    """
    Factory responsible for wiring dependencies.
    Keeps main.py free of construction details.
    """

    def __init__(self, observer: Optional[PipelineObserver] = None):
        self.observer = observer

    def build(self, settings: PipelineSettings) -> BuiltComponents:
        """
        Build all components needed for one run.

        Args:
            settings: Validated pipeline settings.

        Returns:
            A container with all built components.
        """
        observer = self.observer or LoggingObserver()
        extractor = self._extractor(settings)
        reader = self._reader(settings, observer)
        sink = self._sink(settings)

        pipeline = ExtractionPipeline(
            extractor=extractor,
            workers=settings.pool.workers,
            queue_capacity=settings.pool.queue_capacity,
            observer=observer,
            progress_every=settings.pool.progress_every,
        )

        return BuiltComponents(
            pipeline=pipeline,
            reader=reader,
            sink=sink,
            extractor=extractor,
            observer=observer,
        )

    # ---------- Builders (private) ----------

    def _extractor(self, settings: PipelineSettings) -> ContentExtractor:
        """Create the fetch-and-extract collaborator."""
        client = RequestsHttpClient(timeout_s=settings.extract.timeout_s, headers=settings.extract.headers)
        return HtmlRegionExtractor(client, selector=settings.extract.selector)

    def _reader(self, settings: PipelineSettings, observer: PipelineObserver) -> CsvSourceReader:
        """Create the CSV source reader."""
        src = settings.source
        return CsvSourceReader(
            src.path,
            title_column=src.title_column,
            url_column=src.url_column,
            encoding=src.encoding,
            errors=src.decode_errors,
            observer=observer,
        )

    def _sink(self, settings: PipelineSettings) -> CsvResultSink:
        """Create the output sink."""
        return CsvResultSink(settings.sink.path, encoding=settings.sink.encoding)

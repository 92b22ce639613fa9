from __future__ import annotations

from typing import Protocol

from news_extractor.core.errors import ExtractionError, FetchError
from news_extractor.http.client import HttpClient
from news_extractor.parse.html_utils import DEFAULT_SELECTOR, extract_region_text


class ContentExtractor(Protocol):
    """Protocol for fetch-and-extract collaborators. Raises on failure."""

    def extract(self, url: str) -> str: ...


class HtmlRegionExtractor:
    """Fetches an HTML page and returns the text of one region of it."""

    def __init__(self, client: HttpClient, selector: str = DEFAULT_SELECTOR):
        self.client = client
        self.selector = selector

    def extract(self, url: str) -> str:
        """Fetch ``url`` and extract the configured region's text."""
        resp = self.client.get(url)
        if resp.status_code != 200:
            raise FetchError(url, f"status code error: {resp.status_code}", status_code=resp.status_code)

        try:
            return extract_region_text(resp.text, self.selector)
        except Exception as e:
            raise ExtractionError(url, f"cannot parse document: {type(e).__name__}") from e

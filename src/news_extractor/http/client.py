from __future__ import annotations

import threading
import time
from typing import Dict, Optional, Protocol

import requests

from news_extractor.core.errors import FetchError
from news_extractor.http.response import HttpResponse
from news_extractor.utils.logging import get_logger

DEFAULT_HEADERS = {"User-Agent": "Mozilla/5.0 (compatible; NewsExtractor/0.1)"}


class HttpClient(Protocol):
    """Protocol for HTTP clients."""

    def get(self, url: str) -> HttpResponse: ...


class RequestsHttpClient:
    """
    HTTP client using the requests library.

    Every request carries a timeout, applied to each socket read and to the
    whole body download. Transport failures (connection errors, timeouts,
    invalid URLs) are raised as ``FetchError``; no retries are made.
    """

    def __init__(self, timeout_s: float = 30, headers: Optional[Dict[str, str]] = None):
        self.timeout_s = timeout_s
        self.headers = {**DEFAULT_HEADERS, **(headers or {})}
        self._local = threading.local()
        self.log = get_logger("news_extractor.http")

    @property
    def session(self) -> requests.Session:
        # requests.Session is not guaranteed thread-safe; one per worker thread.
        s = getattr(self._local, "session", None)
        if s is None:
            s = requests.Session()
            s.headers.update(self.headers)
            self._local.session = s
        return s

    def get(self, url: str) -> HttpResponse:
        """Send a GET request and return the decoded response."""
        deadline = time.monotonic() + self.timeout_s
        try:
            r = self.session.get(url, timeout=self.timeout_s, stream=True)
        except requests.RequestException as e:
            raise FetchError(url, f"request failed: {type(e).__name__}") from e

        try:
            body = self._read_body(r, url, deadline)
        finally:
            r.close()

        ct = r.headers.get("Content-Type", "")

        # If charset not specified, force utf-8 for HTML-ish content
        if "charset=" not in ct.lower() and ("text/html" in ct.lower() or "text/plain" in ct.lower()):
            encoding = "utf-8"
        else:
            encoding = r.encoding or "utf-8"

        try:
            text = body.decode(encoding, errors="replace")
        except LookupError:
            text = body.decode("utf-8", errors="replace")

        return HttpResponse(url=url, status_code=r.status_code, headers=dict(r.headers), text=text)

    def _read_body(self, r: requests.Response, url: str, deadline: float) -> bytes:
        # timeout_s bounds each socket read; the deadline bounds the whole body.
        chunks = []
        try:
            for chunk in r.iter_content(chunk_size=8192):
                if chunk:
                    chunks.append(chunk)
                if time.monotonic() > deadline:
                    raise FetchError(url, f"body not received within {self.timeout_s}s")
        except requests.RequestException as e:
            raise FetchError(url, f"reading body failed: {type(e).__name__}") from e
        return b"".join(chunks)

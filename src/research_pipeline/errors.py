"""Exception types raised inside the pipeline.

Item-level errors (fetch, extraction) are caught by the component that
owns the item and turned into a status on that item. They only escape
from the low-level calls (`Fetcher.fetch_one`, `TextExtractor.extract`).
"""

from typing import Optional


class PipelineError(Exception):
    pass


class FetchError(PipelineError):
    """A single fetch attempt failed."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class FetchTimeoutError(FetchError):
    def __init__(self, url: Optional[str] = None):
        super().__init__("Request timeout", url=url)


class HTTPStatusFetchError(FetchError):
    def __init__(self, status_code: int, body: str, url: Optional[str] = None):
        super().__init__(f"HTTP {status_code}: {body}", url=url)
        self.status_code = status_code
        self.body = body


class NoContentError(FetchError):
    def __init__(self, url: Optional[str] = None):
        super().__init__("No content returned", url=url)


class ExtractionError(PipelineError):
    """Text could not be extracted from an uploaded file."""


class ExtractorUnavailableError(ExtractionError):
    """No extractor can handle the file type (or its library is missing)."""

    def __init__(self, file_type: str, detail: str = ""):
        message = f"No text extractor available for {file_type}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.file_type = file_type

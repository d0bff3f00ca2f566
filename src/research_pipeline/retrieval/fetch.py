"""HTTP fetching with retry logic.

Fetches web content with a whole-request timeout, exponential backoff
between attempts and user-agent headers. Each call raises on failure;
batch-level containment lives in `retrieval.enrich`.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx

from ..config import get_settings
from ..errors import FetchError, FetchTimeoutError, HTTPStatusFetchError, NoContentError
from ..log import get_logger
from ..schemas.evidence import FetchResult
from .cache import ResponseCache
from .extract import body_to_text, HTML_CONTENT_TYPES
from .retry import RetryPolicy

settings = get_settings()
logger = get_logger("fetch")

ERROR_BODY_CHARS = 200


class Fetcher:
    def __init__(self, client: Optional[httpx.AsyncClient] = None,
                 retry_policy: Optional[RetryPolicy] = None,
                 cache: Optional[ResponseCache] = None,
                 timeout: Optional[float] = None):
        self.client = client
        self.retry_policy = retry_policy or RetryPolicy(
            retries=settings.FETCH_RETRIES,
            base_delay=settings.FETCH_BACKOFF_BASE_SECONDS,
        )
        self.cache = cache
        self.timeout = timeout if timeout is not None else settings.FETCH_TIMEOUT_SECONDS
        self.min_content_chars = settings.MIN_CONTENT_CHARS
        self.headers = {
            "User-Agent": settings.FETCH_USER_AGENT,
            "Accept": "text/html,application/xhtml+xml,text/plain;q=0.9,*/*;q=0.8",
        }

    @asynccontextmanager
    async def _open_client(self) -> AsyncIterator[httpx.AsyncClient]:
        # An injected client belongs to the caller and stays open.
        if self.client is not None:
            yield self.client
            return
        async with httpx.AsyncClient(follow_redirects=True, headers=self.headers) as client:
            yield client

    async def fetch_one(self, url: str) -> FetchResult:
        """
        Fetches and extracts the text of one URL.
        Raises the last FetchError once the retry budget is spent.
        """
        if self.cache is not None:
            cached = self.cache.get(url)
            if cached is not None:
                logger.debug(f"Cache hit for {url}")
                return cached.model_copy(update={"method": "cache"})

        result = await self.retry_policy.call(self._attempt, url)

        if self.cache is not None and not result.partial:
            self.cache.put(url, result)
        return result

    async def _attempt(self, url: str) -> FetchResult:
        async with self._open_client() as client:
            try:
                # httpx timeouts are per phase; wait_for bounds the whole exchange.
                resp = await asyncio.wait_for(
                    client.get(url, timeout=self.timeout, headers=self.headers),
                    timeout=self.timeout,
                )
            except (httpx.TimeoutException, asyncio.TimeoutError) as e:
                raise FetchTimeoutError(url=url) from e
            except httpx.RequestError as e:
                raise FetchError(f"Request failed: {e}", url=url) from e

        if not resp.is_success:
            raise HTTPStatusFetchError(resp.status_code, resp.text[:ERROR_BODY_CHARS], url=url)

        content_type = resp.headers.get("content-type", "")
        text = body_to_text(resp.text, content_type, url)
        if not text:
            raise NoContentError(url=url)

        is_html = any(t in content_type.lower() for t in HTML_CONTENT_TYPES)
        return FetchResult(
            url=url,
            content=text,
            partial=len(text) < self.min_content_chars,
            status_code=resp.status_code,
            method="html" if is_html else "direct",
        )

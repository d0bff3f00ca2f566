"""Batch enrichment of research sources.

Every source whose content is missing or too short is fetched; the rest
pass through unchanged. Fetches run concurrently and a failure stays
with its own source. Statistics are computed only after every fetch has
settled.
"""

import asyncio
from typing import List, Optional

from ..config import get_settings
from ..errors import FetchError
from ..log import get_logger
from ..quality.scoring import calculate_source_quality
from ..schemas.evidence import EnrichmentBatch, EnrichmentStats, Source
from .fetch import Fetcher
from .url import AdmissibilityFilter, admissibility_filter

settings = get_settings()
logger = get_logger("enrich")


def enrichment_stats(sources: List[Source], min_content_chars: Optional[int] = None) -> EnrichmentStats:
    threshold = settings.MIN_CONTENT_CHARS if min_content_chars is None else min_content_chars
    successful = [s for s in sources if s.content_length > threshold]
    total_size = sum(s.content_length for s in sources)
    return EnrichmentStats(
        total=len(sources),
        successful=len(successful),
        partial=sum(1 for s in sources if s.fetch_status == "partial"),
        failed=sum(1 for s in sources if s.fetch_status == "failed"),
        skipped=sum(1 for s in sources if s.fetch_status == "skipped"),
        total_content_size=total_size,
        average_content_size=round(total_size / len(successful)) if successful else 0,
    )


class ContentEnricher:
    def __init__(self, fetcher: Optional[Fetcher] = None,
                 admissibility: Optional[AdmissibilityFilter] = None,
                 max_chars: Optional[int] = None):
        self.fetcher = fetcher or Fetcher()
        self.admissibility = admissibility or admissibility_filter
        self.max_chars = max_chars or settings.MAX_CHARS_PER_SOURCE
        self.min_content_chars = settings.MIN_CONTENT_CHARS
        self.large_context_threshold = settings.LARGE_CONTEXT_THRESHOLD

    def needs_enrichment(self, source: Source) -> bool:
        # Synthesis and uploaded documents are trusted as given and never fetched.
        if source.kind in ("synthesis", "document") or source.fetch_status == "user-provided":
            return False
        return source.content_length < self.min_content_chars

    async def fetch_batch(self, sources: List[Source]) -> EnrichmentBatch:
        for s in sources:
            if not isinstance(s, Source):
                raise TypeError(f"fetch_batch expects Source items, got {type(s).__name__}")

        enriched = list(sources)
        pending = []

        for i, source in enumerate(sources):
            if not self.needs_enrichment(source):
                continue
            verdict = self.admissibility.classify(source.locator)
            if not verdict.valid:
                enriched[i] = source.model_copy(update={"fetch_status": "skipped", "skip_reason": verdict.reason})
                continue
            pending.append(i)

        if pending:
            logger.info(f"Fetching content for {len(pending)}/{len(sources)} sources")
            results = await asyncio.gather(
                *(self.fetcher.fetch_one(sources[i].locator) for i in pending),
                return_exceptions=True,
            )
            for i, result in zip(pending, results):
                enriched[i] = self._apply(sources[i], result)
        else:
            logger.info("No sources need fetching")

        stats = enrichment_stats(enriched, self.min_content_chars)
        logger.info(f"Enrichment stats: {stats.model_dump()}")

        warnings = []
        if stats.total_content_size > self.large_context_threshold:
            msg = (f"Large context detected ({stats.total_content_size} chars); "
                   f"downstream consumers may need to truncate")
            logger.warning(msg)
            warnings.append(msg)

        return EnrichmentBatch(sources=enriched, stats=stats, warnings=warnings)

    def _apply(self, source: Source, result) -> Source:
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                # Cancellation and interpreter exits are not item failures.
                raise result
            if not isinstance(result, FetchError):
                logger.error(f"Unexpected error fetching {source.locator}", exc_info=result)
            logger.warning(f"Failed to fetch {source.locator}: {result}")
            return source.model_copy(update={
                "fetch_status": "failed",
                "fetch_error": str(result) or type(result).__name__,
            })

        enriched = source.model_copy(update={
            "content": result.content[:self.max_chars],
            "fetch_status": "partial" if result.partial else "complete",
            "fetch_error": None,
        })
        quality = calculate_source_quality(enriched)
        logger.info(f"Enriched {source.locator[:50]} ({len(result.content)} chars, quality {quality})")
        return enriched.model_copy(update={"quality_score": quality})

"""Merging of web research with uploaded documents.

Uploaded documents win over web pages that repeat them, and near-identical
web pages collapse to the better-scored one. The merged set is rescored,
ordered by trust and trimmed to a maximum size.
"""

import math
import re
from functools import cmp_to_key
from typing import List

from ..log import get_logger
from ..schemas.evidence import Source
from ..schemas.outputs import (
    MergeContentStats,
    MergeDuplicate,
    MergeInputStats,
    MergeOutputStats,
    MergeProcessingStats,
    MergeResult,
    MergeStats,
)
from .duplicates import text_similarity
from .scoring import calculate_source_quality

logger = get_logger("merge")

FINGERPRINT_EDGE_CHARS = 300
FINGERPRINT_MIN_CHARS = 50
FINGERPRINT_SEPARATOR = "|||"

DOCUMENT_OVERLAP_THRESHOLD = 0.7
DOCUMENT_EXACT_THRESHOLD = 0.9
WEB_DUPLICATE_THRESHOLD = 0.8

KIND_ORDER = {"document": 3, "synthesis": 2, "web": 1}
QUALITY_TOLERANCE = 0.05

_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_for_comparison(text: str) -> str:
    text = _PUNCTUATION.sub(" ", text.lower())
    return _WHITESPACE.sub(" ", text).strip()


def content_fingerprint(content: str) -> str:
    """Normalized opening and closing 300 characters, or '' for very short content."""
    if len(content) < FINGERPRINT_MIN_CHARS:
        return ""
    normalized = normalize_for_comparison(content)
    start = normalized[:FINGERPRINT_EDGE_CHARS]
    end = normalized[-FINGERPRINT_EDGE_CHARS:] if len(normalized) > FINGERPRINT_EDGE_CHARS else ""
    return f"{start}{FINGERPRINT_SEPARATOR}{end}"


def content_similarity(a: Source, b: Source) -> float:
    fa, fb = content_fingerprint(a.content), content_fingerprint(b.content)
    if not (fa and fb):
        return text_similarity(normalize_for_comparison(a.content), normalize_for_comparison(b.content))

    start_a, end_a = fa.split(FINGERPRINT_SEPARATOR)
    start_b, end_b = fb.split(FINGERPRINT_SEPARATOR)
    start = text_similarity(start_a, start_b)
    end = text_similarity(end_a, end_b) if end_a and end_b else start
    return (start + end) / 2


def _label(source: Source) -> str:
    return source.title or source.locator


def as_uploaded_document(source: Source) -> Source:
    return source.model_copy(update={"kind": "document", "starred": True, "fetch_status": "user-provided"})


def find_merge_duplicates(web: List[Source], documents: List[Source]) -> List[MergeDuplicate]:
    """
    Documents against every web source first, then web sources pairwise.
    A document always survives; between two web sources the higher quality
    one survives and the first wins a tie.
    """
    duplicates = []
    for doc in documents:
        for j, page in enumerate(web):
            similarity = content_similarity(doc, page)
            if similarity > DOCUMENT_OVERLAP_THRESHOLD:
                exact = similarity > DOCUMENT_EXACT_THRESHOLD
                duplicates.append(MergeDuplicate(
                    type="exact" if exact else "high",
                    kept=_label(doc),
                    removed=_label(page),
                    removed_index=j,
                    similarity=round(similarity, 2),
                    reason="Content is nearly identical" if exact else "Significant content overlap",
                ))

    for i in range(len(web)):
        for j in range(i + 1, len(web)):
            similarity = content_similarity(web[i], web[j])
            if similarity > WEB_DUPLICATE_THRESHOLD:
                keep, drop = (i, j) if web[i].quality_score >= web[j].quality_score else (j, i)
                duplicates.append(MergeDuplicate(
                    type="web_duplicate",
                    kept=_label(web[keep]),
                    removed=_label(web[drop]),
                    removed_index=drop,
                    similarity=round(similarity, 2),
                    reason="Duplicate web content - keeping higher quality",
                ))
    return duplicates


def deduplicate_and_merge(web: List[Source], documents: List[Source], duplicates: List[MergeDuplicate],
                          prioritize_documents: bool = True) -> List[Source]:
    removed = {d.removed_index for d in duplicates}
    kept_web = [s for i, s in enumerate(web) if i not in removed]
    logger.debug(f"Merge dropped {len(web) - len(kept_web)} web sources")
    if prioritize_documents:
        return documents + kept_web
    return kept_web + documents


def _compare(a: Source, b: Source) -> int:
    if a.starred != b.starred:
        return -1 if a.starred else 1
    kind_a, kind_b = KIND_ORDER.get(a.kind, 0), KIND_ORDER.get(b.kind, 0)
    if kind_a != kind_b:
        return kind_b - kind_a
    if abs(a.quality_score - b.quality_score) > QUALITY_TOLERANCE:
        return -1 if a.quality_score > b.quality_score else 1
    return b.word_count - a.word_count


def prioritize_sources(sources: List[Source]) -> List[Source]:
    """Starred first, then document > synthesis > web, then quality, then length."""
    return sorted(sources, key=cmp_to_key(_compare))


def merge_stats(web: List[Source], documents: List[Source], duplicates: List[MergeDuplicate],
                final: List[Source]) -> MergeStats:
    total_words = sum(s.word_count for s in final)
    count = len(final)
    return MergeStats(
        input=MergeInputStats(web_sources=len(web), documents=len(documents), total=len(web) + len(documents)),
        processing=MergeProcessingStats(
            duplicates_found=len(duplicates),
            exact_duplicates=sum(1 for d in duplicates if d.type == "exact"),
            high_similarity=sum(1 for d in duplicates if d.type == "high"),
            web_duplicates=sum(1 for d in duplicates if d.type == "web_duplicate"),
        ),
        output=MergeOutputStats(
            total_sources=count,
            documents=sum(1 for s in final if s.kind == "document"),
            synthesis=sum(1 for s in final if s.kind == "synthesis"),
            web=sum(1 for s in final if s.kind == "web"),
            starred=sum(1 for s in final if s.starred),
            verified=sum(1 for s in final if s.verified),
        ),
        content=MergeContentStats(
            total_words=total_words,
            total_chars=sum(s.content_length for s in final),
            average_words_per_source=math.floor(total_words / count + 0.5) if count else 0,
            average_quality=round(sum(s.quality_score for s in final) / count, 2) if count else 0.0,
        ),
    )


def merge_research_sources(web: List[Source], documents: List[Source], remove_duplicates: bool = True,
                           prioritize_documents: bool = True, max_sources: int = 50) -> MergeResult:
    """
    Combines web research and uploaded documents into one ordered set.

    Documents are starred and marked user-provided. Web and synthesis sources
    are rescored with `calculate_source_quality`; documents keep the score
    the document processor gave them. `max_sources=0` disables the cap.
    """
    logger.info(f"Merging research: {len(web)} web sources + {len(documents)} documents")
    documents = [as_uploaded_document(d) for d in documents]

    duplicates = find_merge_duplicates(web, documents) if remove_duplicates else []
    merged = deduplicate_and_merge(web, documents, duplicates, prioritize_documents)

    scored = [
        s if s.kind == "document" else s.model_copy(update={"quality_score": calculate_source_quality(s)})
        for s in merged
    ]
    ordered = prioritize_sources(scored)
    final = ordered[:max_sources] if max_sources else ordered

    logger.info(f"Merge complete: {len(final)} sources ({len(duplicates)} duplicates removed)")
    return MergeResult(
        sources=final,
        stats=merge_stats(web, documents, duplicates, final),
        duplicates_removed=duplicates,
    )

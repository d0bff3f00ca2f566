"""Per-source quality scoring for fetched and merged research."""

from typing import Optional

from ..schemas.evidence import Source

BASE_QUALITY = 0.5
KIND_BONUS = {"document": 0.2, "web": 0.1}
STARRED_BONUS = 0.1
VERIFIED_BONUS = 0.1
SNIPPET_PENALTY = 0.2

# (minimum word count, bonus); first match wins
LENGTH_BONUSES = [(1000, 0.15), (500, 0.10), (200, 0.05)]
SNIPPET_WORDS = 50

RELEVANCE_PIVOT = 0.75
RELEVANCE_WEIGHT = 0.2


def length_bonus(word_count: int) -> float:
    for threshold, bonus in LENGTH_BONUSES:
        if word_count > threshold:
            return bonus
    if word_count < SNIPPET_WORDS:
        return -SNIPPET_PENALTY
    return 0.0


def calculate_source_quality(source: Source, relevance: Optional[float] = None) -> float:
    """
    Scores a source on kind, trust flags, length and relevance, clamped to [0, 1].
    Synthesis starts at 1.0. Relevance comes from the argument or
    `metadata["relevance"]` and shifts the score around 0.75.
    """
    if source.kind == "synthesis":
        score = 1.0
    else:
        score = BASE_QUALITY + KIND_BONUS.get(source.kind, 0.0)

    if source.starred:
        score += STARRED_BONUS
    if source.verified:
        score += VERIFIED_BONUS

    score += length_bonus(source.word_count)

    if relevance is None:
        relevance = source.metadata.get("relevance")
    if relevance:
        score += (float(relevance) - RELEVANCE_PIVOT) * RELEVANCE_WEIGHT

    return round(min(1.0, max(0.0, score)), 4)

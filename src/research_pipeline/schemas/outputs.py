from __future__ import annotations
from pydantic import BaseModel, Field
from typing import List, Literal

from .evidence import Source

AdequacyStatus = Literal["excellent", "good", "adequate", "insufficient"]
VerificationStatus = Literal["EXCELLENT", "GOOD", "FAILED"]


class ResearchRequirements(BaseModel):
    min_words: int
    min_sources: int
    min_quality: float


class CurrentResearch(BaseModel):
    words: int
    sources: int
    quality: float


class SourceBreakdown(BaseModel):
    synthesis: int = 0
    documents: int = 0
    web: int = 0
    verified: int = 0
    starred: int = 0


class Recommendation(BaseModel):
    # "add_sources", "run_enhanced_research", "improve_quality", "run_synthesis_research", "upload_documents"
    action: str
    text: str
    priority: Literal["high", "medium", "low"] = "high"


class EnhancementSuggestion(BaseModel):
    priority: Literal["critical", "high", "medium", "low"]
    title: str
    description: str
    actions: List[str]


class ResearchGap(BaseModel):
    type: str  # "word_count", "source_count", "quality"
    message: str
    severity: Literal["critical", "warning"]
    missing: float


class AdequacyScore(BaseModel):
    current: CurrentResearch
    breakdown: SourceBreakdown
    requirements: ResearchRequirements
    overall_score: float = Field(ge=0.0, le=1.0)
    percent: int
    status: AdequacyStatus
    recommendations: List[Recommendation] = []
    gaps: List[ResearchGap] = []
    suggestions: List[EnhancementSuggestion] = []


class DuplicatePair(BaseModel):
    source1: str
    source2: str
    similarity: float
    recommendation: str


class VerificationReport(BaseModel):
    searches: List[str] = []
    verified_claims: List[str] = []
    unverified_claims: List[str] = []
    hypothetical_examples: List[str] = []
    sources: List[str] = []
    verified_count: int = 0
    unverified_count: int = 0
    hypothetical_count: int = 0
    citation_count: int = 0
    score: float = Field(ge=0.0, le=100.0)
    status: VerificationStatus
    passed: bool
    errors: List[str] = []
    warnings: List[str] = []


class MergeDuplicate(BaseModel):
    type: Literal["exact", "high", "web_duplicate"]
    kept: str
    removed: str
    removed_index: int  # position in the web list; only web sources are ever removed
    similarity: float
    reason: str


class MergeInputStats(BaseModel):
    web_sources: int
    documents: int
    total: int


class MergeProcessingStats(BaseModel):
    duplicates_found: int
    exact_duplicates: int
    high_similarity: int
    web_duplicates: int


class MergeOutputStats(BaseModel):
    total_sources: int
    documents: int
    synthesis: int
    web: int
    starred: int
    verified: int


class MergeContentStats(BaseModel):
    total_words: int
    total_chars: int
    average_words_per_source: int
    average_quality: float


class MergeStats(BaseModel):
    input: MergeInputStats
    processing: MergeProcessingStats
    output: MergeOutputStats
    content: MergeContentStats


class MergeResult(BaseModel):
    sources: List[Source]
    stats: MergeStats
    duplicates_removed: List[MergeDuplicate] = []

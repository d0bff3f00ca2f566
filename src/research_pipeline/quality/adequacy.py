"""Research adequacy scoring for long-form output.

Compares the selected research against duration-based requirements and
returns a report with status, gaps and advisory recommendations. Nothing
here blocks generation; the caller decides what to do with the verdict.
"""

import math
from typing import Dict, List, Optional

from ..config import get_settings
from ..log import get_logger
from ..schemas.evidence import Source
from ..schemas.outputs import (
    AdequacyScore,
    CurrentResearch,
    EnhancementSuggestion,
    Recommendation,
    ResearchGap,
    ResearchRequirements,
    SourceBreakdown,
)

logger = get_logger("adequacy")

# Next threshold at or above the target duration applies; longer targets use the last row.
RESEARCH_REQUIREMENTS: Dict[int, ResearchRequirements] = {
    35: ResearchRequirements(min_words=7000, min_sources=10, min_quality=0.70),
    40: ResearchRequirements(min_words=8500, min_sources=12, min_quality=0.72),
    45: ResearchRequirements(min_words=10000, min_sources=15, min_quality=0.75),
    50: ResearchRequirements(min_words=11500, min_sources=17, min_quality=0.77),
    60: ResearchRequirements(min_words=13000, min_sources=20, min_quality=0.80),
}
SHORT_FORM_REQUIREMENTS = ResearchRequirements(min_words=3000, min_sources=5, min_quality=0.60)

# Tunable policy: how much each capped ratio contributes to overall_score.
SCORE_WEIGHTS = {"words": 0.4, "sources": 0.3, "quality": 0.3}

WORDS_PER_SOURCE = 500

# Long targets benefit from user documents even when every requirement is met.
DOCUMENTS_ADVISED_FROM_MINUTES = 45


def requirements_for_duration(minutes: float) -> ResearchRequirements:
    if minutes < 35:
        return SHORT_FORM_REQUIREMENTS
    thresholds = sorted(RESEARCH_REQUIREMENTS)
    threshold = next((t for t in thresholds if minutes <= t), thresholds[-1])
    return RESEARCH_REQUIREMENTS[threshold]


def capped_ratio(current: float, required: float) -> float:
    if required <= 0:
        return 1.0
    return min(1.0, max(0.0, current / required))


def combine_ratios(words_ratio: float, sources_ratio: float, quality_ratio: float,
                   weights: Dict[str, float] = SCORE_WEIGHTS) -> float:
    """Weighted mean of the three ratios, each capped to [0, 1]."""
    total_weight = weights["words"] + weights["sources"] + weights["quality"]
    blended = (
        min(1.0, max(0.0, words_ratio)) * weights["words"]
        + min(1.0, max(0.0, sources_ratio)) * weights["sources"]
        + min(1.0, max(0.0, quality_ratio)) * weights["quality"]
    ) / total_weight
    return round(min(1.0, blended), 4)


def adequacy_status(percent: int) -> str:
    if percent >= 80:
        return "excellent"
    if percent >= 70:
        return "good"
    if percent >= 50:
        return "adequate"
    return "insufficient"


def counts_toward_adequacy(source: Source) -> bool:
    # Synthesis material is already trusted and is never discarded.
    return source.selected or source.starred or source.kind == "synthesis"


def effective_quality(source: Source) -> float:
    if source.kind == "synthesis":
        return 1.0
    return source.quality_score


def suggest_research_enhancements(overall_score: float, minutes: float) -> List[EnhancementSuggestion]:
    """Tiered next steps for the overall score, relative to the target's quality floor."""
    min_quality = requirements_for_duration(minutes).min_quality
    if overall_score < 0.5:
        return [EnhancementSuggestion(
            priority="critical",
            title="Research Critically Low",
            description="Current research is insufficient for quality script generation",
            actions=["Run enhanced research (2x depth)", "Upload comprehensive documents",
                     "Consider reducing target duration"],
        )]
    if overall_score < min_quality:
        return [EnhancementSuggestion(
            priority="high",
            title="Research Below Target",
            description=f"Need {(min_quality - overall_score) * 100:.0f}% more research quality",
            actions=["Add 3-5 more high-quality sources", "Upload topic-specific documents",
                     "Run targeted research queries"],
        )]
    if overall_score < 0.8:
        return [EnhancementSuggestion(
            priority="medium",
            title="Research Adequate, Improvements Recommended",
            description="Script will generate, but additional research improves quality",
            actions=["Add specialized sources for depth", "Include case studies or examples",
                     "Consider expert interviews or whitepapers"],
        )]
    return [EnhancementSuggestion(
        priority="low",
        title="Research Quality Excellent",
        description="Research depth is sufficient for high-quality generation",
        actions=["Proceed with confidence", "Consider marking best sources as starred"],
    )]


class AdequacyScorer:
    def __init__(self, min_minutes: Optional[int] = None, weights: Optional[Dict[str, float]] = None):
        self.min_minutes = min_minutes or get_settings().ADEQUACY_MIN_MINUTES
        self.weights = weights or SCORE_WEIGHTS

    def score(self, sources: List[Source], target_duration_seconds: float) -> Optional[AdequacyScore]:
        """
        Returns None when the target is shorter than the long-form threshold;
        the adequacy gate only applies to long-form output.
        """
        if target_duration_seconds < 0:
            raise ValueError("target_duration_seconds must be >= 0")
        if target_duration_seconds < self.min_minutes * 60:
            return None

        minutes = math.ceil(target_duration_seconds / 60)
        requirements = requirements_for_duration(minutes)

        counted = [s for s in sources if counts_toward_adequacy(s)]
        words = sum(s.word_count for s in counted)
        quality = sum(effective_quality(s) for s in counted) / len(counted) if counted else 0.0
        current = CurrentResearch(words=words, sources=len(counted), quality=round(quality, 4))

        overall = combine_ratios(
            capped_ratio(current.words, requirements.min_words),
            capped_ratio(current.sources, requirements.min_sources),
            capped_ratio(current.quality, requirements.min_quality),
            self.weights,
        )
        percent = math.floor(round(overall * 100, 6))

        breakdown = self._breakdown(sources)
        report = AdequacyScore(
            current=current,
            breakdown=breakdown,
            requirements=requirements,
            overall_score=overall,
            percent=percent,
            status=adequacy_status(percent),
            recommendations=(self._recommendations(current, requirements)
                             + self._coverage_recommendations(breakdown, minutes)),
            gaps=self._gaps(current, requirements),
            suggestions=suggest_research_enhancements(overall, minutes),
        )
        logger.info(f"Adequacy for {minutes} min: {percent}% ({report.status}), "
                    f"{current.words} words / {current.sources} sources / quality {current.quality}")
        return report

    @staticmethod
    def _breakdown(sources: List[Source]) -> SourceBreakdown:
        return SourceBreakdown(
            synthesis=sum(1 for s in sources if s.kind == "synthesis"),
            documents=sum(1 for s in sources if s.kind == "document"),
            web=sum(1 for s in sources if s.kind == "web"),
            verified=sum(1 for s in sources if s.verified),
            starred=sum(1 for s in sources if s.starred),
        )

    @staticmethod
    def _recommendations(current: CurrentResearch, req: ResearchRequirements) -> List[Recommendation]:
        recs = []
        if current.words < req.min_words:
            more = math.ceil((req.min_words - current.words) / WORDS_PER_SOURCE)
            recs.append(Recommendation(action="add_sources", text=f"Add {more} more comprehensive sources"))
        if current.sources < req.min_sources:
            recs.append(Recommendation(
                action="run_enhanced_research",
                text=f"Need {req.min_sources - current.sources} more research sources",
            ))
        if current.quality < req.min_quality and len(recs) < 2:
            recs.append(Recommendation(
                action="improve_quality",
                text="Add higher-quality sources (synthesis, starred documents)",
                priority="medium",
            ))
        return recs

    @staticmethod
    def _coverage_recommendations(breakdown: SourceBreakdown, minutes: int) -> List[Recommendation]:
        recs = []
        if breakdown.synthesis == 0:
            recs.append(Recommendation(
                action="run_synthesis_research",
                text="Run deep research to generate comprehensive synthesis sources",
                priority="medium",
            ))
        if breakdown.documents == 0 and minutes >= DOCUMENTS_ADVISED_FROM_MINUTES:
            recs.append(Recommendation(
                action="upload_documents",
                text="For 45+ minute content, custom research documents significantly improve quality",
                priority="low",
            ))
        return recs

    @staticmethod
    def _gaps(current: CurrentResearch, req: ResearchRequirements) -> List[ResearchGap]:
        gaps = []
        if current.words < req.min_words:
            gaps.append(ResearchGap(
                type="word_count",
                message=f"Insufficient research content: {current.words} words (need {req.min_words})",
                severity="critical",
                missing=req.min_words - current.words,
            ))
        if current.sources < req.min_sources:
            gaps.append(ResearchGap(
                type="source_count",
                message=f"Insufficient research sources: {current.sources} sources (need {req.min_sources})",
                severity="critical",
                missing=req.min_sources - current.sources,
            ))
        if current.quality < req.min_quality:
            gaps.append(ResearchGap(
                type="quality",
                message=f"Research quality below threshold: {current.quality:.2f} (need {req.min_quality})",
                severity="warning",
                missing=round(req.min_quality - current.quality, 4),
            ))
        return gaps

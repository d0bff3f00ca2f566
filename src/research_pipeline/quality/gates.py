"""Fact-checking gate for generated scripts.

Scores a generated text on its required documentation sections, its
confidence tags and its inline source citations, then decides whether it
may be released. Claim/source extraction for the audit record runs
separately and never changes the verdict.
"""

import re
from typing import Dict, List, Sequence

from ..log import get_logger
from ..schemas.outputs import VerificationReport

logger = get_logger("gates")

REQUIRED_SECTIONS = [
    "🔍 WEB SEARCH VERIFICATION LOG",
    "📊 FACT VERIFICATION SUMMARY",
    "📋 COMPREHENSIVE FACT-CHECK NOTES",
    "⚠️ ACCURACY DISCLAIMER",
]

VERIFIED_TAG = "[VERIFIED]"
UNVERIFIED_TAGS = ("[UNVERIFIED]", "[NEEDS VERIFICATION]")
HYPOTHETICAL_TAG = "[HYPOTHETICAL]"
CITATION_MARKER = "<!-- Source:"

MISSING_SECTION_PENALTY = 20
LOW_VERIFIED_PENALTY = 10
UNVERIFIED_REJECTION_PENALTY = 30
LOW_CITATION_PENALTY = 15
HYPOTHETICAL_PENALTY = 5

MIN_VERIFIED_CLAIMS = 3
MAX_UNVERIFIED_PERCENT = 20
MIN_CITATIONS = 3
MAX_HYPOTHETICAL_EXAMPLES = 3

MINIMUM_SEARCHES = 5
SEARCHES_PER_KEY_POINT = 2

_VERIFIED_RE = re.compile(re.escape(VERIFIED_TAG))
_UNVERIFIED_RE = re.compile("|".join(re.escape(t) for t in UNVERIFIED_TAGS))
_HYPOTHETICAL_RE = re.compile(re.escape(HYPOTHETICAL_TAG))

_SEARCH_LOG_RE = re.compile(r"WEB SEARCH VERIFICATION LOG.*?(?=\*\*|\Z)", re.DOTALL)
_SEARCH_ENTRY_RE = re.compile(r"\d+\.\s*\[([^\]]+)\]")
_CITATION_RE = re.compile(r"<!--\s*Source:\s*(\S+?)(?:\s+\[[^\]]*\])?\s*-->")


def _claims_after(tag: str, text: str) -> List[str]:
    # A claim runs from its tag to the next "[" or the end of the text.
    pattern = re.compile(re.escape(tag) + r"([^\[]*)")
    return [m.strip() for m in pattern.findall(text)]


def extract_fact_check_data(text: str) -> Dict[str, List[str]]:
    """
    Best-effort extraction of the audit trail: searches performed,
    claim texts per confidence tag and cited source URLs.
    """
    searches: List[str] = []
    log_match = _SEARCH_LOG_RE.search(text)
    if log_match:
        searches = [s.strip() for s in _SEARCH_ENTRY_RE.findall(log_match.group(0))]

    unverified: List[str] = []
    for tag in UNVERIFIED_TAGS:
        unverified.extend(_claims_after(tag, text))

    return {
        "searches": searches,
        "verified_claims": _claims_after(VERIFIED_TAG, text),
        "unverified_claims": unverified,
        "hypothetical_examples": _claims_after(HYPOTHETICAL_TAG, text),
        "sources": _CITATION_RE.findall(text),
    }


def required_searches(key_points: Sequence[str] = ()) -> int:
    """Minimum number of logged web searches expected for a script."""
    return MINIMUM_SEARCHES + len(key_points) * SEARCHES_PER_KEY_POINT


def validate(text: str) -> VerificationReport:
    """
    Returns the verification report for a generated text.
    A missing section or too many unverified claims fail the gate;
    everything else only costs points and adds a warning.
    """
    if not isinstance(text, str):
        raise TypeError(f"validate expects str, got {type(text).__name__}")

    passed = True
    errors: List[str] = []
    warnings: List[str] = []
    score = 100.0

    # 1. Required documentation sections
    for section in REQUIRED_SECTIONS:
        if section not in text:
            passed = False
            errors.append(f"Missing required section: {section}")
            score -= MISSING_SECTION_PENALTY

    # 2. Confidence tags
    verified_count = len(_VERIFIED_RE.findall(text))
    unverified_count = len(_UNVERIFIED_RE.findall(text))
    hypothetical_count = len(_HYPOTHETICAL_RE.findall(text))

    if verified_count < MIN_VERIFIED_CLAIMS:
        warnings.append(f"Low number of verified claims ({verified_count})")
        score -= LOW_VERIFIED_PENALTY

    if unverified_count > 0:
        unverified_percentage = unverified_count / (verified_count + unverified_count) * 100
        if unverified_percentage > MAX_UNVERIFIED_PERCENT:
            passed = False
            errors.append(f"More than {MAX_UNVERIFIED_PERCENT}% of claims are unverified")
            score -= UNVERIFIED_REJECTION_PENALTY
        else:
            warnings.append(f"{unverified_count} unverified claims found ({unverified_percentage:.1f}%)")
            score -= unverified_percentage / 2

    # 3. Inline source citations
    citation_count = text.count(CITATION_MARKER)
    if citation_count < MIN_CITATIONS:
        warnings.append(f"Low number of source citations ({citation_count})")
        score -= LOW_CITATION_PENALTY

    # 4. Hypothetical examples
    if hypothetical_count > MAX_HYPOTHETICAL_EXAMPLES:
        warnings.append(f"High number of hypothetical examples ({hypothetical_count})")
        score -= HYPOTHETICAL_PENALTY

    score = max(0.0, score)
    if not passed:
        status = "FAILED"
    elif warnings:
        status = "GOOD"
    else:
        status = "EXCELLENT"

    report = VerificationReport(
        **extract_fact_check_data(text),
        verified_count=verified_count,
        unverified_count=unverified_count,
        hypothetical_count=hypothetical_count,
        citation_count=citation_count,
        score=round(score, 2),
        status=status,
        passed=passed,
        errors=errors,
        warnings=warnings,
    )
    logger.info(f"Verification gate: {status} (score {report.score}, "
                f"{verified_count} verified / {unverified_count} unverified)")
    return report

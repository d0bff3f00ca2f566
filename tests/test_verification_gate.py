import pytest
from research_pipeline.quality.gates import (
    REQUIRED_SECTIONS,
    extract_fact_check_data,
    required_searches,
    validate,
)

def build_script(verified=5, unverified=0, hypothetical=0, citations=3, sections=REQUIRED_SECTIONS,
                 searches=("solar capacity 2024", "battery storage prices")):
    """Generated-script shaped text with the requested tag and citation counts."""
    parts = ["# Energy Storage Deep Dive", ""]
    for i in range(verified):
        parts.append(f"[VERIFIED] Verified claim number {i}.")
    for i in range(unverified):
        parts.append(f"[UNVERIFIED] Unverified claim number {i}.")
    for i in range(hypothetical):
        parts.append(f"[HYPOTHETICAL] Imagined example {i}.")
    for i in range(citations):
        parts.append(f"<!-- Source: https://source{i}.example.com/report [Annual Report] -->")
    parts.append("")
    for section in sections:
        parts.append(f"## {section}")
        if "WEB SEARCH" in section:
            parts.extend(f"{n}. [{query}] searched" for n, query in enumerate(searches, start=1))
            parts.append("**End of log**")
        parts.append("")
    return "\n".join(parts)

def test_well_documented_script_is_excellent():
    """
    WHY: A script with every section, enough verified claims and citations should pass cleanly.
    HOW: 5 verified claims, 3 citations, all 4 sections, 1 hypothetical example.
    EXPECTED: passed, score 100, status EXCELLENT, no warnings.
    """
    report = validate(build_script(hypothetical=1))
    assert report.passed is True
    assert report.score == 100
    assert report.status == "EXCELLENT"
    assert report.warnings == []
    assert report.errors == []

@pytest.mark.parametrize("missing", REQUIRED_SECTIONS)
def test_each_missing_section_fails(missing):
    """
    WHY: The documentation sections are mandatory audit material.
    HOW: Drop one section at a time.
    EXPECTED: FAILED, one error naming the section, 20 points deducted.
    """
    sections = [s for s in REQUIRED_SECTIONS if s != missing]
    report = validate(build_script(sections=sections))
    assert report.passed is False
    assert report.status == "FAILED"
    assert report.errors == [f"Missing required section: {missing}"]
    assert report.score == 80

def test_too_many_unverified_claims_fail():
    """
    WHY: A script mostly built on unverified claims must not be released.
    HOW: 2 verified, 3 unverified (60%), 3 citations, all sections.
    EXPECTED: FAILED; 100 - 10 (low verified) - 30 (rejection) = 60.
    """
    report = validate(build_script(verified=2, unverified=3))
    assert report.passed is False
    assert report.status == "FAILED"
    assert report.score == 60
    assert report.verified_count == 2
    assert report.unverified_count == 3
    assert any("20%" in e for e in report.errors)

def test_too_many_unverified_and_few_citations():
    report = validate(build_script(verified=2, unverified=3, citations=1))
    assert report.passed is False
    assert report.score == 45

def test_unverified_boundary_at_twenty_percent():
    """
    WHY: Exactly 20% unverified is tolerated; anything above is not.
    HOW: 80V+20U and 79V+21U.
    EXPECTED: First passes with a warning and score 90; second fails.
    """
    at_limit = validate(build_script(verified=80, unverified=20))
    assert at_limit.passed is True
    assert at_limit.status == "GOOD"
    assert at_limit.score == 90

    over_limit = validate(build_script(verified=79, unverified=21))
    assert over_limit.passed is False
    assert over_limit.status == "FAILED"

def test_needs_verification_tag_counts_as_unverified():
    report = validate(build_script(verified=9) + "\n[NEEDS VERIFICATION] Pending figure.")
    assert report.unverified_count == 1
    assert report.passed is True
    assert report.score == 95

def test_many_hypothetical_examples_warn():
    report = validate(build_script(hypothetical=4))
    assert report.passed is True
    assert report.status == "GOOD"
    assert report.score == 95
    assert report.hypothetical_count == 4

def test_empty_text_scores_zero():
    """
    WHY: Penalties can exceed 100; the score is clamped.
    HOW: Validate an empty string.
    EXPECTED: FAILED with score 0 and four section errors.
    """
    report = validate("")
    assert report.passed is False
    assert report.score == 0
    assert len(report.errors) == 4

def test_non_string_input_is_type_error():
    with pytest.raises(TypeError):
        validate(None)

def test_extraction_collects_searches_claims_and_sources():
    """
    WHY: The audit record lists what was searched, claimed and cited.
    HOW: Extract from a built script.
    EXPECTED: Search queries from the log, claim texts per tag, cited URLs.
    """
    data = extract_fact_check_data(build_script(verified=2, unverified=1, hypothetical=1, citations=2))
    assert data["searches"] == ["solar capacity 2024", "battery storage prices"]
    assert data["verified_claims"][:2] == ["Verified claim number 0.", "Verified claim number 1."]
    assert data["unverified_claims"] == ["Unverified claim number 0."]
    assert data["hypothetical_examples"][0].startswith("Imagined example 0.")
    assert data["sources"] == [
        "https://source0.example.com/report",
        "https://source1.example.com/report",
    ]

def test_extraction_does_not_change_verdict():
    report = validate(build_script(searches=()))
    assert report.searches == []
    assert report.status == "EXCELLENT"

@pytest.mark.parametrize("key_points,expected", [((), 5), (("a",), 7), (("a", "b", "c"), 11)])
def test_required_searches(key_points, expected):
    assert required_searches(key_points) == expected

import pytest
from research_pipeline.quality.duplicates import detect_duplicate_content, text_similarity
from research_pipeline.schemas.evidence import Source

BASE = ("Utility scale battery storage deployments doubled during 2024 while lithium "
        "prices continued falling across every major market region worldwide. ") * 3

def test_similarity_ignores_short_words():
    assert text_similarity("the cat sat on a mat", "a dog and the mat") == 0.0
    assert text_similarity("", "") == 0.0
    assert text_similarity("battery storage", "battery storage") == 1.0

def test_identical_sources_recommend_removal():
    """
    WHY: Two copies of the same article inflate the source count.
    HOW: Two sources with identical long content.
    EXPECTED: One pair with similarity 1.0 and a removal recommendation.
    """
    sources = [
        Source(locator="https://a.com/x", title="Article A", content=BASE),
        Source(locator="https://b.com/y", title="Article B", content=BASE),
    ]
    pairs = detect_duplicate_content(sources)
    assert len(pairs) == 1
    assert pairs[0].source1 == "Article A"
    assert pairs[0].source2 == "Article B"
    assert pairs[0].similarity == 1.0
    assert pairs[0].recommendation == "Remove one source"

def test_distinct_and_short_sources_are_ignored():
    sources = [
        Source(locator="https://a.com/x", content=BASE),
        Source(locator="https://b.com/y", content="Completely unrelated discussion regarding medieval "
                                                    "architecture, cathedral construction techniques, "
                                                    "stonemasonry guilds and gothic vaulting methods."),
        Source(locator="https://c.com/z", content="short"),
    ]
    assert detect_duplicate_content(sources) == []

@pytest.mark.parametrize("threshold,expected", [(0.5, 1), (0.95, 0)])
def test_threshold_is_respected(threshold, expected):
    variant = BASE.replace("doubled", "tripled").replace("worldwide", "globally")
    sources = [Source(locator="a", content=BASE), Source(locator="b", content=variant)]
    assert len(detect_duplicate_content(sources, threshold=threshold)) == expected

from typing import List
from ..schemas.evidence import Source
from ..schemas.outputs import DuplicatePair

FINGERPRINT_CHARS = 500
MIN_CONTENT_CHARS = 100

def text_similarity(text1: str, text2: str) -> float:
    """Jaccard similarity over words longer than 3 characters."""
    words1 = {w for w in text1.split() if len(w) > 3}
    words2 = {w for w in text2.split() if len(w) > 3}
    union = words1 | words2
    if not union:
        return 0.0
    return len(words1 & words2) / len(union)

def detect_duplicate_content(sources: List[Source], threshold: float = 0.7) -> List[DuplicatePair]:
    """
    Compares the opening of every sufficiently long source pairwise.
    Reports pairs above `threshold`; above 0.9 one of them should go.
    """
    fingerprints = [
        (s, s.content.lower()[:FINGERPRINT_CHARS])
        for s in sources
        if s.content_length > MIN_CONTENT_CHARS
    ]

    duplicates = []
    for i in range(len(fingerprints)):
        for j in range(i + 1, len(fingerprints)):
            (a, fa), (b, fb) = fingerprints[i], fingerprints[j]
            similarity = text_similarity(fa, fb)
            if similarity > threshold:
                duplicates.append(DuplicatePair(
                    source1=a.title or a.locator,
                    source2=b.title or b.locator,
                    similarity=round(similarity, 2),
                    recommendation="Remove one source" if similarity > 0.9 else "Review for overlap",
                ))
    return duplicates

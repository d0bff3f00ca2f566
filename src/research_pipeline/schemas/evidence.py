"""Pydantic schemas for research sources and retrieval data.

Defines Source, Chunk, Admissibility, FetchResult and the enrichment
statistics produced per fetch batch.
"""

from pydantic import BaseModel, ConfigDict, Field, computed_field
from typing import List, Optional, Dict, Any, Literal

SourceKind = Literal["web", "document", "synthesis"]
FetchStatus = Literal["complete", "partial", "failed", "user-provided", "skipped"]


class Source(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    kind: SourceKind = "web"
    locator: str
    title: str = ""
    content: str = ""
    quality_score: float = Field(0.5, ge=0.0, le=1.0)
    fetch_status: Optional[FetchStatus] = None  # None = not enriched yet
    fetch_error: Optional[str] = None
    skip_reason: Optional[str] = None
    starred: bool = False
    selected: bool = False
    verified: bool = False
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @computed_field
    @property
    def word_count(self) -> int:
        return len(self.content.split())

    @computed_field
    @property
    def content_length(self) -> int:
        return len(self.content)


class Chunk(BaseModel):
    index: int
    content: str
    word_count: int
    start_word: int
    end_word: int


class Admissibility(BaseModel):
    valid: bool
    skip: bool = False
    reason: Optional[str] = None


class FetchResult(BaseModel):
    url: str
    content: str
    partial: bool = False
    status_code: int = 200
    method: str = "direct"  # "direct", "html", "cache"


class EnrichmentStats(BaseModel):
    total: int
    successful: int
    partial: int
    failed: int
    skipped: int
    total_content_size: int
    average_content_size: int


class EnrichmentBatch(BaseModel):
    sources: List[Source]
    stats: EnrichmentStats
    warnings: List[str] = []

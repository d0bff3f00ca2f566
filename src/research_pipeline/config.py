from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
import yaml
from pathlib import Path
from typing import Dict, Any

class Settings(BaseSettings):
    LOG_LEVEL: str = "INFO"

    # Fetcher
    FETCH_TIMEOUT_SECONDS: float = Field(10.0, description="Per-request timeout for content fetches")
    FETCH_RETRIES: int = Field(2, description="Retries after the first failed attempt")
    FETCH_BACKOFF_BASE_SECONDS: float = Field(1.0, description="Backoff base; delay = base * 2^attempt")
    FETCH_USER_AGENT: str = "ResearchPipeline/1.0 (research ingestion)"
    MIN_CONTENT_CHARS: int = Field(100, description="Sources with less content than this get enriched")
    MAX_CHARS_PER_SOURCE: int = Field(1500, description="Fetched content is truncated to this length")
    LARGE_CONTEXT_THRESHOLD: int = Field(15000, description="Aggregate content size that triggers a warning")

    # Response cache
    CACHE_TTL_SECONDS: float = 3600.0
    CACHE_MAX_ENTRIES: int = 256

    # Documents
    CHUNK_WORDS: int = Field(500, description="Words per document chunk")
    MAX_UPLOAD_BYTES: int = Field(50 * 1024 * 1024, description="Upload preflight size limit")

    # Adequacy
    ADEQUACY_MIN_MINUTES: int = Field(35, description="Adequacy scoring applies from this duration on")

    ADMISSIBILITY_RULES_PATH: str = Field("data/admissibility.yaml", description="YAML file with blocked domains")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

@lru_cache()
def get_settings() -> Settings:
    return Settings()

def load_admissibility_rules() -> Dict[str, Any]:
    path = Path(get_settings().ADMISSIBILITY_RULES_PATH)
    if not path.exists():
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}

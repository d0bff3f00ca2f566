"""Schemas for uploaded documents: descriptors, processing results, preflight."""

from pydantic import BaseModel
from typing import List, Optional, Literal

from .evidence import Chunk


class FileDescriptor(BaseModel):
    file_name: str
    mime_type: str = ""
    size_bytes: int = 0


class DocumentMetadata(BaseModel):
    original_length: int
    processed_length: int
    word_count: int
    line_count: int
    chunk_count: int
    quality: float


class ProcessedDocument(BaseModel):
    file_name: str
    file_type: str
    file_size: int
    processing_method: str  # "pdf", "docx", "text", "json", "fallback-text"
    content: str
    metadata: DocumentMetadata
    chunks: List[Chunk]


class DocumentFailure(BaseModel):
    file_name: str
    error: str
    error_type: Literal["extractor_unavailable", "extraction_failed", "preflight"]
    processing_method: Optional[str] = None


class PreflightResult(BaseModel):
    is_valid: bool
    errors: List[str] = []


class BatchDocumentStats(BaseModel):
    total: int
    successful: int
    failed: int
    total_words: int
    total_chunks: int

"""Text extractors for uploaded files.

Byte-level parsing is delegated to pypdf and python-docx. An extractor
whose library cannot be imported, or a file type with no registered
extractor, raises ExtractorUnavailableError instead of returning text.
"""

import io
import json
from typing import Dict, Optional, Protocol

from ..errors import ExtractionError, ExtractorUnavailableError
from ..schemas.documents import FileDescriptor

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

# File types we recognise as binary formats; these never fall back to text decoding.
BINARY_TYPES = {"pdf", "docx", "doc"}


class TextExtractor(Protocol):
    method: str

    def extract(self, data: bytes) -> str:
        ...


def detect_file_type(file: FileDescriptor) -> str:
    """Returns one of pdf, docx, doc, text, json or unknown."""
    name = file.file_name.lower()
    mime = (file.mime_type or "").lower()

    if "pdf" in mime or name.endswith(".pdf"):
        return "pdf"
    if name.endswith(".docx") or mime == DOCX_MIME:
        return "docx"
    if name.endswith(".doc") or "msword" in mime:
        return "doc"
    if "json" in mime or name.endswith(".json"):
        return "json"
    if "text" in mime or name.endswith((".txt", ".md")):
        return "text"
    return "unknown"


def decode_text(data: bytes) -> str:
    return data.decode("utf-8-sig", errors="replace")


class PlainTextExtractor:
    method = "text"

    def extract(self, data: bytes) -> str:
        return decode_text(data)


class FallbackTextExtractor:
    method = "fallback-text"

    def extract(self, data: bytes) -> str:
        return decode_text(data)


class JSONExtractor:
    method = "json"

    def extract(self, data: bytes) -> str:
        try:
            parsed = json.loads(decode_text(data))
        except json.JSONDecodeError as e:
            raise ExtractionError(f"Invalid JSON: {e}") from e
        return json.dumps(parsed, indent=2, ensure_ascii=False)


class PDFExtractor:
    method = "pdf"

    def extract(self, data: bytes) -> str:
        try:
            import pypdf
        except ImportError as e:
            raise ExtractorUnavailableError("pdf", "install 'pypdf'") from e

        try:
            reader = pypdf.PdfReader(io.BytesIO(data))
            pages = [page.extract_text() or "" for page in reader.pages]
        except Exception as e:
            raise ExtractionError(f"Could not read PDF: {e}") from e
        return "\n\n".join(p for p in pages if p.strip())


class DOCXExtractor:
    method = "docx"

    def extract(self, data: bytes) -> str:
        try:
            import docx
        except ImportError as e:
            raise ExtractorUnavailableError("docx", "install 'python-docx'") from e

        try:
            document = docx.Document(io.BytesIO(data))
        except Exception as e:
            raise ExtractionError(f"Could not read DOCX: {e}") from e
        return "\n".join(p.text for p in document.paragraphs)


class ExtractorRegistry:
    """Maps detected file types to extractors."""

    def __init__(self, include_defaults: bool = True):
        self._extractors: Dict[str, TextExtractor] = {}
        if include_defaults:
            self.register("pdf", PDFExtractor())
            self.register("docx", DOCXExtractor())
            self.register("text", PlainTextExtractor())
            self.register("json", JSONExtractor())

    def register(self, file_type: str, extractor: TextExtractor) -> "ExtractorRegistry":
        self._extractors[file_type] = extractor
        return self

    def get(self, file_type: str) -> Optional[TextExtractor]:
        return self._extractors.get(file_type)

    def resolve(self, file_type: str) -> TextExtractor:
        extractor = self.get(file_type)
        if extractor is not None:
            return extractor
        if file_type in BINARY_TYPES:
            raise ExtractorUnavailableError(file_type)
        return FallbackTextExtractor()

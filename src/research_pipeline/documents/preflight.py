from typing import Optional
from ..config import get_settings
from ..schemas.documents import FileDescriptor, PreflightResult

ALLOWED_MIME_TYPES = {
    "application/pdf",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/msword",
    "text/plain",
    "application/json",
}

ALLOWED_EXTENSIONS = (".pdf", ".docx", ".doc", ".txt", ".json")

def validate_upload(file: FileDescriptor, max_bytes: Optional[int] = None) -> PreflightResult:
    """
    Checks size and type before any extraction runs.
    Returns human-readable errors; never raises for a bad upload.
    """
    limit = max_bytes or get_settings().MAX_UPLOAD_BYTES
    errors = []

    if file.size_bytes > limit:
        errors.append(
            f"File size exceeds {limit / 1024 / 1024:.0f}MB limit ({file.size_bytes / 1024 / 1024:.2f}MB)"
        )

    has_allowed_extension = file.file_name.lower().endswith(ALLOWED_EXTENSIONS)
    has_allowed_type = file.mime_type in ALLOWED_MIME_TYPES
    if not has_allowed_extension and not has_allowed_type:
        errors.append("File type not supported. Please use PDF, DOCX, DOC, TXT, or JSON files.")

    return PreflightResult(is_valid=not errors, errors=errors)

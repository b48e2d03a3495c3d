"""
File validation for document uploads.

Provides security checks including:
- File size limits (MAX_UPLOAD_SIZE_MB)
- MIME type validation from the file content, not the client header
- Filename sanitization
- Content hash calculation for deduplication
"""

import hashlib
import re
from pathlib import Path
from typing import Dict, NamedTuple

import magic
from fastapi import HTTPException, UploadFile

from taxdocs.config import get_settings

# Detected MIME type -> extension the stored file must carry
ALLOWED_MIME_TYPES: Dict[str, str] = {
    "application/pdf": ".pdf",
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/bmp": ".bmp",
    "image/webp": ".webp",
    "image/tiff": ".tiff",
    "text/plain": ".txt",
    "text/markdown": ".md",
    "text/csv": ".csv",
}

MAX_FILENAME_LENGTH = 255


class ValidatedUpload(NamedTuple):
    content: bytes
    sha256: str
    filename: str
    mime_type: str


async def validate_upload(file: UploadFile) -> ValidatedUpload:
    """
    Validate an uploaded document.

    Args:
        file: FastAPI UploadFile instance from multipart/form-data

    Returns:
        ValidatedUpload with content, SHA-256 hash, sanitized filename and MIME type

    Raises:
        HTTPException: 400 for empty or unsupported files, 413 for files too large
    """
    max_size = get_settings().max_upload_size_mb * 1024 * 1024
    content = await file.read()

    if len(content) == 0:
        raise HTTPException(status_code=400, detail="File is empty")

    if len(content) > max_size:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size is {max_size // (1024 * 1024)}MB"
        )

    mime_type = magic.from_buffer(content, mime=True)
    if mime_type not in ALLOWED_MIME_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type: {mime_type}"
        )

    filename = sanitize_filename(file.filename or "upload", ALLOWED_MIME_TYPES[mime_type])
    file_hash = hashlib.sha256(content).hexdigest()

    return ValidatedUpload(content, file_hash, filename, mime_type)


def sanitize_filename(filename: str, extension: str = ".pdf") -> str:
    """
    Sanitize a filename to prevent path traversal attacks.

    Directory components, '..' and null bytes are removed, anything outside
    [a-zA-Z0-9._-] becomes '_', and the name is forced to end in
    `extension` (which must include the dot).
    """
    filename = Path(filename.replace("\\", "/")).name
    filename = filename.replace("..", "").replace("\0", "")
    filename = re.sub(r'[^a-zA-Z0-9._-]', '_', filename)

    if not filename or filename == extension:
        filename = "upload" + extension

    if not filename.lower().endswith(extension):
        filename = filename + extension

    if len(filename) > MAX_FILENAME_LENGTH:
        name_part = filename[:-len(extension)][:MAX_FILENAME_LENGTH - len(extension)]
        filename = name_part + extension

    return filename

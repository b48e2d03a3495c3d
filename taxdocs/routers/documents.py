"""
Documents API: upload a file, extract its text, classify it and, for
contracts and invoices, parse and validate the fields.
"""

import asyncio
import logging
import os
import tempfile

from fastapi import APIRouter, File, HTTPException, Request, Response, UploadFile, status

from taxdocs.middleware.rate_limit import api_rate_limit, get_limiter
from taxdocs.models.api import UploadResponse
from taxdocs.services.file_validator import validate_upload
from taxdocs.services.pipeline import PARSEABLE_TYPES, analyze_contract, classify_text
from taxdocs.services.text_source import TextExtractionError, extract_text_from_file
from taxdocs.routers.classification import set_classification_headers
from taxdocs.utils.normalizers import detect_format

router = APIRouter(prefix="/api/documents", tags=["documents"])
logger = logging.getLogger(__name__)
limiter = get_limiter()

_SOURCE_TYPES = {"pdf": "Pdf", "image": "Image"}


def _extract_from_bytes(content: bytes, filename: str) -> str:
    with tempfile.TemporaryDirectory() as temp_dir:
        path = os.path.join(temp_dir, filename)
        with open(path, "wb") as f:
            f.write(content)
        return extract_text_from_file(path)


@router.post("/upload", response_model=UploadResponse, status_code=status.HTTP_200_OK)
@limiter.limit(api_rate_limit)  # type: ignore[untyped-decorator]
async def upload_document(
    request: Request,
    response: Response,
    file: UploadFile = File(..., description="PDF, image or plain-text document"),
) -> UploadResponse:
    """
    Classify an uploaded document.

    1. Validates size and content type (python-magic) and sanitizes the name
    2. Extracts text (OpenDataLoader for PDFs, UTF-8 for text files)
    3. Classifies the text
    4. Parses and validates contract fields for contracts and invoices

    Returns 400 for empty or unsupported files, 413 for oversized files and
    422 when no text can be extracted.
    """
    upload = await validate_upload(file)

    try:
        text = await asyncio.to_thread(_extract_from_bytes, upload.content, upload.filename)
    except TextExtractionError as e:
        logger.warning("Upload %s (%s): %s", upload.filename, upload.sha256[:12], e.reason)
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Could not extract text from {upload.filename}: {e.reason}",
        ) from e

    classification = await asyncio.to_thread(classify_text, text, upload.filename)
    set_classification_headers(response, classification)

    parsed = None
    if classification.type in PARSEABLE_TYPES:
        source_type = _SOURCE_TYPES.get(detect_format(upload.filename), "Unknown")
        parsed = await asyncio.to_thread(analyze_contract, text, source_type)

    logger.info(
        "Upload %s classified as %s (%.2f)%s",
        upload.filename, classification.type, classification.confidence,
        ", parsed" if parsed else "",
    )
    return UploadResponse(
        filename=upload.filename,
        sha256=upload.sha256,
        mime_type=upload.mime_type,
        classification=classification,
        parsed=parsed,
    )

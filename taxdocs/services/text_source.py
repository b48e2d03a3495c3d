"""Upstream text extraction.

The classifier and the contract parser work on plain text. This module
is the boundary that turns a file on disk into that text:

- .txt / .md / .csv files are read as UTF-8
- PDFs are converted to markdown with OpenDataLoader
- images need an injected extractor (OCR is not bundled)

Every failure surfaces as TextExtractionError chained from its cause.
"""

import logging
import os
import tempfile
from typing import Callable, Optional

from opendataloader_pdf import convert

from taxdocs.config import get_settings
from taxdocs.models.classification import ProcessedDocument
from taxdocs.services.document_classifier import detect_document_type, thresholds_from_settings
from taxdocs.utils.normalizers import detect_format
from taxdocs.utils.retry import retry_with_backoff

logger = logging.getLogger(__name__)

PLAIN_TEXT_EXTENSIONS = frozenset({"txt", "md", "csv"})
RETRYABLE_EXCEPTIONS = (OSError, TimeoutError, RuntimeError)

TextExtractor = Callable[[str], str]


class TextExtractionError(Exception):
    """Raised when text cannot be obtained from a source document."""

    def __init__(self, source_path: str, reason: str):
        self.source_path = source_path
        self.reason = reason
        super().__init__(f"Text extraction failed for {source_path}: {reason}")


def _extension(path: str) -> str:
    return os.path.splitext(path)[1].lower().lstrip(".")


def read_plain_text(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def convert_pdf_to_markdown(path: str) -> str:
    """Convert a PDF to markdown text with OpenDataLoader.

    Raises:
        FileNotFoundError: If the PDF does not exist
        ValueError: If the converter produced no markdown output
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"PDF file not found: {path}")

    with tempfile.TemporaryDirectory() as temp_dir:
        convert(
            input_path=path,
            output_dir=temp_dir,
            format="markdown",
            quiet=True,
        )

        base_name = os.path.splitext(os.path.basename(path))[0]
        markdown_path = os.path.join(temp_dir, f"{base_name}.md")
        if not os.path.exists(markdown_path):
            raise ValueError(f"OpenDataLoader produced no markdown for {path}")

        with open(markdown_path, "r", encoding="utf-8") as f:
            return f.read()


def _read_with(path: str, extractor: Optional[TextExtractor]) -> str:
    if not os.path.exists(path):
        raise FileNotFoundError(f"File not found: {path}")
    if os.path.isdir(path):
        raise IsADirectoryError(f"Not a file: {path}")

    if extractor is not None:
        return extractor(path)

    fmt = detect_format(path)
    if fmt == "pdf":
        return convert_pdf_to_markdown(path)
    if fmt == "image":
        raise NotImplementedError("OCR is not available; supply an extractor for images")
    if _extension(path) in PLAIN_TEXT_EXTENSIONS:
        return read_plain_text(path)
    raise NotImplementedError(f"Unsupported file type: .{_extension(path) or '?'}")


def extract_text_from_file(path: str, extractor: Optional[TextExtractor] = None) -> str:
    """Return the plain text of a document.

    Transient failures (timeouts, busy files, converter hiccups) are
    retried with exponential backoff; permanent ones are not.

    Args:
        path: File to read
        extractor: Optional callable (path -> text) used instead of the
            built-in readers, e.g. an OCR backend for images

    Returns:
        Extracted text

    Raises:
        TextExtractionError: If the text cannot be obtained
    """
    settings = get_settings()

    @retry_with_backoff(
        max_retries=settings.text_extraction_retries,
        base_delay=settings.text_extraction_base_delay,
        retryable_exceptions=RETRYABLE_EXCEPTIONS,
    )
    def _attempt() -> str:
        return _read_with(path, extractor)

    try:
        return _attempt()
    except Exception as e:
        logger.error("Text extraction failed for %s (%s): %s", path, type(e).__name__, e)
        raise TextExtractionError(path, str(e) or type(e).__name__) from e


def process_document(path: str, extractor: Optional[TextExtractor] = None) -> ProcessedDocument:
    """Extract a document's text and classify it."""
    settings = get_settings()
    text = extract_text_from_file(path, extractor)
    result = detect_document_type(
        text,
        path,
        thresholds=thresholds_from_settings(settings),
        unique_identifier_bonus=settings.unique_identifier_bonus,
    )
    logger.info("Processed %s: %s (%.2f, %s)", path, result.type, result.confidence, result.method)
    return ProcessedDocument(file_path=path, text=text, result=result)

"""
Classification API: classify one document's text or a batch of texts.
"""

import asyncio
import logging
from typing import List

from fastapi import APIRouter, Request, Response

from taxdocs.config import get_settings
from taxdocs.middleware.rate_limit import api_rate_limit, get_limiter
from taxdocs.models.api import BatchClassifyRequest, ClassifyRequest, ClassifyResponse
from taxdocs.models.classification import BatchItemResult, DocumentTypeResult
from taxdocs.services.batch_classifier import detect_document_types_batch
from taxdocs.services.document_classifier import thresholds_from_settings
from taxdocs.services.pipeline import classify_text

router = APIRouter(prefix="/api/classify", tags=["classification"])
logger = logging.getLogger(__name__)
limiter = get_limiter()


def set_classification_headers(response: Response, result: DocumentTypeResult) -> None:
    """Expose the outcome to the request logger and to clients."""
    response.headers["X-Doc-Type"] = result.type
    response.headers["X-Confidence"] = f"{result.confidence:.4f}"


@router.post("", response_model=ClassifyResponse)
@limiter.limit(api_rate_limit)  # type: ignore[untyped-decorator]
async def classify_document(request: Request, response: Response, body: ClassifyRequest) -> ClassifyResponse:
    """Classify a document's extracted text."""
    result = await asyncio.to_thread(classify_text, body.text, body.file_path, body.page_count)
    set_classification_headers(response, result)
    return result


@router.post("/batch", response_model=List[BatchItemResult])
@limiter.limit(api_rate_limit)  # type: ignore[untyped-decorator]
async def classify_batch(request: Request, body: BatchClassifyRequest) -> List[BatchItemResult]:
    """Classify up to 500 texts concurrently; failures are reported per item."""
    settings = get_settings()
    results = await detect_document_types_batch(
        body.documents,
        settings.batch_workers or None,
        thresholds=thresholds_from_settings(settings),
        unique_identifier_bonus=settings.unique_identifier_bonus,
    )
    failed = sum(1 for r in results if r.status == "failed")
    if failed:
        logger.warning("Batch classification: %d of %d items failed", failed, len(results))
    return results

"""Concurrent batch document classification.

Each document is classified independently on a worker thread. Failures
are captured per item so one bad document never aborts the batch, and
results are returned in input order.
"""

import asyncio
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from taxdocs.config import get_settings
from taxdocs.models.classification import BatchDocument, BatchItemResult
from taxdocs.services.document_classifier import (
    DEFAULT_THRESHOLDS,
    UNIQUE_IDENTIFIER_BONUS,
    Thresholds,
    detect_document_type,
)

logger = logging.getLogger(__name__)

BatchInput = Union[BatchDocument, Tuple[str, Optional[str]], str]


def _coerce(document: BatchInput) -> BatchDocument:
    if isinstance(document, BatchDocument):
        return document
    if isinstance(document, str):
        return BatchDocument(text=document)
    text, file_path = document
    return BatchDocument(text=text, file_path=file_path)


def resolve_worker_count(max_workers: Optional[int] = None) -> int:
    """Worker pool size: explicit value, else BATCH_WORKERS, else the CPU count."""
    if max_workers and max_workers > 0:
        return max_workers
    configured = get_settings().batch_workers
    if configured > 0:
        return configured
    return os.cpu_count() or 1


async def detect_document_types_batch(
    documents: Iterable[BatchInput],
    max_workers: Optional[int] = None,
    *,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
    unique_identifier_bonus: float = UNIQUE_IDENTIFIER_BONUS,
) -> List[BatchItemResult]:
    """Classify many documents concurrently.

    Args:
        documents: BatchDocument objects, (text, file_path) pairs or bare texts.
        max_workers: Thread pool size (see resolve_worker_count).
        thresholds: Waterfall thresholds passed to every classification.
        unique_identifier_bonus: Calibration bonus passed to every classification.

    Returns:
        One BatchItemResult per input, in input order, with status 'ok' or
        'failed'.
    """
    items: Sequence[BatchInput] = list(documents)
    if not items:
        return []

    loop = asyncio.get_running_loop()
    workers = resolve_worker_count(max_workers)
    logger.info("Classifying %d documents with %d workers", len(items), workers)

    def _classify(document: BatchInput):
        doc = _coerce(document)
        return doc, detect_document_type(
            doc.text,
            doc.file_path,
            thresholds=thresholds,
            unique_identifier_bonus=unique_identifier_bonus,
        )

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="classify") as pool:
        tasks = [loop.run_in_executor(pool, partial(_classify, item)) for item in items]
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)

    results: List[BatchItemResult] = []
    for idx, outcome in enumerate(outcomes):
        if isinstance(outcome, BaseException):
            file_path = _safe_file_path(items[idx])
            logger.warning("Classification failed for item %d (%s): %s", idx, file_path, outcome)
            results.append(BatchItemResult(
                index=idx,
                file_path=file_path,
                status="failed",
                error=f"{type(outcome).__name__}: {outcome}",
            ))
            continue

        doc, result = outcome
        results.append(BatchItemResult(index=idx, file_path=doc.file_path, result=result))

    failed = sum(1 for r in results if r.status == "failed")
    logger.info("Batch done: %d ok, %d failed", len(results) - failed, failed)
    return results


def detect_document_types_batch_sync(
    documents: Iterable[BatchInput],
    max_workers: Optional[int] = None,
    **kwargs,
) -> List[BatchItemResult]:
    """Synchronous wrapper around detect_document_types_batch."""
    return asyncio.run(detect_document_types_batch(documents, max_workers, **kwargs))


def _safe_file_path(document: BatchInput) -> Optional[str]:
    try:
        return _coerce(document).file_path
    except (TypeError, ValueError):
        return None

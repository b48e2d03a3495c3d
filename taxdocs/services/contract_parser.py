"""Contract and invoice parser.

Runs every field extractor over the same text and assembles a single
ExtractedContract with an aggregated confidence. Extractors run
unconditionally; nothing short-circuits on a missing field.
"""

import logging
from statistics import fmean
from typing import Iterable, List

from taxdocs.models.contract import ExtractedContract, SourceDocumentType
from taxdocs.services.field_extractors import (
    LARGEST_AMOUNT_CONFIDENCE,
    MAX_CLAUSES,
    extract_contract_number,
    extract_contract_type,
    extract_depreciation_info,
    extract_important_clauses,
    extract_key_dates,
    extract_parties,
    extract_payment_schedules,
    extract_total_value,
)

logger = logging.getLogger(__name__)

# Reported when no extractor produced anything: plausible but unverified
DEFAULT_CONFIDENCE = 0.3


def aggregate_confidence(samples: Iterable[float]) -> float:
    """Mean of the confidence samples, or DEFAULT_CONFIDENCE if there are none."""
    values: List[float] = list(samples)
    if not values:
        return DEFAULT_CONFIDENCE
    return round(min(max(fmean(values), 0.0), 1.0), 4)


def parse_contract_from_text(
    text: str,
    document_type: SourceDocumentType = "Unknown",
    *,
    largest_amount_confidence: float = LARGEST_AMOUNT_CONFIDENCE,
    max_clauses: int = MAX_CLAUSES,
) -> ExtractedContract:
    """Parse contract or invoice text into a structured, scored record.

    Args:
        text: Plain text supplied by the upstream text extractor.
        document_type: Where the text came from ('Pdf', 'Image' or 'Unknown').
        largest_amount_confidence: Confidence for the largest-amount total fallback.
        max_clauses: Maximum number of clauses to keep.

    Returns:
        ExtractedContract. overall_confidence is the mean of the contract
        type, total value, party, key date and payment confidences; each
        list element contributes one sample.
    """
    text = text or ""

    contract_type = extract_contract_type(text)
    contract_number = extract_contract_number(text)
    total_value = extract_total_value(text, largest_amount_confidence=largest_amount_confidence)
    parties = extract_parties(text)
    key_dates = extract_key_dates(text)
    payment_schedules = extract_payment_schedules(text)
    depreciation_assets = extract_depreciation_info(text)
    important_clauses = extract_important_clauses(text, max_clauses=max_clauses)

    samples: List[float] = []
    if contract_type:
        samples.append(contract_type.confidence)
    if total_value:
        samples.append(total_value.confidence)
    samples.extend(p.confidence for p in parties)
    samples.extend(d.confidence for d in key_dates)
    samples.extend(p.confidence for p in payment_schedules)

    overall = aggregate_confidence(samples)

    logger.debug(
        "Parsed contract: type=%s parties=%d dates=%d payments=%d assets=%d clauses=%d confidence=%.3f",
        contract_type.value if contract_type else None,
        len(parties), len(key_dates), len(payment_schedules),
        len(depreciation_assets), len(important_clauses), overall,
    )

    return ExtractedContract(
        contract_type=contract_type,
        contract_number=contract_number,
        total_value=total_value,
        parties=parties,
        payment_schedules=payment_schedules,
        key_dates=key_dates,
        depreciation_assets=depreciation_assets,
        important_clauses=important_clauses,
        raw_text=text,
        overall_confidence=overall,
        document_type=document_type,
    )

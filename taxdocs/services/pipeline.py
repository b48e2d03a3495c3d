"""Settings-aware entry points shared by the HTTP API and the CLI."""

from typing import Optional

from taxdocs.config import Settings, get_settings
from taxdocs.models.api import ClassifyResponse, ParseResponse
from taxdocs.models.classification import DocumentTypeResult
from taxdocs.models.contract import SourceDocumentType
from taxdocs.services.contract_parser import parse_contract_from_text
from taxdocs.services.contract_summary import summarize_contract
from taxdocs.services.contract_validator import validate_extracted_contract
from taxdocs.services.document_classifier import (
    detect_document_type,
    get_document_type_icon,
    get_document_type_label,
    get_recommended_action,
    thresholds_from_settings,
)

# Document types whose text is worth running through the contract parser
PARSEABLE_TYPES = frozenset({"contract", "invoice"})


def describe_result(result: DocumentTypeResult, settings: Optional[Settings] = None) -> ClassifyResponse:
    settings = settings or get_settings()
    return ClassifyResponse(
        **result.model_dump(),
        recommended_action=get_recommended_action(result, thresholds_from_settings(settings)),
        label=get_document_type_label(result.type),
        icon=get_document_type_icon(result.type),
    )


def classify_text(
    text: str,
    file_path: Optional[str] = None,
    page_count: Optional[int] = None,
    settings: Optional[Settings] = None,
) -> ClassifyResponse:
    """Classify text with the configured thresholds and calibration."""
    settings = settings or get_settings()
    result = detect_document_type(
        text,
        file_path,
        page_count=page_count,
        thresholds=thresholds_from_settings(settings),
        unique_identifier_bonus=settings.unique_identifier_bonus,
    )
    return describe_result(result, settings)


def analyze_contract(
    text: str,
    document_type: SourceDocumentType = "Unknown",
    settings: Optional[Settings] = None,
) -> ParseResponse:
    """Parse, validate and summarize contract or invoice text."""
    settings = settings or get_settings()
    contract = parse_contract_from_text(
        text,
        document_type,
        largest_amount_confidence=settings.largest_amount_confidence,
        max_clauses=settings.max_clauses,
    )
    return ParseResponse(
        contract=contract,
        validation=validate_extracted_contract(contract),
        summary=summarize_contract(contract),
    )

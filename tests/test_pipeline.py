"""Tests for the settings-aware classify/analyze entry points."""

from taxdocs.config import Settings
from taxdocs.models.classification import DocumentTypeResult
from taxdocs.services.pipeline import analyze_contract, classify_text, describe_result


def test_classify_text_adds_presentation_fields(dividend_statement):
    response = classify_text(dividend_statement, "holding.pdf", page_count=1)

    assert response.type == "dividend_statement"
    assert response.recommended_action == "accept"
    assert response.label == "Dividend Statement"
    assert response.icon
    assert response.metadata.page_count == 1


def test_classify_text_uses_configured_thresholds():
    # A receipt scored 0.8 sits below the default high threshold
    assert classify_text("receipt invoice").recommended_action == "review"

    lenient = Settings(confidence_high=0.75, confidence_medium=0.6, confidence_low=0.4)
    response = classify_text("receipt invoice", settings=lenient)
    assert response.recommended_action == "accept"
    assert response.method == "keyword"


def test_describe_fallback_result():
    result = DocumentTypeResult(type="unknown", confidence=1.0, method="fallback")
    response = describe_result(result)
    assert response.recommended_action == "accept"
    assert response.label == "Unknown Document"


def test_analyze_contract(service_agreement):
    analysis = analyze_contract(service_agreement, "Pdf")

    assert analysis.contract.document_type == "Pdf"
    assert analysis.validation.suggested_action == "review"
    assert analysis.validation.warnings == ["No key dates identified"]
    assert analysis.summary.party_count == 2
    assert analysis.summary.total_value == 25000


def test_analyze_contract_honours_max_clauses():
    text = "\n".join(f"{i}. Clause {i}" for i in range(1, 10))
    analysis = analyze_contract(text, settings=Settings(max_clauses=3))
    assert len(analysis.contract.important_clauses) == 3

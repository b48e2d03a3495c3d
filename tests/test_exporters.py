"""Tests for storage records and JSON/CSV exports."""

import csv
import io
import json

from taxdocs.models.classification import DocumentTypeResult
from taxdocs.services.contract_parser import parse_contract_from_text
from taxdocs.services.document_classifier import fallback_result
from taxdocs.services.exporters import (
    CSV_HEADERS,
    export_contracts_to_csv,
    export_contracts_to_json,
    export_detection_results,
    to_storage_record,
)


def test_storage_record(service_agreement):
    contract = parse_contract_from_text(service_agreement, "Pdf")
    record = to_storage_record(contract, "uploads/sa.pdf", "pdf", tax_year=2024, notes="first pass")

    assert record["contract_type"] == "Service Agreement"
    assert record["contract_number"] == "SA-2024-001"
    assert record["total_value"] == 25000.0
    assert record["document_path"] == "uploads/sa.pdf"
    assert record["document_type"] == "pdf"
    assert record["status"] == "draft"
    assert record["tax_year"] == 2024
    assert record["notes"] == "first pass"
    assert record["confidence_score"] == contract.overall_confidence

    parties = json.loads(record["parties_json"])
    assert [p["role"] for p in parties] == ["client", "contractor"]
    assert json.loads(record["key_dates_json"]) == []
    assert json.loads(record["important_clauses_json"]) == []


def test_storage_record_with_absent_fields():
    record = to_storage_record(parse_contract_from_text(""), "x.png", "image")
    assert record["contract_type"] is None
    assert record["total_value"] is None
    assert record["confidence_score"] == 0.3


def test_export_json_is_indented(service_agreement):
    record = to_storage_record(parse_contract_from_text(service_agreement), "a.pdf", "pdf")
    output = export_contracts_to_json([record])
    assert output.startswith("[\n  {")
    assert json.loads(output)[0]["contract_number"] == "SA-2024-001"


def test_export_csv(service_agreement):
    record = to_storage_record(parse_contract_from_text(service_agreement), "a.pdf", "pdf")
    record["id"] = "c-1"
    record["created_at"] = "2024-07-01T00:00:00Z"

    rows = list(csv.reader(io.StringIO(export_contracts_to_csv([record]))))

    assert rows[0] == CSV_HEADERS
    assert rows[1] == [
        "c-1", "Service Agreement", "SA-2024-001", "25000.0",
        "2", "0", "0", "0", "draft", "2024-07-01T00:00:00Z",
    ]


def test_export_csv_quotes_commas():
    record = {"id": "c-2", "contract_type": "Terms, and more", "status": "draft"}
    output = export_contracts_to_csv([record])
    assert '"Terms, and more"' in output


def test_export_detection_results():
    results = [
        ("holding.pdf", DocumentTypeResult(type="dividend_statement", confidence=0.95, method="keyword")),
        ("blurry.png", DocumentTypeResult(type="receipt", confidence=0.5, method="structure")),
        ("blank.txt", fallback_result("blank.txt")),
    ]

    rows = json.loads(export_detection_results(results))

    assert rows == [
        {"file": "holding.pdf", "type": "dividend_statement", "confidence": 0.95,
         "method": "keyword", "recommendedAction": "accept"},
        {"file": "blurry.png", "type": "receipt", "confidence": 0.5,
         "method": "structure", "recommendedAction": "review"},
        {"file": "blank.txt", "type": "unknown", "confidence": 1.0,
         "method": "fallback", "recommendedAction": "accept"},
    ]

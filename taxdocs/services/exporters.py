"""Storage records and JSON/CSV exports for extracted contracts."""

import csv
import io
import json
from typing import Any, Dict, Iterable, List, Literal, Optional, Sequence, Union

from taxdocs.models.classification import DocumentTypeResult
from taxdocs.models.contract import ExtractedContract
from taxdocs.services.document_classifier import (
    DEFAULT_THRESHOLDS,
    Thresholds,
    get_recommended_action,
)

StoredDocumentType = Literal["pdf", "image", "text"]

CSV_HEADERS = [
    "ID",
    "Contract Type",
    "Contract Number",
    "Total Value",
    "Parties",
    "Key Dates Count",
    "Payment Schedules Count",
    "Depreciation Assets Count",
    "Status",
    "Created At",
]

_LIST_COLUMNS = {
    "parties_json": "parties",
    "payment_schedules_json": "payment_schedules",
    "key_dates_json": "key_dates",
    "depreciation_assets_json": "depreciation_assets",
    "important_clauses_json": "important_clauses",
}


def to_storage_record(
    contract: ExtractedContract,
    document_path: str,
    document_type: StoredDocumentType,
    tax_year: Optional[int] = None,
    notes: Optional[str] = None,
) -> Dict[str, Any]:
    """Flatten a contract into the row shape used by the contracts table.

    Scalar fields become columns; each list field is JSON-encoded into
    its own *_json column. New records start in 'draft' status.
    """
    def _value(field):
        return field.value if field is not None else None

    record: Dict[str, Any] = {
        "contract_type": _value(contract.contract_type),
        "contract_number": _value(contract.contract_number),
        "contract_date": _value(contract.contract_date),
        "start_date": _value(contract.start_date),
        "end_date": _value(contract.end_date),
        "total_value": _value(contract.total_value),
        "raw_text": contract.raw_text,
        "document_path": document_path,
        "document_type": document_type,
        "confidence_score": contract.overall_confidence,
        "status": "draft",
        "tax_year": tax_year,
        "notes": notes,
    }
    for column, attr in _LIST_COLUMNS.items():
        items = getattr(contract, attr)
        record[column] = json.dumps([item.model_dump(mode="json") for item in items])
    return record


def export_contracts_to_json(records: Sequence[Dict[str, Any]]) -> str:
    return json.dumps(list(records), indent=2, default=str)


def _json_count(raw: Union[str, list, None]) -> int:
    if raw is None:
        return 0
    if isinstance(raw, list):
        return len(raw)
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError):
        return 0
    return len(parsed) if isinstance(parsed, list) else 0


def export_contracts_to_csv(records: Iterable[Dict[str, Any]]) -> str:
    """Render stored contract records as CSV; list columns become counts."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for record in records:
        writer.writerow([
            record.get("id", ""),
            record.get("contract_type") or "",
            record.get("contract_number") or "",
            "" if record.get("total_value") is None else record["total_value"],
            _json_count(record.get("parties_json")),
            _json_count(record.get("key_dates_json")),
            _json_count(record.get("payment_schedules_json")),
            _json_count(record.get("depreciation_assets_json")),
            record.get("status", ""),
            record.get("created_at", ""),
        ])
    return buffer.getvalue()


def detection_result_rows(
    results: Iterable[tuple[str, DocumentTypeResult]],
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> List[Dict[str, Any]]:
    return [
        {
            "file": file_name,
            "type": result.type,
            "confidence": result.confidence,
            "method": result.method,
            "recommendedAction": get_recommended_action(result, thresholds),
        }
        for file_name, result in results
    ]


def export_detection_results(
    results: Iterable[tuple[str, DocumentTypeResult]],
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> str:
    """Render (file, result) pairs as indented JSON for download."""
    return json.dumps(detection_result_rows(results, thresholds), indent=2)

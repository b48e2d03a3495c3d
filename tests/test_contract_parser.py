"""Tests for contract parsing end to end."""

import pytest

from taxdocs.services.contract_parser import (
    DEFAULT_CONFIDENCE,
    aggregate_confidence,
    parse_contract_from_text,
)
from taxdocs.services.contract_validator import validate_extracted_contract


def test_service_agreement(service_agreement):
    contract = parse_contract_from_text(service_agreement)

    assert contract.contract_type.value == "Service Agreement"
    assert contract.contract_number.value == "SA-2024-001"
    assert contract.total_value.value == 25000
    assert len(contract.parties) >= 2
    roles = {p.role for p in contract.parties}
    assert {"client", "contractor"} <= roles
    # mean of type 0.85, total 0.8 and two parties at 0.75
    assert contract.overall_confidence == pytest.approx(0.7875)
    assert contract.document_type == "Unknown"
    assert contract.raw_text == service_agreement


def test_laptop_asset():
    contract = parse_contract_from_text("Laptop computer: $2,400.00", "Pdf")

    assert len(contract.depreciation_assets) == 1
    asset = contract.depreciation_assets[0]
    assert asset.asset_value == 2400
    assert asset.is_immediate_deduction is False
    assert asset.is_low_value_pool is False
    assert contract.document_type == "Pdf"


def test_empty_text():
    contract = parse_contract_from_text("")

    assert contract.overall_confidence == DEFAULT_CONFIDENCE == 0.3
    assert contract.parties == []
    assert contract.key_dates == []
    assert contract.payment_schedules == []
    assert contract.depreciation_assets == []
    assert contract.important_clauses == []
    assert validate_extracted_contract(contract).suggested_action == "manual_entry"


def test_parse_is_deterministic(signed_agreement):
    first = parse_contract_from_text(signed_agreement)
    second = parse_contract_from_text(signed_agreement)
    assert first.model_dump_json() == second.model_dump_json()


def test_max_clauses_passed_through():
    text = "\n".join(f"{i}. Item {i}" for i in range(1, 10))
    assert len(parse_contract_from_text(text, max_clauses=4).important_clauses) == 4


def test_depreciation_and_clauses_do_not_affect_confidence():
    contract = parse_contract_from_text("Office furniture $250.00\n1. Scope")
    # Only the largest-amount total contributes a sample
    assert contract.overall_confidence == pytest.approx(0.6)


class TestAggregateConfidence:
    def test_mean(self):
        assert aggregate_confidence([0.8, 0.6]) == pytest.approx(0.7)

    def test_default_when_empty(self):
        assert aggregate_confidence([]) == 0.3

    def test_always_in_range(self):
        assert 0.0 <= aggregate_confidence([1.0, 1.0, 0.0]) <= 1.0

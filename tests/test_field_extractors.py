"""Tests for the individual contract field extractors."""

import pytest

from taxdocs.services.field_extractors import (
    categorize_clause,
    extract_contract_number,
    extract_contract_type,
    extract_depreciation_info,
    extract_important_clauses,
    extract_key_dates,
    extract_parties,
    extract_payment_schedules,
    extract_total_value,
    find_first_date,
)


class TestContractType:
    def test_first_matching_pattern_wins(self):
        field = extract_contract_type("SERVICE AGREEMENT\nsee terms and conditions")
        assert field.value == "Service Agreement"
        assert field.confidence == 0.85
        assert "SERVICE AGREEMENT" in field.source

    def test_tax_invoice(self):
        assert extract_contract_type("TAX INVOICE #123").value == "Tax Invoice"

    def test_absent_when_no_pattern(self):
        assert extract_contract_type("hello world") is None


class TestContractNumber:
    @pytest.mark.parametrize("text, expected", [
        ("Contract Number: SA-2024-001", "SA-2024-001"),
        ("Agreement No: AGR-77", "AGR-77"),
        ("Invoice #: INV-1042", "INV-1042"),
        ("Ref: REF123", "REF123"),
    ])
    def test_numbers(self, text, expected):
        field = extract_contract_number(text)
        assert field.value == expected
        assert field.confidence == 0.8

    def test_unlabelled_agreement_is_not_a_number(self):
        assert extract_contract_number("This agreement is made today") is None


class TestTotalValue:
    def test_labelled_total(self):
        field = extract_total_value("Total Amount: $1,250.50")
        assert field.value == 1250.5
        assert field.confidence == 0.8

    def test_contract_value_label(self):
        assert extract_total_value("Total Contract Value: $25,000.00").value == 25000.0

    def test_largest_amount_fallback(self):
        field = extract_total_value("Fee $100 and later $2,500.00 and AUD 300")
        assert field.value == 2500.0
        assert field.confidence == 0.6
        assert field.source == "Largest amount found"

    def test_largest_amount_confidence_is_configurable(self):
        field = extract_total_value("Pay $10", largest_amount_confidence=0.5)
        assert field.confidence == 0.5

    def test_absent_without_amounts(self):
        assert extract_total_value("no money mentioned") is None


class TestParties:
    def test_roles(self, service_agreement):
        parties = extract_parties(service_agreement)
        assert [(p.name, p.role) for p in parties] == [
            ("ABC Pty Ltd", "client"),
            ("XYZ Consulting", "contractor"),
        ]
        assert all(p.confidence == 0.75 for p in parties)

    def test_valid_abn_in_context_raises_confidence(self):
        parties = extract_parties("Client: ABC Pty Ltd\nABN: 53 004 085 616")
        assert len(parties) == 1
        assert parties[0].abn == "53004085616"
        assert parties[0].acn is None
        assert parties[0].confidence == 0.85

    def test_abn_and_acn(self):
        text = "Supplier: Acme Pty Ltd\nABN: 51 824 753 556\nACN: 004 085 616"
        party = extract_parties(text)[0]
        assert party.role == "vendor"
        assert party.abn == "51824753556"
        assert party.acn == "004085616"
        assert party.confidence == 0.9

    def test_invalid_abn_ignored(self):
        party = extract_parties("Client: ABC Pty Ltd\nABN: 12 345 678 901")[0]
        assert party.abn is None
        assert party.confidence == 0.75

    def test_inline_abn_annotation_stripped_from_name(self):
        party = extract_parties("Customer: Smith Holdings (ABN: 51 824 753 556)")[0]
        assert party.name == "Smith Holdings"
        assert party.abn == "51824753556"

    def test_role_word_without_colon_is_not_a_party(self):
        assert extract_parties("The client agrees to pay on time") == []


class TestKeyDates:
    def test_formats_are_normalized(self):
        text = (
            "Commencement Date: 01/07/2024\n"
            "Termination: 30 June 2025\n"
            "Review on 2025-01-15\n"
        )
        dates = extract_key_dates(text)
        assert [(d.date, d.date_type) for d in dates] == [
            ("2024-07-01", "commencement"),
            ("2025-06-30", "termination"),
            ("2025-01-15", "review"),
        ]
        assert all(d.confidence == 0.75 for d in dates)

    def test_keyword_without_date_is_skipped(self):
        assert extract_key_dates("Commencement date TBC") == []

    def test_find_first_date_prefers_numeric_dmy(self):
        assert find_first_date("on 5 May 2024 or 01/06/2024") == "2024-06-01"

    def test_impossible_date_skipped(self):
        assert extract_key_dates("Commencement: 45/99/2024") == []

    def test_next_real_date_used(self):
        assert find_first_date("due 31/02/2024, moved to 01/03/2024") == "2024-03-01"


class TestPaymentSchedules:
    def test_amount_and_date(self):
        schedule = extract_payment_schedules("Deposit: $5,000.00 due 01/08/2024")[0]
        assert schedule.amount == 5000.0
        assert schedule.due_date == "2024-08-01"
        assert schedule.percentage is None
        assert schedule.is_milestone is False
        assert schedule.confidence == 0.8

    def test_percentage_only_milestone(self):
        schedule = extract_payment_schedules("Milestone 1 payment: 30% on delivery")[0]
        assert schedule.amount == 0.0
        assert schedule.percentage == 30.0
        assert schedule.is_milestone is True
        assert schedule.confidence == 0.6

    def test_line_without_amount_or_percentage_skipped(self):
        assert extract_payment_schedules("Payment terms apply") == []

    def test_percentage_over_100_ignored(self):
        assert extract_payment_schedules("Balance increase of 150% noted") == []

    @pytest.mark.parametrize("line", [
        "Payment increase 1000% of deposit",
        "Installment penalty capped at 2500%",
    ])
    def test_percentage_digits_not_split(self, line):
        assert extract_payment_schedules(line) == []

    def test_decimal_percentage(self):
        assert extract_payment_schedules("Deposit of 12.5% on signing")[0].percentage == 12.5


class TestDepreciation:
    def test_immediate_deduction(self):
        asset = extract_depreciation_info("Office furniture $250.00")[0]
        assert asset.asset_value == 250.0
        assert asset.is_immediate_deduction is True
        assert asset.is_low_value_pool is False
        assert asset.confidence == 0.7

    def test_effective_life_and_method_from_following_lines(self):
        text = "Computer equipment $850.00\nEffective life: 4 years\nMethod: diminishing value"
        asset = extract_depreciation_info(text)[0]
        assert asset.effective_life_years == 4
        assert asset.depreciation_method == "diminishing_value"
        assert asset.is_low_value_pool is True
        assert asset.confidence == 0.8

    def test_laptop_above_pool(self):
        asset = extract_depreciation_info("Laptop computer: $2,400.00")[0]
        assert asset.asset_value == 2400.0
        assert asset.is_immediate_deduction is False
        assert asset.is_low_value_pool is False

    def test_keyword_without_amount_skipped(self):
        assert extract_depreciation_info("Equipment list attached") == []


class TestClauses:
    def test_headers_and_categories(self):
        text = (
            "1. Payment Terms\n"
            "2. Termination\n"
            "3.1 Liability and Indemnity\n"
            "(a) Intellectual property rights\n"
            "Clause 7: Confidentiality\n"
        )
        clauses = extract_important_clauses(text)
        assert [(c.clause_number, c.category) for c in clauses] == [
            ("1", "payment"),
            ("2", "termination"),
            ("3.1", "liability"),
            ("(a)", "intellectual_property"),
            ("7", "other"),
        ]
        assert clauses[0].title == "Payment Terms"

    def test_capped_at_twenty(self):
        text = "\n".join(f"{i}. Item {i}" for i in range(1, 26))
        assert len(extract_important_clauses(text)) == 20

    def test_custom_cap(self):
        text = "\n".join(f"{i}. Item {i}" for i in range(1, 6))
        assert len(extract_important_clauses(text, max_clauses=3)) == 3

    @pytest.mark.parametrize("title, category", [
        ("Fees and invoicing", "payment"),
        ("Cancellation", "termination"),
        ("Insurance", "liability"),
        ("Copyright", "intellectual_property"),
        ("Notices", "other"),
    ])
    def test_categorize(self, title, category):
        assert categorize_clause(title) == category


@pytest.mark.parametrize("extractor", [
    extract_contract_type, extract_contract_number, extract_total_value,
    extract_parties, extract_key_dates, extract_payment_schedules,
    extract_depreciation_info, extract_important_clauses,
])
def test_extractors_tolerate_empty_text(extractor):
    assert extractor("") in (None, [])

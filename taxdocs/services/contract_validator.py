"""Completeness and plausibility checks for extracted contracts.

Deficiencies are reported as data (missing_fields, warnings) together with
a suggested downstream action; nothing here raises.
"""

from typing import List

from taxdocs.models.contract import ContractValidationResult, ExtractedContract

HIGH_VALUE_THRESHOLD = 10_000_000
MAX_MISSING_FOR_REVIEW = 2

HIGH_VALUE_WARNING = "Unusually high contract value - please verify"
NO_KEY_DATES_WARNING = "No key dates identified"


def validate_extracted_contract(contract: ExtractedContract) -> ContractValidationResult:
    """Decide whether an extracted contract can be accepted as-is.

    More than two missing mandatory fields -> manual_entry; any missing
    field or warning -> review; otherwise accept. is_valid stays True
    while at most two fields are missing, so a valid contract can still
    be sent to review.
    """
    missing: List[str] = []
    warnings: List[str] = []

    if contract.contract_type is None:
        missing.append("contract_type")
    if contract.total_value is None:
        missing.append("total_value")
    if not contract.parties:
        missing.append("parties")
    if not contract.key_dates:
        warnings.append(NO_KEY_DATES_WARNING)

    if contract.total_value is not None and contract.total_value.value > HIGH_VALUE_THRESHOLD:
        warnings.append(HIGH_VALUE_WARNING)

    if len(missing) > MAX_MISSING_FOR_REVIEW:
        action = "manual_entry"
    elif missing or warnings:
        action = "review"
    else:
        action = "accept"

    return ContractValidationResult(
        is_valid=len(missing) <= MAX_MISSING_FOR_REVIEW,
        missing_fields=missing,
        warnings=warnings,
        suggested_action=action,
    )

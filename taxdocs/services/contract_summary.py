"""Depreciation helpers and contract summaries."""

from typing import Iterable, List

from taxdocs.models.contract import ContractSummary, DepreciationInfo, ExtractedContract


def calculate_total_depreciation_value(assets: Iterable[DepreciationInfo]) -> float:
    return sum(asset.asset_value for asset in assets)


def get_immediate_deductions(assets: Iterable[DepreciationInfo]) -> List[DepreciationInfo]:
    """Assets of $300 or less, deductible in full this year."""
    return [asset for asset in assets if asset.is_immediate_deduction]


def get_low_value_pool_assets(assets: Iterable[DepreciationInfo]) -> List[DepreciationInfo]:
    """Assets over $300 and up to $1,000, eligible for the low-value pool."""
    return [asset for asset in assets if asset.is_low_value_pool]


def summarize_contract(contract: ExtractedContract) -> ContractSummary:
    assets = contract.depreciation_assets
    return ContractSummary(
        total_value=contract.total_value.value if contract.total_value else 0.0,
        party_count=len(contract.parties),
        key_dates_count=len(contract.key_dates),
        payment_count=len(contract.payment_schedules),
        depreciation_count=len(assets),
        immediate_deductions=len(get_immediate_deductions(assets)),
        low_value_pool_assets=len(get_low_value_pool_assets(assets)),
    )

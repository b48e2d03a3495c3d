"""Pydantic models for contract and invoice extraction results.

Every model is frozen: an extraction result is produced once per parse
call and never mutated afterwards. Re-parsing a document builds a new
ExtractedContract.
"""

from typing import Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

T = TypeVar("T")

IMMEDIATE_DEDUCTION_LIMIT = 300.0
LOW_VALUE_POOL_LIMIT = 1000.0

PartyRole = Literal["client", "contractor", "vendor", "supplier", "other"]
DateType = Literal["commencement", "completion", "milestone", "review", "termination", "other"]
ClauseCategory = Literal[
    "payment", "termination", "liability", "warranty", "intellectual_property", "other"
]
DepreciationMethod = Literal["prime_cost", "diminishing_value"]
SourceDocumentType = Literal["Unknown", "Pdf", "Image"]
SuggestedAction = Literal["accept", "review", "manual_entry"]


class FrozenModel(BaseModel):
    """Base model for immutable extraction value objects."""
    model_config = ConfigDict(frozen=True)


class ExtractedField(FrozenModel, Generic[T]):
    """One scalar datum together with its confidence and provenance."""
    value: T = Field(description="Extracted value")
    confidence: float = Field(ge=0.0, le=1.0, description="Heuristic trust weight (0.0 to 1.0)")
    source: str = Field(description="Matched text or rule that produced the value")


class ContractParty(FrozenModel):
    """A party named in the document, e.g. 'Client: ABC Pty Ltd'."""
    name: str
    abn: Optional[str] = Field(default=None, description="11-digit ABN, checksum verified")
    acn: Optional[str] = Field(default=None, description="9-digit ACN, checksum verified")
    role: PartyRole = "other"
    address: Optional[str] = None
    contact: Optional[str] = None
    confidence: float = Field(ge=0.0, le=1.0)


class KeyDate(FrozenModel):
    """A dated event such as commencement or termination."""
    date: str = Field(description="ISO-8601 calendar date (YYYY-MM-DD)")
    description: str
    date_type: DateType = "other"
    confidence: float = Field(ge=0.0, le=1.0)


class PaymentSchedule(FrozenModel):
    """A payment line: deposit, installment, milestone or balance."""
    description: str
    amount: float = Field(ge=0.0)
    due_date: Optional[str] = None
    percentage: Optional[float] = Field(default=None, ge=0.0, le=100.0)
    is_milestone: bool = False
    confidence: float = Field(ge=0.0, le=1.0)


class DepreciationInfo(FrozenModel):
    """A depreciable asset mentioned in the document.

    The immediate-deduction and low-value-pool flags are derived solely
    from asset_value: at most $300 is an immediate deduction, more than
    $300 up to $1,000 belongs in the low-value pool.
    """
    asset_description: str
    asset_value: float = Field(ge=0.0)
    effective_life_years: Optional[int] = Field(default=None, ge=0)
    depreciation_method: Optional[DepreciationMethod] = None
    start_date: Optional[str] = None
    is_immediate_deduction: bool
    is_low_value_pool: bool
    confidence: float = Field(ge=0.0, le=1.0)

    @model_validator(mode="after")
    def check_threshold_flags(self) -> "DepreciationInfo":
        """Flags must agree with the value thresholds."""
        immediate, pooled = deduction_flags(self.asset_value)
        if self.is_immediate_deduction != immediate or self.is_low_value_pool != pooled:
            raise ValueError(
                f"deduction flags do not match asset_value {self.asset_value}: "
                f"expected immediate={immediate}, low_value_pool={pooled}"
            )
        return self

    @classmethod
    def from_value(cls, asset_description: str, asset_value: float, confidence: float, **kwargs) -> "DepreciationInfo":
        """Build an asset with its deduction flags derived from the value."""
        immediate, pooled = deduction_flags(asset_value)
        return cls(
            asset_description=asset_description,
            asset_value=asset_value,
            is_immediate_deduction=immediate,
            is_low_value_pool=pooled,
            confidence=confidence,
            **kwargs,
        )


def deduction_flags(asset_value: float) -> tuple[bool, bool]:
    """Return (is_immediate_deduction, is_low_value_pool) for a value."""
    immediate = asset_value <= IMMEDIATE_DEDUCTION_LIMIT
    pooled = IMMEDIATE_DEDUCTION_LIMIT < asset_value <= LOW_VALUE_POOL_LIMIT
    return immediate, pooled


class ContractClause(FrozenModel):
    """A numbered or lettered clause header."""
    clause_number: Optional[str] = None
    title: Optional[str] = None
    text: str
    category: ClauseCategory = "other"
    confidence: float = Field(ge=0.0, le=1.0)


class ExtractedContract(FrozenModel):
    """Aggregate result of parsing one contract or invoice."""
    contract_type: Optional[ExtractedField[str]] = None
    contract_number: Optional[ExtractedField[str]] = None
    contract_date: Optional[ExtractedField[str]] = None
    start_date: Optional[ExtractedField[str]] = None
    end_date: Optional[ExtractedField[str]] = None
    total_value: Optional[ExtractedField[float]] = None
    parties: List[ContractParty] = Field(default_factory=list)
    payment_schedules: List[PaymentSchedule] = Field(default_factory=list)
    key_dates: List[KeyDate] = Field(default_factory=list)
    depreciation_assets: List[DepreciationInfo] = Field(default_factory=list)
    important_clauses: List[ContractClause] = Field(default_factory=list)
    raw_text: str = ""
    overall_confidence: float = Field(ge=0.0, le=1.0)
    document_type: SourceDocumentType = "Unknown"


class ContractValidationResult(FrozenModel):
    """Completeness and plausibility verdict for an ExtractedContract."""
    is_valid: bool
    missing_fields: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    suggested_action: SuggestedAction


class ContractSummary(FrozenModel):
    """Counts and totals used by list views and tax workpapers."""
    total_value: float = 0.0
    party_count: int = 0
    key_dates_count: int = 0
    payment_count: int = 0
    depreciation_count: int = 0
    immediate_deductions: int = 0
    low_value_pool_assets: int = 0

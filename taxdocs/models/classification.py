"""Pydantic models for document type classification results.

Used by the document classifier to report which kind of financial
document a piece of extracted text is, and by the batch classifier to
report per-item outcomes.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

DocumentType = Literal[
    "receipt", "bank_statement", "dividend_statement", "invoice", "contract", "unknown"
]
ClassificationMethod = Literal["keyword", "structure", "ml", "fallback"]
DocumentFormat = Literal["pdf", "image", "text"]
RecommendedAction = Literal["accept", "review", "manual_entry"]

KNOWN_DOCUMENT_TYPES: tuple[str, ...] = (
    "receipt", "bank_statement", "dividend_statement", "invoice", "contract",
)


class DocumentMetadata(BaseModel):
    """Signals observed while classifying a document."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    detected_keywords: List[str] = Field(
        default_factory=list,
        alias="detectedKeywords",
        description="Keywords that contributed to the winning type ('!' prefix = unique identifier)"
    )
    page_count: Optional[int] = Field(default=None, alias="pageCount", ge=0)
    has_tables: Optional[bool] = Field(default=None, alias="hasTables")
    has_amounts: Optional[bool] = Field(default=None, alias="hasAmounts")
    has_dates: Optional[bool] = Field(default=None, alias="hasDates")
    has_abn: Optional[bool] = Field(default=None, alias="hasAbn")
    format: DocumentFormat = "text"


class DocumentTypeResult(BaseModel):
    """Result of classifying a document's type."""
    model_config = ConfigDict(frozen=True)

    type: DocumentType = Field(description="Classified document type")
    confidence: float = Field(
        ge=0.0, le=1.0,
        description="Classification confidence (0.0 to 1.0)"
    )
    method: ClassificationMethod = Field(
        description="Which classification stage produced the result"
    )
    metadata: DocumentMetadata = Field(default_factory=DocumentMetadata)


class StageResult(BaseModel):
    """Intermediate output of a single classifier stage."""
    model_config = ConfigDict(frozen=True)

    type: DocumentType = "unknown"
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    keywords: List[str] = Field(default_factory=list)


class BatchDocument(BaseModel):
    """One input to the batch classifier."""
    text: str
    file_path: Optional[str] = None


class BatchItemResult(BaseModel):
    """Outcome of one document in a batch classification run."""
    index: int = Field(ge=0, description="Position of the document in the input batch")
    file_path: Optional[str] = None
    status: Literal["ok", "failed"] = "ok"
    result: Optional[DocumentTypeResult] = None
    error: Optional[str] = None


class ProcessedDocument(BaseModel):
    """A document whose text was extracted upstream and then classified."""
    file_path: str
    text: str
    result: DocumentTypeResult

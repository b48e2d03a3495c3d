"""Request and response bodies for the HTTP API."""

from typing import List, Optional

from pydantic import BaseModel, Field

from taxdocs.models.classification import BatchDocument, DocumentTypeResult, RecommendedAction
from taxdocs.models.contract import (
    ContractSummary,
    ContractValidationResult,
    ExtractedContract,
    SourceDocumentType,
)

MAX_BATCH_DOCUMENTS = 500


class ClassifyRequest(BaseModel):
    text: str = Field(description="Plain text extracted from the document")
    file_path: Optional[str] = Field(default=None, description="Original path; only the extension is used")
    page_count: Optional[int] = Field(default=None, ge=0)


class ClassifyResponse(DocumentTypeResult):
    """A classification plus the hints a UI needs to present it."""
    recommended_action: RecommendedAction
    label: str
    icon: str


class BatchClassifyRequest(BaseModel):
    documents: List[BatchDocument] = Field(min_length=1, max_length=MAX_BATCH_DOCUMENTS)


class ParseRequest(BaseModel):
    text: str
    document_type: SourceDocumentType = "Unknown"


class ParseResponse(BaseModel):
    contract: ExtractedContract
    validation: ContractValidationResult
    summary: ContractSummary


class UploadResponse(BaseModel):
    filename: str
    sha256: str
    mime_type: str
    classification: ClassifyResponse
    parsed: Optional[ParseResponse] = Field(
        default=None,
        description="Present when the document was classified as a contract or invoice"
    )

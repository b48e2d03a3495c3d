"""
Contracts API: parse contract/invoice text and validate extracted contracts.
"""

import asyncio

from fastapi import APIRouter, Request

from taxdocs.middleware.rate_limit import api_rate_limit, get_limiter
from taxdocs.models.api import ParseRequest, ParseResponse
from taxdocs.models.contract import ContractValidationResult, ExtractedContract
from taxdocs.services.contract_validator import validate_extracted_contract
from taxdocs.services.pipeline import analyze_contract

router = APIRouter(prefix="/api/contracts", tags=["contracts"])
limiter = get_limiter()


@router.post("/parse", response_model=ParseResponse)
@limiter.limit(api_rate_limit)  # type: ignore[untyped-decorator]
async def parse_contract(request: Request, body: ParseRequest) -> ParseResponse:
    """Extract contract fields from text, then validate and summarize them."""
    return await asyncio.to_thread(analyze_contract, body.text, body.document_type)


@router.post("/validate", response_model=ContractValidationResult)
@limiter.limit(api_rate_limit)  # type: ignore[untyped-decorator]
async def validate_contract(request: Request, body: ExtractedContract) -> ContractValidationResult:
    """Validate a (possibly user-edited) extracted contract."""
    return validate_extracted_contract(body)

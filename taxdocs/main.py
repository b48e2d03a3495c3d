"""FastAPI application for the document intake service."""

import json
import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, Union

from fastapi import FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from taxdocs.config import configure_logging, get_settings
from taxdocs.middleware.logging import RequestLoggingMiddleware
from taxdocs.middleware.rate_limit import get_limiter, rate_limit_exceeded_handler
from taxdocs.middleware.request_id import RequestIDMiddleware
from taxdocs.routers import classification, contracts, documents
from taxdocs.services.text_source import TextExtractionError

VERSION = "1.0.0"
COMMIT_HASH = os.environ.get("COMMIT_HASH", "development")

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Validate configuration at startup so bad thresholds fail fast."""
    settings = get_settings()
    configure_logging(settings.log_level, fmt="%(message)s")
    logger.info(
        "Starting document intake API v%s (thresholds %.2f/%.2f/%.2f)",
        VERSION, settings.confidence_high, settings.confidence_medium, settings.confidence_low,
    )
    yield
    logger.info("Shutting down document intake API")


app = FastAPI(
    title="Document Intake API",
    description="Document type classification and contract/invoice field extraction",
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.state.limiter = get_limiter()
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


@app.exception_handler(TextExtractionError)
async def text_extraction_error_handler(request: Request, exc: TextExtractionError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": exc.reason, "source_path": exc.source_path},
    )


# Starlette runs the last-added middleware first: request id must be set
# before the request logger reads it.
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(RequestIDMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Doc-Type", "X-Confidence"],
)


@app.get("/health", response_model=None)
async def health_check() -> Union[Dict[str, Any], Response]:
    """
    Report whether the text extraction backends can be loaded.

    Status Codes:
        200: All services healthy
        503: One or more services unavailable
    """
    services: Dict[str, str] = {}

    try:
        from opendataloader_pdf import convert  # noqa: F401
        services["opendataloader"] = "healthy"
    except ImportError as e:
        services["opendataloader"] = f"unhealthy: {e}"

    try:
        import magic
        magic.from_buffer(b"%PDF-1.4", mime=True)
        services["libmagic"] = "healthy"
    except (ImportError, OSError) as e:
        services["libmagic"] = f"unhealthy: {e}"

    healthy = all(state == "healthy" for state in services.values())
    body: Dict[str, Any] = {
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": services,
    }

    if not healthy:
        return Response(
            content=json.dumps(body),
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            media_type="application/json",
        )
    return body


@app.get("/version")
async def version_info() -> Dict[str, str]:
    return {"version": VERSION, "commit_hash": COMMIT_HASH}


app.include_router(classification.router)
app.include_router(contracts.router)
app.include_router(documents.router)

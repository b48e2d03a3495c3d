"""Structured JSON request logging."""

import json
import logging
import time
from typing import Any, Awaitable, Callable, Dict

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from taxdocs.middleware.request_id import get_request_id

logger = logging.getLogger("taxdocs.requests")

# Response header -> (log key, converter)
_CONTEXT_HEADERS: Dict[str, tuple[str, Callable[[str], Any]]] = {
    "X-Doc-Type": ("doc_type", str),
    "X-Confidence": ("confidence", float),
}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs one JSON line per request.

    Fields: request id, method, path, client IP, status code, processing
    time, and the classification headers (X-Doc-Type, X-Confidence) when a
    route sets them. Bodies are never logged: they contain document text.
    """

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        request_id = get_request_id(request)
        start = time.perf_counter()

        log_data: Dict[str, Any] = {
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "user_ip": request.client.host if request.client else "unknown",
        }

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(json.dumps({
                **log_data,
                "status_code": 500,
                "processing_time_ms": round((time.perf_counter() - start) * 1000, 2),
                "error": str(e),
                "error_type": type(e).__name__,
                "message": f"Request failed: {request.method} {request.url.path}",
            }), exc_info=True)
            raise

        log_data["status_code"] = response.status_code
        log_data["processing_time_ms"] = round((time.perf_counter() - start) * 1000, 2)

        for header, (key, convert) in _CONTEXT_HEADERS.items():
            if header in response.headers:
                try:
                    log_data[key] = convert(response.headers[header])
                except (TypeError, ValueError):
                    pass  # Malformed header values are left out of the log line

        logger.info(json.dumps(log_data))
        return response

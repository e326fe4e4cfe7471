"""Structured JSON access log.

Every request logs one line:
{request_id, correlation_id, path, method, status_code, latency_ms}

The request id is taken from X-Request-Id (or generated) and echoed back on
the response.
"""
from __future__ import annotations

import json
import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger("structured_access")


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """Log structured JSON for every request."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())[:12]
        start = time.monotonic()

        request.state.request_id = request_id

        try:
            response = await call_next(request)
        except Exception:
            latency_ms = round((time.monotonic() - start) * 1000, 2)
            logger.error(json.dumps(_entry(request, request_id, 500, latency_ms)))
            raise

        latency_ms = round((time.monotonic() - start) * 1000, 2)
        status_code = response.status_code
        log_entry = _entry(request, request_id, status_code, latency_ms)

        if status_code >= 500:
            logger.error(json.dumps(log_entry))
        elif status_code >= 400:
            logger.warning(json.dumps(log_entry))
        else:
            logger.info(json.dumps(log_entry))

        response.headers["X-Request-Id"] = request_id
        return response


def _entry(request: Request, request_id: str, status_code: int, latency_ms: float) -> dict:
    return {
        "request_id": request_id,
        "correlation_id": getattr(request.state, "correlation_id", None),
        "path": request.url.path,
        "method": request.method,
        "status_code": status_code,
        "latency_ms": latency_ms,
    }

from __future__ import annotations

import logging
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from shelterpay.errors import error_response

logger = logging.getLogger(__name__)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        incoming = request.headers.get("X-Correlation-Id")
        if incoming and isinstance(incoming, str) and incoming.strip():
            cid = incoming.strip()
        else:
            cid = str(uuid.uuid4())

        request.state.correlation_id = cid

        try:
            response: Response = await call_next(request)
        except Exception:
            logger.exception("Unhandled error (correlation_id=%s)", cid)
            from fastapi.responses import JSONResponse

            response = JSONResponse(
                status_code=500,
                content=error_response("internal_error", "Unexpected server error", {"correlation_id": cid}),
            )

        response.headers["X-Correlation-Id"] = cid
        return response

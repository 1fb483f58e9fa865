"""
Request Audit Logging Middleware

Records every state-changing API call (claims, check-ins, sign-outs,
cancellations, admin edits) with the acting identity, outcome and latency.
Read-only requests are not audited.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("audit")

AUDITED_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


def _actor(request: Request) -> str:
    user_id = request.headers.get("x-user-id") or "anonymous"
    role = request.headers.get("x-user-role") or "-"
    return f"{role}:{user_id}"


class AuditLogMiddleware(BaseHTTPMiddleware):
    """One audit line per mutating request; failures are logged above info."""

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.method not in AUDITED_METHODS:
            return await call_next(request)

        start = time.monotonic()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            elapsed_ms = round((time.monotonic() - start) * 1000, 2)
            line = f"{request.method} {request.url.path} by {_actor(request)} -> {status_code} ({elapsed_ms}ms)"
            audit_data = {
                "method": request.method,
                "path": request.url.path,
                "status": status_code,
                "actor": _actor(request),
                "latency_ms": elapsed_ms,
            }
            if status_code >= 500:
                logger.error(line, extra=audit_data)
            elif status_code >= 400:
                logger.warning(line, extra=audit_data)
            else:
                logger.info(line, extra=audit_data)

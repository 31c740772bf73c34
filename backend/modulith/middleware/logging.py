"""
Modulith Backend — Request Logging Middleware
==============================================

What:  One `modulith.access` line per HTTP request.
How:   Times the rest of the stack and logs method, path, status, duration,
       request ID and client address (resolved the same way the rate
       limiter keys clients). The fields are also attached as `extra` for
       structured handlers.
When:  Runs inside RequestIDMiddleware, so the request ID is already set.

Log level by status:
    5xx → ERROR, 4xx → WARNING, everything else → INFO

A request whose handler raises still gets its line (status 500) before the
exception continues to the 500 handler. Request bodies are never logged.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from modulith.middleware.client import client_address
from modulith.middleware.request_id import request_id_var

logger = logging.getLogger("modulith.access")

# Polled by load balancers every few seconds
SKIPPED_PATHS = frozenset({"/health"})


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def log_request(request: Request, status: int, started: float) -> None:
    duration_ms = round((time.perf_counter() - started) * 1000, 2)
    fields = {
        "request_id": request_id_var.get(""),
        "method": request.method,
        "path": request.url.path,
        "status": status,
        "duration_ms": duration_ms,
        "client_ip": client_address(request),
    }
    logger.log(
        _level_for(status),
        "%(method)s %(path)s %(status)d %(duration_ms).1fms [%(request_id)s] from %(client_ip)s",
        fields,
        extra=fields,
    )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in SKIPPED_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            log_request(request, 500, started)
            raise

        log_request(request, response.status_code, started)
        return response

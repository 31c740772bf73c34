"""
Modulith Backend — Request ID Middleware
=========================================

What:  Correlation ID for every request, echoed as X-Request-ID.
How:   A client-supplied X-Request-ID is reused only when it is a short
       token (letters, digits, ".", "_", "-"; at most 64 chars), so it is
       safe to put in log lines and JSON bodies. Anything else is replaced
       by a fresh 8-char ID. The ID is stored in a ContextVar for loggers
       and in request.state, which the 500 handlers read because they run
       outside this middleware's context.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"

_VALID_REQUEST_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")


def resolve_request_id(supplied: Optional[str]) -> str:
    """Keep a well-formed client ID, otherwise mint a new one."""
    if supplied and _VALID_REQUEST_ID.fullmatch(supplied):
        return supplied
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response

"""
Modulith Backend — Request Timeout Middleware
==============================================

What:  Upper bound on how long a single request may run.
How:   Pure ASGI middleware. The downstream app runs under
       `asyncio.wait_for`; when the deadline passes, the request task is
       cancelled (which also cancels any pending store call) and a 504 is
       returned, provided the response has not started yet.

A timeout of 0 (REQUEST_TIMEOUT=0) disables the middleware.
"""

import asyncio
import logging
from typing import Optional

from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from modulith.config import settings
from modulith.exceptions import RequestTimeoutError

logger = logging.getLogger(__name__)


class RequestTimeoutMiddleware:
    """Cancels HTTP requests that outlive `timeout` seconds."""

    def __init__(self, app: ASGIApp, timeout: Optional[float] = None) -> None:
        self.app = app
        self.timeout = timeout if timeout is not None else settings.request_timeout

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not self.timeout:
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await asyncio.wait_for(self.app(scope, receive, send_wrapper), self.timeout)
        except asyncio.TimeoutError:
            # Headers already sent: nothing sensible left to tell the client
            if response_started:
                raise

            error = RequestTimeoutError(self.timeout, context={"path": scope.get("path")})
            logger.error("%s after %.2fs | Context: %s", error.message, self.timeout, error.context)
            response = JSONResponse(status_code=504, content={"error": error.message})
            await response(scope, receive, send)

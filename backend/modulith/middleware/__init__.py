# Middleware package init
"""
Modulith Backend — Middleware Package
======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Rate Limit] → [Request ID] → [Logging] → [Timeout] → [CORS] → Router

    1. Rate Limit FIRST: Reject over-limit clients before any processing
    2. Request ID: Generate correlation ID for logging and error bodies
    3. Logging: Log method, path, status and duration with the request ID
    4. Timeout: Cancel requests that outlive REQUEST_TIMEOUT (504)
    5. CORS: Applied by FastAPI's CORSMiddleware (handles preflight)
"""

from modulith.middleware.logging import RequestLoggingMiddleware
from modulith.middleware.rate_limit import RateLimitMiddleware
from modulith.middleware.request_id import RequestIDMiddleware, request_id_var
from modulith.middleware.timeout import RequestTimeoutMiddleware

__all__ = [
    "RateLimitMiddleware",
    "RequestIDMiddleware",
    "RequestLoggingMiddleware",
    "RequestTimeoutMiddleware",
    "request_id_var",
]

"""
Modulith Backend — Health Check Route
======================================

What:  GET /health for load balancers and container health checks.
How:   Pings the store with the app's Database client (SELECT 1).

Status levels:
    healthy    store reachable      → 200
    unhealthy  store unreachable    → 503
"""

import logging

from fastapi import APIRouter, Request, Response, status
from pydantic import BaseModel, Field

from modulith import __version__

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Store connectivity: connected, disconnected")


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Store unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request, response: Response) -> HealthResponse:
    """A service that cannot reach its store is reported as unhealthy."""
    connection = await request.app.state.database.check_connection()

    if not connection.connected:
        logger.warning("Health check: database unreachable: %s", connection.error)
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="unhealthy", version=__version__, database="disconnected")

    return HealthResponse(status="healthy", version=__version__, database="connected")

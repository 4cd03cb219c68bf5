"""
Evernote REST — Health Check Route
====================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Reports what the dispatcher has registered; no call is made to
       Evernote, so probes never consume API rate limit.

Status levels:
    - healthy:   store clients are registered and operations can be dispatched
    - degraded:  no store client registered (e.g. Evernote SDK missing)
"""

import logging
import time

from fastapi import APIRouter, Request

from evernote_rest import __version__
from evernote_rest.config import settings
from evernote_rest.schemas.responses import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request) -> HealthResponse:
    operations = request.app.state.dispatcher.registry.stats()
    overall = "healthy" if any(operations.values()) else "degraded"
    if overall != "healthy":
        logger.warning("Health check: no store operations registered")

    return HealthResponse(
        status=overall,
        version=__version__,
        environment=settings.evernote_environment.value,
        operations=operations,
        uptime_seconds=round(time.time() - _start_time, 2),
    )

# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: System endpoints (health, readiness and metrics).
Pure HTTP layer: no business logic.
"""

from datetime import datetime, timezone

from fastapi import APIRouter
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from shift_reconciler.core.config import settings
from shift_reconciler.core.dependencies import (
    get_history_repo,
    get_pending_repo,
    get_view_state_repo,
)

router = APIRouter(tags=["System"])


@router.get("/health")
def health_check():
    """Liveness probe for Docker and orchestration."""
    return {
        "status": "ok",
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "history_events": get_history_repo().count(),
        "pending_actions": get_pending_repo().count(),
        "view_states": get_view_state_repo().count(),
    }


@router.get("/health/ready")
def readiness_check():
    """Readiness probe: reports where collaborator calls are sent."""
    return {
        "status": "ready",
        "service": settings.SERVICE_NAME,
        "upstream": settings.UPSTREAM_API_URL,
    }


@router.get("/metrics")
def prometheus_metrics():
    """Expose Prometheus metrics in OpenMetrics format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

"""Health check endpoints for monitoring and orchestration probes."""
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from ...schemas.status import HealthResponse, ProbeResponse
from ...services.lifecycle import ServiceLifecycle, ServiceStatus
from ..dependencies import get_lifecycle

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("", response_model=HealthResponse, summary="Service health")
async def health_check(lifecycle: ServiceLifecycle = Depends(get_lifecycle)):
    """
    Status snapshot of the service.

    Always 200: the body's `status` field carries the lifecycle state
    ("running", "error", ...).
    """
    return lifecycle.get_status().to_dict()


@router.get("/live", response_model=ProbeResponse, summary="Liveness probe")
async def liveness():
    """
    Returns 200 while the process is serving HTTP.
    Does not look at the lifecycle state.
    """
    return {"status": "alive", "probe": "liveness"}


@router.get("/ready", summary="Readiness probe")
async def readiness(lifecycle: ServiceLifecycle = Depends(get_lifecycle)):
    """
    Returns:
    - 200: service is RUNNING
    - 503: any other state (reason carries the current status)
    """
    current = lifecycle.status
    if current is ServiceStatus.RUNNING:
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={"status": "ready", "probe": "readiness"},
        )

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "not_ready",
            "probe": "readiness",
            "reason": current.value,
        },
    )

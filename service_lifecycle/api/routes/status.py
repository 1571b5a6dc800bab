"""Versioned status endpoint."""
from fastapi import APIRouter, Depends

from ...schemas.status import StatusResponse
from ...services.lifecycle import ServiceLifecycle
from ..dependencies import get_lifecycle

router = APIRouter(tags=["Status"])


@router.get("/status", response_model=StatusResponse, summary="Service status")
async def service_status(lifecycle: ServiceLifecycle = Depends(get_lifecycle)):
    """Status snapshot plus collaborator connection state."""
    return {**lifecycle.get_status().to_dict(), **lifecycle.collaborators()}

"""FastAPI dependencies shared by the route modules."""
from fastapi import HTTPException, Request, status

from ..services.lifecycle import ServiceLifecycle


def get_lifecycle(request: Request) -> ServiceLifecycle:
    """Return the ServiceLifecycle attached to the app by create_service()."""
    lifecycle = getattr(request.app.state, "lifecycle", None)
    if lifecycle is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service lifecycle not attached to application",
        )
    return lifecycle

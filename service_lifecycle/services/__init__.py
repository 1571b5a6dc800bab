"""Lifecycle state machine and the collaborator interfaces it sequences."""

from .collaborators import Cache, Database
from .lifecycle import ServiceLifecycle, ServiceStatus, StatusSnapshot

__all__ = ["Cache", "Database", "ServiceLifecycle", "ServiceStatus", "StatusSnapshot"]

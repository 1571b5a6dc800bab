"""
Service lifecycle wrapper.

A ServiceLifecycle sequences a service process through
STOPPED -> STARTING -> RUNNING -> STOPPING -> STOPPED (or ERROR),
connecting its database/cache collaborators and serving /health and
/api/v1/status while running.
"""

from .core.config import DatabaseConfig, ServiceConfig
from .core.exceptions import (
    CollaboratorException,
    InvalidTransitionException,
    LifecycleException,
    ListenerException,
    TimeoutException,
)
from .services.collaborators import Cache, Database
from .services.lifecycle import ServiceLifecycle, ServiceStatus, StatusSnapshot

__version__ = "1.0.0"

__all__ = [
    "Cache",
    "CollaboratorException",
    "Database",
    "DatabaseConfig",
    "InvalidTransitionException",
    "LifecycleException",
    "ListenerException",
    "ServiceConfig",
    "ServiceLifecycle",
    "ServiceStatus",
    "StatusSnapshot",
    "TimeoutException",
]

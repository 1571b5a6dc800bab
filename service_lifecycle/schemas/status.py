"""Response models for the health and status endpoints."""
from typing import Literal

from .base import BaseModel


ServiceStatusValue = Literal["stopped", "starting", "running", "stopping", "error"]
ConnectionState = Literal["connected", "disconnected"]


class HealthResponse(BaseModel):
    """Status snapshot: service name, lifecycle status, uptime seconds, version."""
    service: str
    status: ServiceStatusValue
    uptime: float
    version: str


class StatusResponse(HealthResponse):
    """Status snapshot plus the connection state of each collaborator."""
    database: ConnectionState
    cache: ConnectionState


class ProbeResponse(BaseModel):
    status: str
    probe: str

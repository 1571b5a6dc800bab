from .status import HealthResponse, StatusResponse, ProbeResponse

__all__ = ["HealthResponse", "StatusResponse", "ProbeResponse"]

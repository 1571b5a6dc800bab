"""
service_lifecycle/core/exceptions.py
Custom exceptions for the service lifecycle
"""

from typing import Optional


class LifecycleException(Exception):
    """Base exception for all lifecycle errors"""

    def __init__(
        self,
        message: str,
        error_code: str = "UNKNOWN_ERROR",
        details: Optional[dict] = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert exception to dictionary for logging/response"""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }


# ============================================================================
# Transition Failures
# ============================================================================

class CollaboratorException(LifecycleException):
    """Database or cache connect/close failed"""

    def __init__(self, collaborator: str, operation: str, reason: str):
        super().__init__(
            message=f"{collaborator} {operation} failed: {reason}",
            error_code="COLLABORATOR_FAILED",
            details={"collaborator": collaborator, "operation": operation, "reason": reason}
        )
        self.collaborator = collaborator
        self.operation = operation


class ListenerException(LifecycleException):
    """HTTP listener bind or close failed"""

    def __init__(self, operation: str, reason: str, address: Optional[str] = None):
        super().__init__(
            message=f"Listener {operation} failed: {reason}",
            error_code="LISTENER_FAILED",
            details={"operation": operation, "reason": reason, "address": address}
        )
        self.operation = operation


class TimeoutException(LifecycleException):
    """A connect/close/bind call did not finish in time"""

    def __init__(self, target: str, operation: str, timeout_seconds: float):
        super().__init__(
            message=f"{target} {operation} timed out after {timeout_seconds} seconds",
            error_code="TIMEOUT",
            details={"target": target, "operation": operation, "timeout_seconds": timeout_seconds}
        )
        self.target = target
        self.operation = operation


# ============================================================================
# Caller Errors
# ============================================================================

class InvalidTransitionException(LifecycleException):
    """start()/stop() called from a state that does not allow it"""

    def __init__(self, operation: str, current_status: str, reason: Optional[str] = None):
        reason = reason or f"not allowed while {current_status}"
        super().__init__(
            message=f"Cannot {operation} service: {reason}",
            error_code="INVALID_TRANSITION",
            details={"operation": operation, "current_status": current_status}
        )
        self.operation = operation
        self.current_status = current_status


__all__ = [
    "LifecycleException",
    "CollaboratorException",
    "ListenerException",
    "TimeoutException",
    "InvalidTransitionException",
]

"""Error handling module for userbroker.

This module defines error codes, exception classes, and response models.

Error Response Format:
{
    "error": {
        "code": "NOT_FOUND",
        "message": "Instance not found"
    }
}

Usage:
    from userbroker.core.errors import InstanceNotFoundError

    raise InstanceNotFoundError(f"no such instance with ID {instance_id}")
"""

from enum import Enum

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Error codes."""

    ALREADY_EXISTS = "ALREADY_EXISTS"
    NOT_FOUND = "NOT_FOUND"
    INVALID_REQUEST = "INVALID_REQUEST"
    PROVISIONING_FAILURE = "PROVISIONING_FAILURE"
    UNAVAILABLE = "UNAVAILABLE"
    OPERATION_IN_PROGRESS = "OPERATION_IN_PROGRESS"


class ErrorDetail(BaseModel):
    """Error detail containing code and message."""

    code: str
    message: str


class ErrorResponse(BaseModel):
    """Error response format."""

    error: ErrorDetail


class BrokerError(Exception):
    """Base exception for userbroker.

    All broker-specific exceptions inherit from this class so the HTTP
    layer can translate them in one place.

    Attributes:
        code: The error code from ErrorCode enum
        message: Human-readable error message
        status_code: HTTP status code to return
    """

    def __init__(self, code: ErrorCode, message: str, status_code: int) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert exception to ErrorResponse model."""
        return ErrorResponse(
            error=ErrorDetail(code=self.code.value, message=self.message)
        )


class InstanceAlreadyExistsError(BrokerError):
    """409 Conflict - Instance id already registered."""

    def __init__(self, message: str = "Instance already exists") -> None:
        super().__init__(ErrorCode.ALREADY_EXISTS, message, 409)


class InstanceNotFoundError(BrokerError):
    """404 Not Found - Instance not found."""

    def __init__(self, message: str = "Instance not found") -> None:
        super().__init__(ErrorCode.NOT_FOUND, message, 404)


class InvalidRequestError(BrokerError):
    """400 Bad Request - Missing or malformed request fields."""

    def __init__(self, message: str = "Invalid request") -> None:
        super().__init__(ErrorCode.INVALID_REQUEST, message, 400)


class ProvisioningFailureError(BrokerError):
    """502 Bad Gateway - Backing resource creation, deletion or query failed."""

    def __init__(self, message: str = "Provisioning failed") -> None:
        super().__init__(ErrorCode.PROVISIONING_FAILURE, message, 502)


class UnavailableError(BrokerError):
    """503 Service Unavailable - Backing workload not ready."""

    def __init__(self, message: str = "Backing workload not ready") -> None:
        super().__init__(ErrorCode.UNAVAILABLE, message, 503)


class OperationInProgressError(BrokerError):
    """409 Conflict - Another operation holds this instance."""

    def __init__(self, message: str = "Operation in progress") -> None:
        super().__init__(ErrorCode.OPERATION_IN_PROGRESS, message, 409)

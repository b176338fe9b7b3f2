"""Error models and exception classes for dockwrap."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ErrorType(str, Enum):
    """Error type enumeration."""

    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    RESOURCE_CONFLICT = "resource_conflict"
    DECODE = "decode"
    DAEMON_STREAM = "daemon_stream"
    OPERATION_FAILED = "operation_failed"
    SERVICE_UNAVAILABLE = "service_unavailable"
    INTERNAL = "internal"


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: Optional[str] = Field(None, description="Field or resource the error refers to")
    message: str = Field(..., description="Human-readable error message")
    code: Optional[str] = Field(None, description="Machine-readable error code")


# Custom Exception Classes


class DockwrapException(Exception):
    """Base exception for dockwrap."""

    def __init__(
        self,
        message: str,
        error_type: ErrorType = ErrorType.INTERNAL,
        details: Optional[List[ErrorDetail]] = None,
    ):
        self.message = message
        self.error_type = error_type
        self.details = details or []
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a plain dict for logging or serialisation."""
        data: Dict[str, Any] = {
            "error": self.message,
            "error_type": self.error_type.value,
        }
        if self.details:
            data["details"] = [d.model_dump(exclude_none=True) for d in self.details]
        return data


class ValidationError(DockwrapException):
    """Invalid arguments or local preconditions."""

    def __init__(self, message: str = "Validation failed", **kwargs):
        super().__init__(message=message, error_type=ErrorType.VALIDATION, **kwargs)


class ResourceNotFoundError(DockwrapException):
    """A named engine object could not be resolved."""

    def __init__(self, resource: str, identifier: str, message: str = None, **kwargs):
        self.resource = resource
        self.identifier = identifier
        error_message = message or f"no such {resource}: {identifier}"
        super().__init__(
            message=error_message, error_type=ErrorType.RESOURCE_NOT_FOUND, **kwargs
        )


class ResourceConflictError(DockwrapException):
    """An engine object with the same name already exists."""

    def __init__(self, resource: str, identifier: str, message: str = None, **kwargs):
        self.resource = resource
        self.identifier = identifier
        error_message = (
            message or f'Conflict: the {resource} name "{identifier}" already exists'
        )
        super().__init__(
            message=error_message, error_type=ErrorType.RESOURCE_CONFLICT, **kwargs
        )


class StreamDecodeError(DockwrapException):
    """Malformed stdout/stderr framing."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message=message, error_type=ErrorType.DECODE, **kwargs)


class ProgressDecodeError(DockwrapException):
    """A pull/push/build progress line is not a JSON object."""

    def __init__(self, message: str, line: Optional[str] = None, **kwargs):
        self.line = line
        super().__init__(message=message, error_type=ErrorType.DECODE, **kwargs)


class DaemonStreamError(DockwrapException):
    """The daemon reported an error inside a multiplexed stream."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message=f"error from daemon in stream: {message}",
            error_type=ErrorType.DAEMON_STREAM,
            **kwargs,
        )


class OperationFailedError(DockwrapException):
    """A helper step run on behalf of the caller failed."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message=message, error_type=ErrorType.OPERATION_FAILED, **kwargs)


class ServiceUnavailableError(DockwrapException):
    """Service unavailable errors."""

    def __init__(self, service: str, message: str = None, **kwargs):
        error_message = message or f"{service} service is currently unavailable"
        super().__init__(
            message=error_message,
            error_type=ErrorType.SERVICE_UNAVAILABLE,
            **kwargs,
        )

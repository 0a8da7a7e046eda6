"""
Domain exception classes.

Each error carries an HTTP status and a machine-readable code so the API
handlers can render it without knowing the concrete type.
"""

from typing import Any, Dict, Optional


class GuestWatchError(Exception):
    """Base exception for all GuestWatch errors"""

    status_code = 500
    error_code = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if error_code is not None:
            self.error_code = error_code
        self.details = details or {}

    def __str__(self):
        return f"[{self.status_code}] {self.message}"


class ResourceNotFoundError(GuestWatchError):
    """Requested document does not exist"""

    status_code = 404
    error_code = "RESOURCE_NOT_FOUND"

    def __init__(self, resource: str, resource_id: Any, message: Optional[str] = None):
        super().__init__(
            message or f"{resource} with id '{resource_id}' not found",
            details={"resource": resource, "resource_id": str(resource_id)},
        )
        self.resource = resource
        self.resource_id = str(resource_id)


class ConflictError(GuestWatchError):
    """Unique constraint violation"""

    status_code = 409
    error_code = "RESOURCE_CONFLICT"

    def __init__(
        self,
        message: str = "Resource conflict",
        conflict_field: Optional[str] = None,
        conflict_value: Optional[Any] = None
    ):
        details = {}
        if conflict_field:
            details["field"] = conflict_field
        if conflict_value is not None:
            details["value"] = str(conflict_value)
        super().__init__(message, details=details)


class InvalidReferenceError(GuestWatchError):
    """Malformed document id in a request"""

    status_code = 400
    error_code = "INVALID_REFERENCE"

    def __init__(self, value: Any):
        super().__init__(f"'{value}' is not a valid id", details={"value": str(value)})


class DispatchSubmissionError(GuestWatchError):
    """A dispatch backend could not accept a submission"""

    error_code = "DISPATCH_SUBMISSION_FAILED"

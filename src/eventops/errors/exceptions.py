"""Custom exception classes for the event-operations service."""


class EventOpsError(Exception):
    """Base exception for eventops."""

    def __init__(self, code: str, message: str, details=None, status_code: int = 500):
        self.code = code
        self.message = message
        self.details = details
        self.status_code = status_code
        super().__init__(message)


class ValidationError(EventOpsError):
    """Request or row validation failure, raised before anything is persisted."""

    def __init__(self, message: str, details=None):
        super().__init__("VALIDATION_ERROR", message, details, status_code=400)


class NotFoundError(EventOpsError):
    """Resource not found."""

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            "NOT_FOUND",
            f"{resource} '{resource_id}' not found",
            status_code=404,
        )


class AuthenticationError(EventOpsError):
    """Missing or wrong shared-secret credential."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__("AUTHENTICATION_ERROR", message, status_code=401)


class ConflictError(EventOpsError):
    """Resource state conflict."""

    def __init__(self, message: str):
        super().__init__("CONFLICT", message, status_code=409)


class JobProcessingError(EventOpsError):
    """A job cannot make progress; the engine marks it FAILED with this message."""

    def __init__(self, message: str):
        super().__init__("JOB_PROCESSING_ERROR", message)

"""
Service Exceptions

Every failure the core surfaces is a ServiceError carrying a human readable
message, a machine readable error code and the HTTP status it maps to.
The exception handlers in main.py render these into the response envelope.

Kinds:
- UnauthenticatedError  401
- ForbiddenError        403
- NotFoundError         404
- ConflictError         409
- ValidationError       400
- PayloadTooLargeError  413
- PastDueError          400
- RateLimitExceededError 429
- InternalError         500
"""


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class UnauthenticatedError(ServiceError):
    """Missing, invalid or revoked credentials."""

    def __init__(self, message: str = "Authentication required.", error_code: str = "UNAUTHENTICATED"):
        super().__init__(message=message, error_code=error_code, status_code=401)


class ForbiddenError(ServiceError):
    """The authorization policy denied the action."""

    def __init__(
        self,
        message: str = "You are not allowed to perform this action.",
        error_code: str = "FORBIDDEN",
    ):
        super().__init__(message=message, error_code=error_code, status_code=403)


class NotFoundError(ServiceError):
    """An entity referenced by id does not exist."""

    def __init__(self, resource: str, resource_id: str | None = None):
        message = f"{resource} {resource_id} not found" if resource_id else f"{resource} not found"
        error_code = f"{resource.upper().replace(' ', '_')}_NOT_FOUND"
        super().__init__(message=message, error_code=error_code, status_code=404)


class ConflictError(ServiceError):
    """A uniqueness invariant would be violated."""

    def __init__(self, message: str, error_code: str = "CONFLICT"):
        super().__init__(message=message, error_code=error_code, status_code=409)


class AlreadyEnrolledError(ConflictError):
    def __init__(self):
        super().__init__(
            message="You are already enrolled in this course",
            error_code="ALREADY_ENROLLED",
        )


class DuplicatePendingError(ConflictError):
    def __init__(self):
        super().__init__(
            message="You already have a pending enrollment request for this course",
            error_code="DUPLICATE_PENDING",
        )


class AlreadyApprovedPendingError(ConflictError):
    def __init__(self):
        super().__init__(
            message="Your enrollment request for this course has already been approved",
            error_code="ALREADY_APPROVED_PENDING",
        )


class AlreadyGradedError(ConflictError):
    def __init__(self):
        super().__init__(
            message="This submission has already been graded and can no longer be replaced",
            error_code="ALREADY_GRADED",
        )


class ValidationError(ServiceError):
    """Malformed input, out-of-range values or an invalid state transition."""

    def __init__(self, message: str, error_code: str = "VALIDATION_ERROR"):
        super().__init__(message=message, error_code=error_code, status_code=400)


class InvalidTransitionError(ValidationError):
    def __init__(self, entity: str, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(
            message=f"Invalid {entity} transition: {current} -> {requested}",
            error_code="INVALID_TRANSITION",
        )


class PayloadTooLargeError(ServiceError):
    def __init__(self, file_name: str, limit_bytes: int):
        limit_mb = limit_bytes / (1024 * 1024)
        super().__init__(
            message=f"File '{file_name}' exceeds the {limit_mb:g} MB per-file limit",
            error_code="PAYLOAD_TOO_LARGE",
            status_code=413,
        )


class PastDueError(ServiceError):
    def __init__(self):
        super().__init__(
            message="The due date for this assignment has passed and late submissions are not allowed",
            error_code="PAST_DUE",
            status_code=400,
        )


class RateLimitExceededError(ServiceError):
    def __init__(self, retry_after_seconds: int):
        self.retry_after_seconds = retry_after_seconds
        minutes = max(1, retry_after_seconds // 60)
        super().__init__(
            message=f"Too many attempts. Please try again in {minutes} minute(s).",
            error_code="RATE_LIMIT_EXCEEDED",
            status_code=429,
        )


class InternalError(ServiceError):
    def __init__(self, message: str = "An unexpected error occurred."):
        super().__init__(message=message, error_code="INTERNAL_ERROR", status_code=500)

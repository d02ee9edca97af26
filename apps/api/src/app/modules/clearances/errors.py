"""
Clearance Errors

Typed errors raised by the clearance workflow. Each carries a stable
``error_code`` and the HTTP status the routers translate it to.
"""

from uuid import UUID


class ClearanceServiceError(Exception):
    """Base exception for clearance workflow errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class ClearanceValidationError(ClearanceServiceError):
    """Raised for malformed input, e.g. an early application without a reason."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            status_code=400,
        )


class ApplicationNotFoundError(ClearanceServiceError):
    """Raised when an application does not exist."""

    def __init__(self, application_id: UUID | None = None):
        message = (
            f"Clearance application {application_id} not found"
            if application_id
            else "No clearance application found"
        )
        super().__init__(
            message=message,
            error_code="APPLICATION_NOT_FOUND",
            status_code=404,
        )


class UnauthorizedReviewerError(ClearanceServiceError):
    """Raised when the actor's role does not match the approval slot."""

    def __init__(self, actor_role: str, authority_role: str):
        self.actor_role = actor_role
        self.authority_role = authority_role
        super().__init__(
            message=f"Role '{actor_role}' is not authorized to decide the '{authority_role}' approval.",
            error_code="UNAUTHORIZED",
            status_code=403,
        )


class ScopeMismatchError(ClearanceServiceError):
    """Raised when the student is outside the reviewer's department or college."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            error_code="SCOPE_MISMATCH",
            status_code=403,
        )


class ActiveApplicationExistsError(ClearanceServiceError):
    """Raised when the student already has a pending or in-progress application."""

    def __init__(self):
        super().__init__(
            message="You already have an active clearance application.",
            error_code="ACTIVE_APPLICATION_EXISTS",
            status_code=409,
        )


class AlreadyDecidedError(ClearanceServiceError):
    """Raised when an approval slot has already been decided."""

    def __init__(
        self,
        authority_role: str,
        message: str | None = None,
        error_code: str = "ALREADY_DECIDED",
    ):
        self.authority_role = authority_role
        super().__init__(
            message=message
            or f"This clearance has already been reviewed by {authority_role}.",
            error_code=error_code,
            status_code=409,
        )


class ApplicationClosedError(AlreadyDecidedError):
    """Raised when a decision arrives after the application reached a terminal status."""

    def __init__(self, authority_role: str, status: str):
        self.status = status
        super().__init__(
            authority_role,
            message=f"This clearance application is already {status}; no further decisions are accepted.",
            error_code="APPLICATION_CLOSED",
        )


class CertificateNotAvailableError(ClearanceServiceError):
    """Raised when a certificate is requested before the clearance is completed."""

    def __init__(self):
        super().__init__(
            message="No completed clearance found or clearance not yet approved.",
            error_code="CERTIFICATE_NOT_AVAILABLE",
            status_code=404,
        )


class SystemDisabledError(ClearanceServiceError):
    """Raised by the HTTP layer when the eligibility gate is closed."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            error_code="SYSTEM_DISABLED",
            status_code=503,
        )


class ClearanceInvariantError(ValueError):
    """Raised when a write would break an application invariant."""


class InvalidDecisionTransitionError(ClearanceInvariantError):
    """Raised when an approval record would leave a decided state."""

    def __init__(self, current: str, new: str):
        self.current = current
        self.new = new
        super().__init__(
            f"Invalid decision transition: {current} -> {new}. "
            "Only pending -> approved or pending -> rejected is allowed."
        )

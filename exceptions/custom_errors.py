class PlanningError(Exception):
    """Base class for expected business-rule violations.

    Engines raise these internally and convert them into a structured
    ``{"success": False, "error": code, "message": ...}`` result at the
    operation boundary. They never escape a public engine operation.
    """

    code = "PLANNING_ERROR"

    def __init__(self, message: str = "", **context):
        super().__init__(message)
        self.message = message
        self.context = context


class ValidationFailedError(PlanningError):
    """Raised when required fields are missing or malformed."""

    code = "VALIDATION_FAILED"


class NotFoundError(PlanningError):
    """Raised when a session, operator or setup does not exist."""

    code = "NOT_FOUND"


class InvalidStatusError(PlanningError):
    """Raised when a session state-machine precondition is violated."""

    code = "INVALID_STATUS"


class InvalidSessionStatusError(PlanningError):
    """Raised when an operator applies to a session that is not confirmed."""

    code = "INVALID_SESSION_STATUS"


class InvalidApplicationStatusError(PlanningError):
    """Raised when an application is not in the status the transition expects."""

    code = "INVALID_APPLICATION_STATUS"


class CapacityExceededError(PlanningError):
    """Raised when requested participants exceed the modules' capacity."""

    code = "CAPACITY_EXCEEDED"


class NoAvailabilityError(PlanningError):
    """Raised when no setup can be sold on the requested date."""

    code = "NO_AVAILABILITY"


class NoSetupAvailableError(PlanningError):
    """Raised when no free setup remains at confirmation time. Retryable."""

    code = "NO_SETUP_AVAILABLE"


class StaffingInvalidError(PlanningError):
    """Raised when a session cannot be confirmed because it is understaffed."""

    code = "STAFFING_INVALID"


class SessionNotVisibleError(PlanningError):
    """Raised when a session is hidden from the operator marketplace."""

    code = "SESSION_NOT_VISIBLE"


class AlreadyAppliedError(PlanningError):
    """Raised when an operator already holds a non-rejected application."""

    code = "ALREADY_APPLIED"


class AlreadyAcceptedError(PlanningError):
    """Raised when an operator is already accepted on the session."""

    code = "ALREADY_ACCEPTED"


class ApplicationNotFoundError(PlanningError):
    """Raised when no application exists for the (session, operator) pair."""

    code = "APPLICATION_NOT_FOUND"


class WriteConflictError(Exception):
    """Raised by a repository when a conditional write no longer holds.

    `field` names the condition that failed and `actual` its stored value.
    """

    def __init__(self, message: str = "", field=None, actual=None):
        super().__init__(message)
        self.field = field
        self.actual = actual


class MissingCollaboratorError(Exception):
    """Raised at construction time when a required collaborator is absent."""

    pass


class ProjectionStateError(Exception):
    """Raised when the in-memory projection is internally inconsistent."""

    pass


class FileReadingError(Exception):
    """Raised when there is an error reading a seed file."""

    pass


class FileContentError(Exception):
    """Raised when the content of a seed file is not as expected."""

    pass


# Mapping of error codes to HTTP status codes
CUSTOM_ERRORS = {
    ValidationFailedError.code: 400,
    NotFoundError.code: 404,
    InvalidStatusError.code: 409,
    InvalidSessionStatusError.code: 409,
    InvalidApplicationStatusError.code: 409,
    CapacityExceededError.code: 422,
    NoAvailabilityError.code: 409,
    NoSetupAvailableError.code: 409,
    StaffingInvalidError.code: 422,
    SessionNotVisibleError.code: 403,
    AlreadyAppliedError.code: 409,
    AlreadyAcceptedError.code: 409,
    ApplicationNotFoundError.code: 404,
}

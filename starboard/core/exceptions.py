"""
Custom Exceptions - Starboard Evaluation API
starboard/core/exceptions.py

Domain and repository exception classes. Every exception carries the HTTP
status and machine-readable code it is surfaced with at the request boundary.
"""


class StarboardException(Exception):
    """Base exception for evaluation-core errors."""

    status_code = 500
    error_code = "INTERNAL_ERROR"

    def __init__(self, message: str = "Unexpected server error"):
        self.message = message
        super().__init__(message)


class UnauthorizedException(StarboardException):
    """No authenticated user on the request."""

    status_code = 401
    error_code = "UNAUTHORIZED"

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class ForbiddenException(StarboardException):
    """Authenticated, but lacking the workspace membership or permission."""

    status_code = 403
    error_code = "FORBIDDEN"

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


class EntityNotFoundException(StarboardException):
    """Entity not found in database."""

    status_code = 404
    error_code = "NOT_FOUND"

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with ID {entity_id} not found")


class ValidationException(StarboardException):
    """Malformed or out-of-range input."""

    status_code = 400
    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: dict = None):
        self.details = details
        super().__init__(message)


class MissingScoreException(StarboardException):
    """A criterion of the step has no score in the submitted payload."""

    status_code = 400
    error_code = "MISSING_SCORE"

    def __init__(self, criterion_name: str):
        self.criterion_name = criterion_name
        super().__init__(f"Missing score for criterion: {criterion_name}")


class AlreadyScoredException(StarboardException):
    """The judge has already scored this submission at this step."""

    status_code = 409
    error_code = "ALREADY_SCORED"

    def __init__(self, message: str = "Judge has already scored this submission"):
        super().__init__(message)


class AlreadyBookedException(StarboardException):
    """The interview slot, or the submission, is already booked."""

    status_code = 409
    error_code = "ALREADY_BOOKED"

    def __init__(self, message: str = "This slot is already booked"):
        super().__init__(message)


class RepositoryException(StarboardException):
    """Base exception for repository operations."""

    status_code = 500
    error_code = "DATABASE_ERROR"


class DuplicateEntityException(RepositoryException):
    """Duplicate entity violation."""

    def __init__(self, message: str = "Entity already exists"):
        super().__init__(message)


class DatabaseConnectionException(RepositoryException):
    """Database connection failure."""

    def __init__(self, message: str = "Database connection failed"):
        super().__init__(message)


class ForeignKeyViolationException(RepositoryException):
    """Foreign key constraint violation."""

    def __init__(self, message: str = "Foreign key constraint violation"):
        super().__init__(message)

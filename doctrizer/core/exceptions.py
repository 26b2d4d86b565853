"""Custom application exceptions."""


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500):
        """Initialize exception with message and status code."""
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status_code=404)


class UnauthorizedException(AppException):
    """Unauthorized access exception."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, status_code=401)


class ForbiddenException(AppException):
    """Forbidden access exception."""

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message, status_code=403)


class BadRequestException(AppException):
    """Bad request exception."""

    def __init__(self, message: str = "Bad request"):
        super().__init__(message, status_code=400)


class ConflictException(AppException):
    """Conflict exception."""

    def __init__(self, message: str = "Conflict"):
        super().__init__(message, status_code=409)


class ValidationException(AppException):
    """Validation error exception."""

    def __init__(self, message: str = "Validation error"):
        super().__init__(message, status_code=422)


class AppointmentNotFoundException(NotFoundException):
    """Raised when an appointment is missing or belongs to someone else."""

    def __init__(self, message: str = "Appointment not found"):
        super().__init__(message)


class DoctorNotFoundException(NotFoundException):
    """Raised when no doctor row matches the request."""

    def __init__(self, message: str = "Doctor not found"):
        super().__init__(message)


class RoleRequiredException(ForbiddenException):
    """Raised when the caller's profile role does not allow the action."""

    def __init__(self, role: str):
        self.role = role
        super().__init__(f"This action requires a {role} account")

class SchedulingError(RuntimeError):
    """Base class for errors raised by the scheduling core."""
    pass


class ValidationError(SchedulingError, ValueError):
    """Raised when input is malformed (missing date/time, non-positive duration, bad timezone)."""
    pass


class NotFoundError(SchedulingError):
    """Raised when a referenced business or resource does not exist or is inactive."""
    pass


class DependencyError(SchedulingError):
    """Raised when a record store or delivery dependency fails (I/O errors, unreachable service)."""
    pass

"""
Domain Exceptions Module

Error taxonomy for the attendance core.
"""


class AttendanceError(Exception):
    """Base class for all errors raised by the attendance core."""


class InvalidArgumentError(AttendanceError, ValueError):
    """Raised for malformed input such as a month outside 1-12."""


class PersistenceError(AttendanceError):
    """
    Raised when a collaborator store fails to read or write.

    Attributes:
        operation: Short name of the failed store operation
        key: Document key involved (usually an ISO date), if any
    """

    def __init__(self, message: str, operation: str = "", key: str = ""):
        super().__init__(message)
        self.operation = operation
        self.key = key

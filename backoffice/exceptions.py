"""Domain errors raised by services and rendered by the API error handler"""


class DomainError(Exception):
    """Base class for errors that map onto a client-facing HTTP status"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DomainError, ValueError):
    """Raised when request data cannot be interpreted (e.g. a malformed amount)"""

    status_code = 400


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist"""

    status_code = 404


class ConflictError(DomainError):
    """Raised when a record changed underneath a read-modify-write"""

    status_code = 409

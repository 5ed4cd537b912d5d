"""Custom exceptions for the SICOEM OTM pipeline."""


class SicoemException(Exception):
    """Base exception for all SICOEM errors."""

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class ValidationError(SicoemException):
    """Raised when input validation fails."""

    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class NotFoundError(SicoemException):
    """Raised when a resource is not found."""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status_code=404)


class ImageDecodeError(SicoemException):
    """Raised when a captured image cannot be decoded."""

    def __init__(self, message: str = "Could not decode captured image"):
        super().__init__(message, status_code=400)


class PayloadError(SicoemException):
    """Raised when an upload payload cannot be built. Never retried."""

    def __init__(self, message: str = "Could not build upload payload"):
        super().__init__(message, status_code=400)


class RemoteStoreError(SicoemException):
    """Raised when the remote document store cannot be reached or rejects a request."""

    def __init__(self, message: str = "Remote document store unavailable"):
        super().__init__(message, status_code=502)


class StorageError(SicoemException):
    """Raised when storage operations fail."""

    def __init__(self, message: str = "Storage operation failed"):
        super().__init__(message, status_code=500)


class DatabaseError(SicoemException):
    """Raised when database operations fail."""

    def __init__(self, message: str = "Database operation failed"):
        super().__init__(message, status_code=500)

# Custom Exception Classes
class ValidationError(Exception):
    """Raised when input validation fails."""


class FileOperationError(Exception):
    """Raised when file operations fail."""


class NetworkError(Exception):
    """Raised when network-related errors occur."""


class ApiError(Exception):
    """Raised when the pulls endpoint returns an unusable response."""

    def __init__(self, message, status_code=None, response_text=None):
        self.status_code = status_code
        self.response_text = response_text
        super().__init__(message)


class RecordDecodeError(ApiError):
    """Raised when a page does not match the expected record shape."""

"""Custom exceptions for the receipt processor application."""


class ReceiptProcessorException(Exception):
    """Base exception for all receipt processor errors."""

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class ValidationError(ReceiptProcessorException):
    """Raised when a request body does not have the expected shape."""

    def __init__(self, message: str = "Invalid receipt", details=None):
        self.details = details
        super().__init__(message, status_code=400)


class NotFoundError(ReceiptProcessorException):
    """Raised when a receipt is not found."""

    def __init__(self, message: str = "Receipt not found"):
        super().__init__(message, status_code=404)


class StoreUnavailableError(ReceiptProcessorException):
    """Raised when the receipt store cannot be written to or read from."""

    def __init__(self, message: str = "Receipt store unavailable"):
        super().__init__(message, status_code=500)

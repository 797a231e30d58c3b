class AppError(Exception):
    """Base app error."""


class ValidationError(AppError):
    pass


class NotFoundError(AppError):
    pass


class InsufficientStockError(AppError):
    pass


class InsufficientFundsError(AppError):
    pass


class ApiError(AppError):
    """Raised when the accounting API cannot be reached or rejects a request."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code

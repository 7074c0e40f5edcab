"""Custom exception classes for the application.

Provides a hierarchy of exceptions for consistent error handling
across the application with appropriate HTTP status codes. Every
exception carries a user-facing message that the API returns verbatim.
"""

from decimal import Decimal


class AppException(Exception):
    """Base application exception.

    All custom exceptions should inherit from this class.
    """

    def __init__(self, message: str, status_code: int = 500) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class AuthenticationError(AppException):
    """Missing or invalid bearer token."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message=message, status_code=401)


class NotFoundError(AppException):
    """Resource not found exception.

    Raised when a requested resource does not exist. A custom message
    replaces the generic one when the caller needs a specific wording.
    """

    def __init__(
        self,
        resource: str,
        identifier: str,
        message: str | None = None,
    ) -> None:
        super().__init__(
            message=message or f"{resource} with id {identifier} not found",
            status_code=404,
        )
        self.resource = resource
        self.identifier = identifier


class PermissionDeniedError(AppException):
    """Authenticated caller is not allowed to perform the operation."""

    def __init__(self, message: str = "Not allowed") -> None:
        super().__init__(message=message, status_code=403)


class ConflictError(AppException):
    """Resource conflict exception.

    Raised when there's a conflict such as a duplicate entry.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message=message, status_code=409)


class ValidationError(AppException):
    """Input validation failed exception.

    Raised when input data fails validation rules. ``missing_fields``
    lists required service inputs that were omitted or blank.
    """

    def __init__(
        self,
        message: str,
        missing_fields: list[str] | None = None,
    ) -> None:
        super().__init__(message=message, status_code=400)
        self.missing_fields = missing_fields or []


class InsufficientFundsError(AppException):
    """Insufficient wallet balance exception.

    Raised when a debit cannot be applied because the wallet balance
    would become negative.
    """

    def __init__(
        self,
        wallet_id: str,
        required: Decimal,
        available: Decimal,
        message: str | None = None,
    ) -> None:
        super().__init__(
            message=message or (
                f"Insufficient funds in wallet {wallet_id}: "
                f"required {required}, available {available}"
            ),
            status_code=400,
        )
        self.wallet_id = wallet_id
        self.required = required
        self.available = available


class PinVerificationError(AppException):
    """Submitted withdrawal PIN or OTP does not match the stored secret."""

    def __init__(self, message: str = "Invalid withdrawal PIN") -> None:
        super().__init__(message=message, status_code=400)


class ProviderError(AppException):
    """External payment or telecom provider failure."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(message=message, status_code=502)
        self.provider = provider


class RateLimitError(AppException):
    """Too many attempts for a rate-limited operation."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, status_code=429)

from typing import Optional, Any


class MarketplaceError(Exception):
    """
    Base exception for the marketplace API.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class BadRequestError(MarketplaceError):
    """
    Raised when a request is well formed but breaks a business rule.
    """
    def __init__(self, message: str = "Bad request", details: Optional[Any] = None, code: str = "BAD_REQUEST"):
        super().__init__(message, code=code, status_code=400, details=details)


class ValidationError(BadRequestError):
    """
    Raised when input validation fails.
    """
    def __init__(self, message: str = "Validation failed", details: Optional[Any] = None):
        super().__init__(message, details=details, code="VALIDATION_ERROR")


class CastError(BadRequestError):
    """
    Raised when a path or body value cannot be cast to an ObjectId.
    """
    def __init__(self, path: str, value: Any):
        self.path = path
        self.value = value
        super().__init__(f"Invalid {path}: {value}", code="CAST_ERROR")


class AuthenticationError(MarketplaceError):
    """
    Raised when authentication fails.
    """
    def __init__(self, message: str = "Not authorized to access this route", details: Optional[Any] = None):
        super().__init__(message, code="AUTHENTICATION_FAILED", status_code=401, details=details)


class AuthorizationError(MarketplaceError):
    """
    Raised when an authenticated principal lacks permission.
    """
    def __init__(self, message: str = "Not authorized to perform this action", details: Optional[Any] = None):
        super().__init__(message, code="FORBIDDEN", status_code=403, details=details)


class ResourceNotFoundError(MarketplaceError):
    """
    Raised when a requested resource is not found.
    """
    def __init__(self, message: str = "Resource not found", details: Optional[Any] = None):
        super().__init__(message, code="NOT_FOUND", status_code=404, details=details)


class RateLimitError(MarketplaceError):
    def __init__(self, message: str = "Too many attempts. Please try again later.", details: Optional[Any] = None):
        super().__init__(message, code="RATE_LIMITED", status_code=429, details=details)


class ExternalServiceError(MarketplaceError):
    """
    Raised when an external service (e.g., Stripe, Cloudinary) fails.
    """
    def __init__(self, message: str = "External service error", details: Optional[Any] = None):
        super().__init__(message, code="EXTERNAL_SERVICE_ERROR", status_code=502, details=details)

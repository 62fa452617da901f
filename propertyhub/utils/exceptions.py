"""
Custom exception classes for the PropertyHub API.
Provides structured error handling with appropriate HTTP status codes.
"""

from typing import Any, Dict, Optional, List
from fastapi import HTTPException, status


class APIException(HTTPException):
    """
    Base for errors rendered into the `{success: false, ...}` envelope.

    `error_code` becomes the envelope `code`; `extra` keys are merged in as-is.
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None,
        extra: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code
        self.extra = extra or {}


class ValidationError(APIException):
    """Validation error exception."""

    def __init__(
        self,
        detail: str,
        field_errors: Optional[List[Dict[str, Any]]] = None
    ):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="VALIDATION_ERROR",
            extra={"details": field_errors} if field_errors else None
        )
        self.field_errors = field_errors or []


class MissingFieldsError(ValidationError):
    """Required fields absent or blank."""

    def __init__(self, fields: List[str]):
        super().__init__("Missing required fields")
        self.missing_fields = list(fields)
        self.extra["missingFields"] = self.missing_fields


class NotFoundError(APIException):
    """404 with a "{resource} not found" message."""

    def __init__(self, resource: str, resource_id: Optional[Any] = None):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found",
            error_code="NOT_FOUND"
        )
        self.resource = resource
        self.resource_id = resource_id


class UnauthorizedError(APIException):
    """Authentication required exception."""

    def __init__(self, detail: str = "Authentication required"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="UNAUTHORIZED",
            headers={"WWW-Authenticate": "Bearer"}
        )


class ForbiddenError(APIException):
    """Access forbidden exception."""

    def __init__(self, detail: str = "Access forbidden"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code="FORBIDDEN"
        )


class ConflictError(APIException):

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code="CONFLICT"
        )


class BadRequestError(APIException):

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="BAD_REQUEST"
        )


# Authentication specific exceptions
class InvalidCredentialsError(UnauthorizedError):
    """Invalid login credentials exception."""

    def __init__(self, detail: str = "Invalid email or password"):
        super().__init__(detail)


class TokenExpiredError(UnauthorizedError):
    """JWT token expired exception."""

    def __init__(self, detail: str = "Token has expired"):
        super().__init__(detail)


class InvalidTokenError(UnauthorizedError):
    """Invalid JWT token exception."""

    def __init__(self, detail: str = "Invalid token"):
        super().__init__(detail)


class InactiveUserError(ForbiddenError):
    """Inactive user account exception."""

    def __init__(self, detail: str = "User account is inactive"):
        super().__init__(detail)


class InsufficientPermissionsError(ForbiddenError):
    """Insufficient permissions exception."""

    def __init__(self, action: str):
        super().__init__(f"Insufficient permissions to {action}")


# Data conflicts
class DuplicateResourceError(ConflictError):
    """Unique field already taken, e.g. a developer slug or user email."""

    def __init__(self, resource: str, field: str):
        super().__init__(f"{resource} with this {field} already exists")


class RelatedRecordsError(ConflictError):
    """Delete refused because other rows still reference the target."""

    def __init__(self, resource: str, related: str):
        super().__init__(
            f"Cannot delete {resource.lower()}: it still has related {related}. "
            f"Remove or reassign them first."
        )


# File upload exceptions
class FileUploadError(BadRequestError):
    """Rejected image upload (type, extension, size or undecodable content)."""

    def __init__(self, detail: str):
        super().__init__(f"File upload error: {detail}")


# Rate limiting exceptions
class RateLimitExceededError(APIException):
    """Too many requests for a scope within the current window."""

    def __init__(self, detail: str = "Too many requests. Please try again later."):
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=detail,
            error_code="RATE_LIMIT_EXCEEDED"
        )

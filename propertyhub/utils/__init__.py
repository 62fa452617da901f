"""
Utility modules for the PropertyHub API.
"""

from .exceptions import (
    APIException,
    ValidationError,
    MissingFieldsError,
    NotFoundError,
    UnauthorizedError,
    ForbiddenError,
    ConflictError,
    BadRequestError,
    RateLimitExceededError,
)

# Dependencies are imported directly where needed to avoid circular imports

__all__ = [
    "APIException",
    "ValidationError",
    "MissingFieldsError",
    "NotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
    "ConflictError",
    "BadRequestError",
    "RateLimitExceededError",
]

"""
Error handling service for consistent error response formatting and logging.
Every failure leaves the API as a `{success: false, message, ...}` envelope.
"""

from typing import Dict, Any, Optional, List
from fastapi import Request
from starlette.exceptions import HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from propertyhub.config import settings
from propertyhub.utils.exceptions import APIException
import logging
import uuid

logger = logging.getLogger(__name__)

# SQLSTATE codes for integrity violations
NOT_NULL_VIOLATION = "23502"
FOREIGN_KEY_VIOLATION = "23503"
UNIQUE_VIOLATION = "23505"


class ErrorHandlerService:
    """
    Service for handling and formatting errors consistently across the application.
    Provides structured error responses with appropriate logging and error codes.
    """

    @staticmethod
    def format_error_response(
        error_code: str,
        message: str,
        request_id: Optional[str] = None,
        error_detail: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Format error response in the shared envelope.

        Args:
            error_code: Error code identifier
            message: Human-readable error message
            request_id: Optional request identifier for tracking
            error_detail: Internal detail, only exposed in development
            extra: Additional envelope fields such as missingFields

        Returns:
            Formatted error response dictionary
        """
        response: Dict[str, Any] = {
            "success": False,
            "message": message,
            "code": error_code,
        }

        if request_id:
            response["requestId"] = request_id

        if extra:
            response.update(extra)

        if error_detail and settings.is_development:
            response["error"] = error_detail

        return response

    @staticmethod
    def handle_api_exception(
        exception: APIException,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Handle custom API exceptions with structured response.

        Args:
            exception: API exception instance
            request: Optional FastAPI request object

        Returns:
            JSON response with formatted error
        """
        request_id = ErrorHandlerService._get_request_id(request)

        logger.warning(
            f"API Exception [{request_id}]: {exception.error_code} - {exception.detail}",
            extra={
                "error_code": exception.error_code,
                "status_code": exception.status_code,
                "request_id": request_id,
                "path": request.url.path if request else None
            }
        )

        error_response = ErrorHandlerService.format_error_response(
            error_code=exception.error_code or "API_ERROR",
            message=exception.detail,
            request_id=request_id,
            extra=exception.extra
        )

        return JSONResponse(
            status_code=exception.status_code,
            content=error_response,
            headers=exception.headers
        )

    @staticmethod
    def handle_validation_error(
        exception: Any,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Handle request and pydantic validation errors.

        Fields reported by pydantic as missing are listed under `missingFields`,
        matching the envelope raised by explicit required-field checks.

        Args:
            exception: RequestValidationError or pydantic ValidationError
            request: Optional FastAPI request object

        Returns:
            JSON response with validation error details
        """
        request_id = ErrorHandlerService._get_request_id(request)

        validation_details: List[Dict[str, Any]] = []
        missing_fields: List[str] = []
        for error in exception.errors():
            location = [str(loc) for loc in error["loc"] if loc not in ("body", "query", "path", "form")]
            field_path = ".".join(location)
            if location and ErrorHandlerService._is_missing(error):
                missing_fields.append(location[-1])
            validation_details.append({
                "field": field_path,
                "message": error["msg"],
                "type": error["type"],
            })

        logger.warning(
            f"Validation Error [{request_id}]: {len(validation_details)} field errors",
            extra={
                "error_count": len(validation_details),
                "request_id": request_id,
                "path": request.url.path if request else None,
            }
        )

        extra: Dict[str, Any] = {"details": validation_details}
        if missing_fields:
            extra["missingFields"] = missing_fields
            message = "Missing required fields"
        else:
            message = "Request validation failed"

        error_response = ErrorHandlerService.format_error_response(
            error_code="VALIDATION_ERROR",
            message=message,
            request_id=request_id,
            extra=extra
        )

        return JSONResponse(status_code=400, content=error_response)

    @staticmethod
    def handle_database_error(
        exception: SQLAlchemyError,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Handle database errors, mapping recognised constraint violations to 4xx.

        Args:
            exception: SQLAlchemy error
            request: Optional FastAPI request object

        Returns:
            JSON response with database error information
        """
        request_id = ErrorHandlerService._get_request_id(request)

        code = ErrorHandlerService.get_constraint_code(exception) if isinstance(exception, IntegrityError) else None
        if code == UNIQUE_VIOLATION:
            error_code, message, status_code = "CONFLICT", "A record with this value already exists", 409
        elif code == FOREIGN_KEY_VIOLATION:
            error_code = "CONFLICT"
            message = "Operation refused: related records exist or the referenced record is missing"
            status_code = 409
        elif code == NOT_NULL_VIOLATION:
            error_code, message, status_code = "VALIDATION_ERROR", "A required field is missing", 400
        else:
            error_code, message, status_code = "DATABASE_ERROR", "Database operation failed", 500

        log = logger.warning if status_code < 500 else logger.error
        log(
            f"Database Error [{request_id}]: {error_code} - {str(exception)}",
            extra={
                "error_code": error_code,
                "request_id": request_id,
                "path": request.url.path if request else None,
                "exception_type": type(exception).__name__
            },
            exc_info=status_code >= 500
        )

        error_response = ErrorHandlerService.format_error_response(
            error_code=error_code,
            message=message,
            request_id=request_id,
            error_detail=str(getattr(exception, "orig", None) or exception)
        )

        return JSONResponse(status_code=status_code, content=error_response)

    @staticmethod
    def handle_http_exception(
        exception: HTTPException,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Handle FastAPI and Starlette HTTP exceptions (404 routes, 405 methods ...).

        Args:
            exception: HTTP exception
            request: Optional FastAPI request object

        Returns:
            JSON response with HTTP error information
        """
        request_id = ErrorHandlerService._get_request_id(request)

        logger.warning(
            f"HTTP Exception [{request_id}]: {exception.status_code} - {exception.detail}",
            extra={
                "status_code": exception.status_code,
                "request_id": request_id,
                "path": request.url.path if request else None
            }
        )

        error_response = ErrorHandlerService.format_error_response(
            error_code=f"HTTP_{exception.status_code}",
            message=str(exception.detail),
            request_id=request_id
        )

        return JSONResponse(
            status_code=exception.status_code,
            content=error_response,
            headers=getattr(exception, "headers", None)
        )

    @staticmethod
    def handle_unexpected_error(
        exception: Exception,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Handle unexpected errors with secure error responses.

        Args:
            exception: Unexpected exception
            request: Optional FastAPI request object

        Returns:
            JSON response with generic error message
        """
        request_id = ErrorHandlerService._get_request_id(request)

        logger.error(
            f"Unexpected Error [{request_id}]: {type(exception).__name__} - {str(exception)}",
            extra={
                "request_id": request_id,
                "path": request.url.path if request else None,
                "exception_type": type(exception).__name__,
            },
            exc_info=True
        )

        error_response = ErrorHandlerService.format_error_response(
            error_code="INTERNAL_SERVER_ERROR",
            message="An unexpected error occurred. Please try again later.",
            request_id=request_id,
            error_detail=str(exception)
        )

        return JSONResponse(status_code=500, content=error_response)

    @staticmethod
    def get_constraint_code(exception: IntegrityError) -> Optional[str]:
        """
        Extract the SQLSTATE of an integrity violation.

        asyncpg errors expose `sqlstate`/`pgcode` on the wrapped DBAPI error.
        SQLite has no SQLSTATE, so its message text is classified instead.

        Args:
            exception: SQLAlchemy integrity error

        Returns:
            One of the *_VIOLATION codes, another SQLSTATE, or None
        """
        orig = getattr(exception, "orig", None)
        for source in (orig, getattr(orig, "__cause__", None)):
            code = getattr(source, "sqlstate", None) or getattr(source, "pgcode", None)
            if code:
                return str(code)

        error_msg = str(orig or exception).lower()
        if "unique" in error_msg:
            return UNIQUE_VIOLATION
        if "foreign key" in error_msg:
            return FOREIGN_KEY_VIOLATION
        if "not null" in error_msg:
            return NOT_NULL_VIOLATION
        return None

    @staticmethod
    def _is_missing(error: Dict[str, Any]) -> bool:
        """Absent fields, and required strings submitted blank."""
        if error["type"] == "missing":
            return True
        value = error.get("input")
        return error["type"] == "string_too_short" and isinstance(value, str) and not value.strip()

    @staticmethod
    def _get_request_id(request: Optional[Request]) -> str:
        """Reuse the middleware request ID, or generate one."""
        if request is not None:
            request_id = getattr(request.state, "request_id", None)
            if request_id:
                return request_id
        return str(uuid.uuid4())[:8]

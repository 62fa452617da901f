"""
FastAPI application entry point.
Main application setup and configuration.
"""

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from propertyhub.config import settings
from propertyhub.database import check_database_connection, close_db_connection, create_tables
from propertyhub.middleware import ValidationMiddleware
from propertyhub.routers import (
    blog_router,
    cache_router,
    contact_router,
    developers_router,
    document_requests_router,
    inquiries_router,
    messages_router,
    offplan_inquiries_router,
    properties_router,
    team_router,
    testimonials_router,
    users_router,
)
from propertyhub.services.error_handler import ErrorHandlerService
from propertyhub.utils.exceptions import APIException

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")

    if settings.is_development or settings.is_testing:
        await create_tables()

    if not await check_database_connection():
        logger.error("Failed to connect to database on startup")

    yield

    logger.info("Shutting down application")
    await close_db_connection()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Real-estate listings and lead-capture API.

    ## Features

    * **Property Listings**: Search with filters, featured listings and detail pages with similar properties
    * **Developers and Agents**: Developer pages with their properties
    * **Blog, Team and Testimonials**: Site content managed from the back office
    * **Lead Capture**: Contact form, property inquiries and off-plan inquiries
    * **Authentication**: JWT bearer tokens with user, agent and admin roles

    ## Caching and Rate Limiting

    Public read routes are cached for a few minutes (cached responses carry `fromCache: true`)
    and rate limited per client IP over a 15 minute window.
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {"name": "Properties", "description": "Property search and management"},
        {"name": "Developers", "description": "Developer pages and management"},
        {"name": "Blog", "description": "Blog posts, tags and categories"},
        {"name": "Users", "description": "Sign-up, login, password reset and user administration"},
        {"name": "Health", "description": "Service information and health checks"},
    ],
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Processing-Time"],
)

# Add validation middleware
app.add_middleware(
    ValidationMiddleware,
    max_request_size=settings.max_request_size,
    enable_request_logging=settings.debug,
)

# Include API routers
for router in (
    properties_router,
    developers_router,
    blog_router,
    contact_router,
    messages_router,
    inquiries_router,
    offplan_inquiries_router,
    document_requests_router,
    team_router,
    testimonials_router,
    users_router,
    cache_router,
):
    app.include_router(router, prefix=settings.api_prefix)

# Uploaded images
app.mount("/uploads", StaticFiles(directory=settings.upload_dir, check_dir=False), name="uploads")


# Global exception handlers using ErrorHandlerService
@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    """Handle custom API exceptions with structured error responses."""
    return ErrorHandlerService.handle_api_exception(exc, request)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle FastAPI request validation errors with detailed field information."""
    return ErrorHandlerService.handle_validation_error(exc, request)


@app.exception_handler(PydanticValidationError)
async def pydantic_validation_exception_handler(request: Request, exc: PydanticValidationError):
    """Handle Pydantic validation errors raised while parsing form payloads."""
    return ErrorHandlerService.handle_validation_error(exc, request)


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    """Handle database errors with appropriate error responses."""
    return ErrorHandlerService.handle_database_error(exc, request)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions (404 routes, 405 methods) with structured error responses."""
    return ErrorHandlerService.handle_http_exception(exc, request)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions with secure error responses."""
    return ErrorHandlerService.handle_unexpected_error(exc, request)


@app.get("/", tags=["Health"])
async def root():
    """
    Root endpoint providing basic API information.
    """
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.environment,
        "status": "healthy",
        "documentation": {
            "swagger_ui": "/docs",
            "redoc": "/redoc",
            "openapi_json": "/openapi.json"
        },
        "api_prefix": settings.api_prefix
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint with database connectivity test.
    Used by container health checks and load balancers.
    """
    if not await check_database_connection():
        raise HTTPException(status_code=503, detail="Database connection failed")

    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "database": "connected"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "propertyhub.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )

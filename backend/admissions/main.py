"""
Class Admissions - FastAPI Application

Main entry point for the backend API.
Provides endpoints for parsing pasted applications, batch review,
application and class management, staff administration and reports.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from admissions.config.settings import settings
from admissions.infrastructure.exceptions import (
    AdmissionsError,
    AuthorizationError,
    DuplicateError,
    InvalidTransitionError,
    NotFoundError,
    ParseError,
    ValidationError,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    # Startup
    logger.info(f"Admissions Backend starting in {settings.environment} mode...")

    from admissions.infrastructure.db.database import check_connection, reset_client
    try:
        await check_connection()
        logger.info("Supabase connection verified")
    except AdmissionsError as e:
        logger.warning(f"Supabase connectivity check failed: {e}")

    yield

    # Shutdown
    reset_client()
    logger.info("Admissions Backend shutting down...")


app = FastAPI(
    title="Class Admissions",
    description="Admissions backend: parse, validate, review and store class applications",
    version="1.0.0",
    lifespan=lifespan,
    debug=settings.debug,
)

# CORS configuration from Settings
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Exception Handlers
# ============================================================================

@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    """Handle validation errors."""
    return JSONResponse(
        status_code=400,
        content=exc.to_dict(),
    )


@app.exception_handler(AuthorizationError)
async def authorization_error_handler(request: Request, exc: AuthorizationError):
    return JSONResponse(
        status_code=403,
        content=exc.to_dict(),
    )


@app.exception_handler(NotFoundError)
async def not_found_error_handler(request: Request, exc: NotFoundError):
    """Handle not found errors."""
    return JSONResponse(
        status_code=404,
        content=exc.to_dict(),
    )


@app.exception_handler(DuplicateError)
async def duplicate_error_handler(request: Request, exc: DuplicateError):
    return JSONResponse(
        status_code=409,
        content=exc.to_dict(),
    )


@app.exception_handler(InvalidTransitionError)
async def invalid_transition_handler(request: Request, exc: InvalidTransitionError):
    """Handle review items moved out of a terminal state."""
    return JSONResponse(
        status_code=409,
        content=exc.to_dict(),
    )


@app.exception_handler(ParseError)
async def parse_error_handler(request: Request, exc: ParseError):
    """Handle pasted text that yields no application."""
    return JSONResponse(
        status_code=422,
        content=exc.to_dict(),
    )


@app.exception_handler(AdmissionsError)
async def general_error_handler(request: Request, exc: AdmissionsError):
    """Handle all other application errors."""
    logger.error(f"Unhandled {exc.__class__.__name__} on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=500,
        content=exc.to_dict(),
    )


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "class-admissions"}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Class Admissions API",
        "version": "1.0.0",
        "docs": "/docs",
    }


# ============================================================================
# Import and register routers
# ============================================================================

from admissions.api.routes import (  # noqa: E402
    admin,
    applications,
    classes,
    parsing,
    preferences,
    reports,
    review,
)

app.include_router(parsing.router)
app.include_router(review.router)
app.include_router(applications.router)
app.include_router(classes.router)
app.include_router(admin.router)
app.include_router(preferences.router)
app.include_router(reports.router)

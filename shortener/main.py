"""
FastAPI Application Entry Point

This module initializes the FastAPI application and configures:
- API routes
- Middleware (logging, CORS)
- Error rendering: every error body is {"error": "<message>"}
- Startup/shutdown of the expiration sweeper

Design Decisions:
- Clean separation: Routes, middleware, and app config are separate
- CORS is fully open: third-party pages call POST /shorten cross-origin
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shortener.api import endpoints
from shortener.api.deps import OWNER_HEADER
from shortener.core.logging_config import setup_logging
from shortener.core.setting import settings
from shortener.core.sweeper_manager import start_sweeper, stop_sweeper
from shortener.middleware.logging import add_logging_middleware

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="URL Shortener Service",
    description="Short links with custom codes, per-owner quotas and expiry",
    version="1.0.0",
    docs_url="/docs",  # Swagger UI documentation
    redoc_url="/redoc",  # ReDoc documentation
)

add_logging_middleware(app)

# No credentials: browsers only honour a literal "*" origin without them
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[OWNER_HEADER],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors as {"error": ...}."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Render request validation failures as 400 {"error": ...}.

    Only the first problem is reported; a missing URL gets the same
    message the form shows.
    """
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        if first.get("type") == "missing" and location == "url":
            message = "URL is required"
        elif location:
            message = f"{location}: {first.get('msg')}"
        else:
            message = str(first.get("msg"))

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": message}
    )


# Health endpoints defined before router to match before catch-all route
@app.get("/", tags=["Health"])
async def root():
    """
    Root endpoint, also the fallback target of unresolvable short codes.

    Returns:
        Simple JSON response indicating service is running
    """
    return {
        "message": "URL Shortener Service",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint for monitoring.

    Returns:
        Health status of the service
    """
    return {"status": "healthy"}


app.include_router(endpoints.router, tags=["URL Shortener"])


@app.on_event("startup")
async def startup_event():
    """Start background services."""
    logger.info(
        f"Starting URL shortener ({settings.ENV_SETTING.value}), "
        f"expiration strategy {settings.EXPIRATION_STRATEGY.value}"
    )
    await start_sweeper()


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    await stop_sweeper()

"""Main FastAPI application module.

This module builds the FastAPI application, registers all route handlers and
renders domain errors as ``{"kind": ..., "message": ...}`` bodies.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from core.database import Database
from core.exceptions import InternalError, SchoolPortalError, ValidationError
from core.logging_config import setup_logging
from config import (
    API_HOST,
    API_PORT,
    CORS_ALLOWED_ORIGINS,
    DATABASE_URL,
)
from api.routes import approvals, auth, users

logger = logging.getLogger(__name__)


def _error_response(error: SchoolPortalError) -> JSONResponse:
    return JSONResponse(
        status_code=error.status_code,
        content={"kind": error.kind, "message": error.message},
    )


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        # Drop the leading 'body' / 'query' part of the location
        loc = ".".join(str(p) for p in error["loc"][1:])
        parts.append(f"{loc}: {error['msg']}" if loc else error["msg"])
    return "; ".join(parts)


def create_app(database: Optional[Database] = None) -> FastAPI:
    """Build the application bound to ``database``.

    Args:
        database: Database handle; one for DATABASE_URL is created if omitted.

    Returns:
        The configured FastAPI application.
    """
    application = FastAPI(
        title="School Portal API",
        description="Backend API for accounts, approvals and role-based access.",
        version="1.0.0",
    )
    application.state.database = database or Database(DATABASE_URL)

    # Configure CORS middleware
    application.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register route handlers
    application.include_router(auth.router)
    application.include_router(approvals.router)
    application.include_router(users.router)

    @application.exception_handler(SchoolPortalError)
    async def handle_domain_error(request: Request, exc: SchoolPortalError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return _error_response(exc)

    @application.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _error_response(ValidationError(_format_validation_errors(exc)))

    @application.exception_handler(SQLAlchemyError)
    async def handle_storage_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.error("%s %s storage error: %s", request.method, request.url.path, exc)
        return _error_response(InternalError())

    @application.on_event("startup")
    def startup_tasks() -> None:
        """Create tables for the bound database."""
        application.state.database.init_db()

    @application.on_event("shutdown")
    def shutdown_tasks() -> None:
        """Release the database connections."""
        application.state.database.dispose()

    @application.get("/", summary="API root", tags=["Info"])
    def root() -> dict:
        """API root, returns API information and documentation links."""
        return {
            "name": "School Portal API",
            "version": "1.0.0",
            "docs": {
                "swagger": "/docs",
                "redoc": "/redoc",
            },
            "health": "/api/health",
        }

    @application.get("/api/health", summary="Health check", tags=["Health"])
    def health() -> dict:
        """Health check endpoint.

        Returns:
            Dictionary with status "ok".
        """
        return {"status": "ok"}

    return application


# Setup logging
setup_logging()

app = create_app()


# --- Startup code for direct execution ---
if __name__ == "__main__":
    import uvicorn

    server_url = f"http://{API_HOST}:{API_PORT}"
    print(f"🌐 Service address: {server_url}")
    print(f"📚 API docs: {server_url}/docs")
    print()

    # reload=True enables auto-reload on code changes
    uvicorn.run("app:app", host=API_HOST, port=API_PORT, reload=True)

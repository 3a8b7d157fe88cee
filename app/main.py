"""FastAPI application entry point.

Main application setup with middleware, routing, exception mapping and
lifecycle management.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import admin_router, templates_router, users_router
from app.api.schemas import ErrorResponse
from app.core.config import Settings, get_settings
from app.core.factory import ComponentFactory
from app.core.logging_config import setup_logging
from app.core.permissions import AccessPolicy
from app.db.session import close_db, init_db
from app.interfaces.template import (
    DataValidationError,
    StateTransitionError,
    TemplateStructureError,
)

# Initialize logging before importing other modules
setup_logging()
logger = logging.getLogger(__name__)

# StateTransitionError.reason -> HTTP status
TRANSITION_STATUS_CODES = {
    "unauthorized": status.HTTP_403_FORBIDDEN,
    "not_found": status.HTTP_404_NOT_FOUND,
    "invalid_state": status.HTTP_409_CONFLICT,
    "invalid_reason": status.HTTP_422_UNPROCESSABLE_ENTITY,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager.

    Handles startup and shutdown events for proper resource management.
    """
    settings: Settings = app.state.settings
    factory: ComponentFactory = app.state.factory

    # Startup
    logger.info("Starting Template Marketplace API...")

    if factory.uses_database:
        try:
            logger.info("Initializing database...")
            await init_db(settings)
            logger.info("Database initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize database: {e}", exc_info=True)
            raise
    else:
        logger.info(f"Using '{settings.repository_type}' repositories; skipping database setup")

    yield

    # Shutdown
    logger.info("Shutting down Template Marketplace API...")

    if factory.uses_database:
        try:
            await close_db()
            logger.info("Database connections closed")
        except Exception as e:
            logger.error(f"Error closing database: {e}", exc_info=True)


def create_app(
    settings: Settings | None = None,
    access_policy: AccessPolicy | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings. If None, loads from environment.
        access_policy: Optional role policy. If None, uses the default roles.

    Returns:
        Configured FastAPI application instance.
    """
    try:
        settings = settings or get_settings()

        app = FastAPI(
            title="Template Marketplace",
            description="Fill-in document templates with placeholder validation and moderation",
            version="0.1.0",
            lifespan=lifespan,
            docs_url="/docs",
            redoc_url="/redoc",
        )

        # Application-scoped components
        app.state.settings = settings
        app.state.factory = ComponentFactory(settings)
        app.state.access_policy = access_policy or AccessPolicy()

        # CORS middleware
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],  # Configure appropriately for production
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        # Include routers
        for router in (users_router, templates_router, admin_router):
            app.include_router(router)
            logger.info(f"Registered router {router.prefix}")

        # Health check endpoint
        @app.get("/health", tags=["health"])
        async def health_check():
            """Health check endpoint for load balancers and monitoring."""
            return {
                "status": "healthy",
                "service": "template-marketplace-api",
                "version": "0.1.0",
            }

        # Exception handlers
        @app.exception_handler(TemplateStructureError)
        async def structure_exception_handler(request: Request, exc: TemplateStructureError):
            logger.info(f"Template structure rejected: {exc}")
            return JSONResponse(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                content=ErrorResponse(
                    detail=str(exc),
                    error_code="TEMPLATE_STRUCTURE_INVALID",
                    errors=list(exc.errors),
                ).model_dump(mode="json", exclude_none=True),
            )

        @app.exception_handler(DataValidationError)
        async def data_exception_handler(request: Request, exc: DataValidationError):
            logger.info(f"User data rejected: {exc}")
            return JSONResponse(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                content=ErrorResponse(
                    detail=str(exc),
                    error_code="USER_DATA_INVALID",
                    errors=list(exc.errors),
                ).model_dump(mode="json", exclude_none=True),
            )

        @app.exception_handler(StateTransitionError)
        async def transition_exception_handler(request: Request, exc: StateTransitionError):
            return JSONResponse(
                status_code=TRANSITION_STATUS_CODES.get(exc.reason, status.HTTP_409_CONFLICT),
                content=ErrorResponse(
                    detail=str(exc),
                    error_code=exc.reason.upper(),
                ).model_dump(mode="json", exclude_none=True),
            )

        @app.exception_handler(RequestValidationError)
        async def validation_exception_handler(request: Request, exc: RequestValidationError):
            """Handle Pydantic validation errors."""
            logger.warning(f"Validation error: {exc.errors()}")
            return JSONResponse(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                content={
                    "detail": "Validation error",
                    "errors": [
                        {
                            "field": ".".join(str(part) for part in error["loc"]),
                            "message": error["msg"],
                        }
                        for error in exc.errors()
                    ],
                },
            )

        @app.exception_handler(Exception)
        async def general_exception_handler(request: Request, exc: Exception):
            """Handle uncaught exceptions."""
            logger.error(f"Unhandled exception: {exc}", exc_info=True)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=ErrorResponse(
                    detail="Internal server error",
                    error_code="INTERNAL_ERROR",
                ).model_dump(exclude_none=True),
            )

        logger.info("FastAPI application created successfully")
        return app

    except Exception as e:
        logger.error(f"Failed to create FastAPI app: {e}", exc_info=True)
        raise


# Create the app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    logger.info("Starting uvicorn server on port 8000...")
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )

"""
ProjectDesk - Main Application Entry Point

Milestone lifecycle backend: projects, tasks and milestones with derived
status, reviewer approval and dependency-safe deletion.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.core.exceptions import AppError, InfrastructureError
from app.core.logger import logger
from app.models.common import error_body

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    settings = get_settings()
    logger.info(f"Starting ProjectDesk in {settings.ENVIRONMENT} mode...")

    from app.infrastructure.local.database import dispose_engine, init_db

    # Initialize database if needed
    if settings.ENVIRONMENT == "local":
        await init_db()

    # Start background scheduler for periodic jobs
    from app.api.deps import get_milestone_repository, get_task_repository
    from app.services.background_scheduler import BackgroundScheduler

    scheduler = BackgroundScheduler(
        milestone_repo=get_milestone_repository(),
        task_repo=get_task_repository(),
    )
    await scheduler.start()

    yield

    # Shutdown
    logger.info("Shutting down ProjectDesk...")
    await scheduler.stop()
    await dispose_engine()


def _http_error_response(status_code: int, detail, headers=None) -> JSONResponse:
    if isinstance(detail, dict):
        body = error_body(str(detail.get("message", "")), detail.get("errors"))
    else:
        body = error_body(str(detail))
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=headers)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="ProjectDesk",
        description="Project management backend with a milestone lifecycle engine",
        version=VERSION,
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    # Error envelope: {"success": false, "message": ..., "errors"?: ...}
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _http_error_response(exc.status_code, exc.detail, getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content=jsonable_encoder(error_body("Invalid request", exc.errors())),
        )

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        from app.api.errors import to_http_exception

        http_exc = to_http_exception(exc)
        if http_exc.status_code >= 500:
            logger.error(f"Unhandled {type(exc).__name__} on {request.url.path}: {exc.message}")
        return _http_error_response(http_exc.status_code, http_exc.detail)

    @app.exception_handler(SQLAlchemyError)
    async def storage_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error(f"Storage failure on {request.url.path}", exc_info=exc)
        return await app_error_handler(request, InfrastructureError("Storage unavailable"))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception on {request.url.path}", exc_info=exc)
        return JSONResponse(status_code=500, content=error_body("Internal server error"))

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    from app.api import activities, milestones, projects, tasks

    app.include_router(projects.router, prefix="/api/projects", tags=["projects"])
    app.include_router(tasks.router, prefix="/api/tasks", tags=["tasks"])
    app.include_router(milestones.router, prefix="/api", tags=["milestones"])
    app.include_router(activities.router, prefix="/api/activities", tags=["activities"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "environment": settings.ENVIRONMENT,
            "version": VERSION,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )

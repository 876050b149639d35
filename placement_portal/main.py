"""Placement Portal - internship and placement workflow service."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from placement_portal import __version__
from placement_portal.core.config import settings
from placement_portal.core.seed import seed_demo_data
from placement_portal.core.storage import Database
from placement_portal.routers import (
    analytics_router,
    applications_router,
    auth_router,
    calendar_router,
    certificates_router,
    chat_router,
    feedback_router,
    internships_router,
    interviews_router,
    mentor_router,
    notifications_router,
    offers_router,
    search_router,
)
from placement_portal.services.scheduler_service import offer_expiry_scheduler

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Initializing application...")
    owns_database = getattr(app.state, "database", None) is None
    if owns_database:
        app.state.database = Database(settings.database_url, echo=settings.database_echo)
    database: Database = app.state.database
    await database.init_models()

    if settings.seed_demo_data:
        logger.info("Seeding demo data...")
        await seed_demo_data(database)

    if settings.scheduler_enabled:
        logger.info("Starting offer expiry scheduler...")
        await offer_expiry_scheduler.start(database)

    logger.info("Application initialized")

    yield

    logger.info("Shutting down...")
    await offer_expiry_scheduler.stop()
    if owns_database:
        await database.dispose()
    logger.info("Shutdown complete")


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Render every HTTP error in the response envelope."""
    body: dict = {"success": False}
    if isinstance(exc.detail, dict):
        body["error"] = exc.detail.get("message", "Request failed")
        body["data"] = {k: v for k, v in exc.detail.items() if k != "message"}
    else:
        body["error"] = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(body),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed request bodies and parameters are plain 400s."""
    errors = jsonable_encoder(exc.errors())
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", []) if part != "body")
    message = first.get("msg", "Invalid request")
    logger.warning(f"Validation failed on {request.url.path}: {location} {message}")
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": f"{location}: {message}" if location else message,
            "data": {"errors": errors},
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error"},
    )


def create_app(database: Database | None = None) -> FastAPI:
    """Build the FastAPI application.

    A pre-built ``database`` is used as-is and left open on shutdown; otherwise
    one is created from settings during startup.
    """
    app = FastAPI(
        title=settings.app_name,
        description="Internship and placement workflow: applications, mentor approval, "
        "interviews, offers, feedback and analytics",
        version=__version__,
        lifespan=lifespan,
    )
    if database is not None:
        app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(auth_router)
    app.include_router(internships_router)
    app.include_router(applications_router)
    app.include_router(interviews_router)
    app.include_router(offers_router)
    app.include_router(feedback_router)
    app.include_router(chat_router)
    app.include_router(search_router)
    app.include_router(analytics_router)
    app.include_router(mentor_router)
    app.include_router(calendar_router)
    app.include_router(notifications_router)
    app.include_router(certificates_router)

    @app.get("/api")
    async def api_info():
        """API information endpoint."""
        return {
            "message": f"{settings.app_name} API",
            "version": __version__,
            "docs": "/docs",
            "status": "active",
            "scheduler_enabled": settings.scheduler_enabled,
        }

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        database: Database | None = getattr(request.app.state, "database", None)
        return {
            "status": "healthy",
            "service": "placement-portal",
            "database": "in-memory" if database and database.is_in_memory else "file",
            "scheduler": jsonable_encoder(offer_expiry_scheduler.get_status()),
        }

    return app


app = create_app()

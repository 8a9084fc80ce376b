"""FastAPI application factory.

App factory pattern — create_app() returns a configured FastAPI
instance. The Settings object is read once here and used to build the
database engine, session factory, token service and password hasher,
which hang off app.state for the lifetime of the process. Middleware,
CORS, exception handlers, and routers are all registered here.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from plant_tracker import __version__
from plant_tracker.api import api_router
from plant_tracker.auth.jwt import TokenService
from plant_tracker.auth.password import PasswordHasher
from plant_tracker.config import Settings, get_settings
from plant_tracker.db.engine import build_engine, build_session_factory
from plant_tracker.errors import (
    INTERNAL_ERROR_BODY,
    AuthError,
    ErrorKind,
    PlantTrackerError,
)
from plant_tracker.middleware.request_id import RequestIdMiddleware
from plant_tracker.middleware.security import SecurityHeadersMiddleware

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Anything before `yield` runs at startup, after `yield` runs at shutdown.
    """
    settings: Settings = app.state.settings
    logger.info(
        "plant_tracker.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    yield

    logger.info("plant_tracker.shutdown")

    await app.state.engine.dispose()


# ─── Exception handlers ─────────────────────────────────
# The one place domain errors become HTTP responses.


async def handle_domain_error(request: Request, exc: PlantTrackerError) -> JSONResponse:
    if exc.kind is ErrorKind.INTERNAL:
        logger.error(
            "request.internal_error",
            error_type=type(exc).__name__,
            error=exc.message,
        )
        return JSONResponse(status_code=exc.status_code, content=INTERNAL_ERROR_BODY)

    logger.info("request.rejected", error_type=type(exc).__name__, status=exc.status_code)
    if isinstance(exc, AuthError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"jwt": "", "message": exc.message, "userId": None},
        )
    return JSONResponse(status_code=exc.status_code, content=exc.message)


async def handle_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"detail": jsonable_encoder(exc.errors())},
    )


async def handle_database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("request.database_error")
    return JSONResponse(status_code=500, content=INTERNAL_ERROR_BODY)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("request.unhandled_error", error_type=type(exc).__name__)
    return JSONResponse(status_code=500, content=INTERNAL_ERROR_BODY)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Plant Tracker",
        description="Track your plants and when you last watered them",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = build_engine(settings.database_url, echo=settings.debug)
    app.state.session_factory = build_session_factory(app.state.engine)
    app.state.token_service = TokenService.from_settings(settings)
    app.state.password_hasher = PasswordHasher(rounds=settings.bcrypt_rounds)

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → Security → RequestId → handler
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(PlantTrackerError, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(SQLAlchemyError, handle_database_error)
    # Errors inside the stack are caught by RequestIdMiddleware; this covers
    # anything raised outside it.
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: plant_tracker.main:app)
app = create_app()


def run() -> None:
    """Console entry point: serve the default app with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "plant_tracker.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )

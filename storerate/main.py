"""FastAPI application entrypoint. No business logic; only wiring, lifecycle and error rendering."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from storerate.api.v1 import router as api_router
from storerate.core.config import get_settings
from storerate.core.database import Database
from storerate.core.errors import AppError, is_logged

logger = logging.getLogger(__name__)


def _error_body(message: str, errors: list[dict[str, str]] | None = None) -> dict:
    body: dict = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return body


def _field_errors(exc: RequestValidationError) -> list[dict[str, str]]:
    errors = []
    for err in exc.errors():
        # loc is e.g. ("body", "rating") or ("query", "limit"); drop the location kind.
        loc = [str(part) for part in err.get("loc", ())[1:]]
        message = str(err.get("msg", "Invalid value")).removeprefix("Value error, ")
        errors.append({"field": ".".join(loc), "message": message})
    return errors


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.message, exc.errors),
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body("Validation error", _field_errors(exc)),
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content=_error_body("Resource conflicts with existing data"),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    if is_logged(exc):
        # Traceback already logged by the service that rolled back.
        logger.error("Request failed on %s %s: %r", request.method, request.url.path, exc)
    else:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("Internal server error"),
    )


def create_app(database: Database | None = None) -> FastAPI:
    """
    Build the application.

    When database is None one is opened from DATABASE_URL at startup and
    disposed at shutdown; a passed-in database is owned by the caller.
    """
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned = database is None
        app.state.database = database or Database(settings.DATABASE_URL, echo=settings.DEBUG)
        logger.info("Database handle opened (%s)", app.state.database.engine.dialect.name)
        try:
            yield
        finally:
            if owned:
                app.state.database.dispose()
                logger.info("Database handle closed")

    app = FastAPI(
        title="StoreRate API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    if database is not None:
        # Available even when the ASGI lifespan is not run (e.g. bare TestClient).
        app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.APP_ENV == "dev" else settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "StoreRate API"}

    return app


app = create_app()

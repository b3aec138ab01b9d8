"""
Dice Config API.

Builds the FastAPI app: logging, CORS, error mapping and the v1 router.
Run with `uvicorn backend.main:app` or `python -m backend.main`.
"""
import sys
import logging
import threading
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.api.v1.router import api_router
from backend.config import settings
from backend.core.database import init_db
from backend.services import ServiceError

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_MAX_BYTES = 5_000_000
LOG_BACKUPS = 5


def configure_logging() -> None:
    """Console plus rotating file under LOG_DIR."""
    settings.LOG_DIR.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        settings.LOG_DIR / "backend.log",
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUPS,
        encoding="utf-8",
    )
    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG else logging.INFO,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout), file_handler],
    )


configure_logging()
logger = logging.getLogger(__name__)


def _log_thread_crash(args):
    """threading.excepthook: background threads must not die silently."""
    logger.critical(
        f"Thread '{args.thread.name}' crashed with {args.exc_type.__name__}: {args.exc_value}",
        exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
    )


threading.excepthook = _log_thread_crash


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the data directory and tables before serving."""
    logger.info(f"{settings.APP_NAME} {settings.APP_VERSION} starting (debug={settings.DEBUG})")
    settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
    init_db()
    yield
    logger.info(f"{settings.APP_NAME} stopped")


def _format_validation_errors(exc: RequestValidationError) -> list:
    """'<field>: <message>' per error, without the 'body' prefix."""
    errors = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "invalid value")
        errors.append(f"{field}: {message}" if field else message)
    return errors


def register_exception_handlers(app: FastAPI) -> None:
    """Map errors to {detail, error_code, errors} bodies."""

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        level = logging.ERROR if exc.status_code >= 500 else logging.INFO
        logger.log(level, f"{request.method} {request.url.path} -> {exc.code}: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "error_code": exc.code, "errors": exc.details},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        """Malformed bodies are client errors: 400, not FastAPI's 422."""
        return JSONResponse(
            status_code=400,
            content={
                "detail": "Validation failed",
                "error_code": "VALIDATION_ERROR",
                "errors": _format_validation_errors(exc),
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        """Full error to the log; a generic message to the client."""
        logger.error(
            f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={
                "detail": "Something went wrong on our side. Please retry.",
                "error_code": "INTERNAL_ERROR",
            },
        )


def create_app() -> FastAPI:
    """Assemble the API application."""
    application = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Stores and validates dice configurations per browser session",
        lifespan=lifespan,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Accept", "Content-Type", "X-Session-ID"],
    )
    register_exception_handlers(application)
    application.include_router(api_router)

    @application.get("/")
    async def index():
        return {"name": settings.APP_NAME, "version": settings.APP_VERSION, "api": api_router.prefix}

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("backend.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=settings.DEBUG)

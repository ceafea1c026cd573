from typing import Optional
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
import uvicorn

from app.core.config import Settings, get_settings
from app.core.database import Database
from app.core.exceptions import AppError, InvalidInputError
from app.core.logging import setup_logging
from app.middleware.logging_middleware import LoggingMiddleware
from app.controllers import health_controller, product_controller

import structlog

logger = structlog.get_logger()

INTERNAL_ERROR_MESSAGE = "Internal server error"


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    database: Database = app.state.database
    logger.info("Application startup", environment=settings.environment)
    if settings.auto_create_tables:
        try:
            await database.create_tables()
            logger.info("Database initialized successfully")
        except Exception as e:
            logger.error("Failed to initialize database", error=str(e))
            raise

    yield

    logger.info("Application shutdown")
    await database.close()
    logger.info("Database connections closed")


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("Request failed", error=str(exc), cause=repr(exc.__cause__), **exc.context)
        return PlainTextResponse(INTERNAL_ERROR_MESSAGE, status_code=exc.status_code)
    logger.warning("Request rejected", status_code=exc.status_code, error=exc.message, **exc.context)
    return PlainTextResponse(exc.message, status_code=exc.status_code)


async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    logger.warning("Malformed request", errors=[(list(e["loc"]), e["msg"]) for e in errors])
    if any(error["loc"] and error["loc"][0] == "path" for error in errors):
        return PlainTextResponse("Invalid product ID", status_code=status.HTTP_400_BAD_REQUEST)
    return PlainTextResponse(InvalidInputError().message, status_code=status.HTTP_400_BAD_REQUEST)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.warning("HTTP Exception", status_code=exc.status_code, detail=exc.detail)
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)


async def general_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled Exception", error_type=type(exc).__name__, error=str(exc))
    return PlainTextResponse(INTERNAL_ERROR_MESSAGE, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(
        title="Product Catalog API",
        description="CRUD API for product records",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.environment == "local" else None,
        redoc_url="/redoc" if settings.environment == "local" else None,
    )
    app.state.settings = settings
    app.state.database = Database(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(health_controller.router)
    app.include_router(product_controller.router)

    return app


def run():
    settings = get_settings()
    # uvicorn traps SIGINT/SIGTERM, stops accepting connections and gives
    # in-flight requests shutdown_timeout seconds before closing them
    uvicorn.run(
        "app.main:create_app",
        factory=True,
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.environment == "local",
        timeout_graceful_shutdown=settings.shutdown_timeout,
        log_config=None,
    )


if __name__ == "__main__":
    run()

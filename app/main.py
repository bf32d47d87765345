import logging
from contextlib import asynccontextmanager
from typing import Any, Callable, Dict, Type

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from sqlalchemy.engine import make_url

from app import __version__
from app.api import api_router, loaded_modules
from app.core.config import settings
from app.core.exceptions import (
    APIException,
    api_exception_handler,
    request_validation_exception_handler,
    pydantic_validation_exception_handler,
    http_exception_handler,
    generic_exception_handler,
)
from app.core.logger import setup_logging
from app.db.client import create_tables
from app.db.redis_client import redis_client

logger = logging.getLogger(__name__)

# Most specific first; Starlette resolves handlers along the MRO either way
EXCEPTION_HANDLERS: Dict[Type[Exception], Callable[..., Any]] = {
    APIException: api_exception_handler,
    RequestValidationError: request_validation_exception_handler,
    ValidationError: pydantic_validation_exception_handler,
    HTTPException: http_exception_handler,
    Exception: generic_exception_handler,
}


def _flag(enabled: bool) -> str:
    return "\033[38;5;46mon\033[0m" if enabled else "\033[38;5;196moff\033[0m"


def print_banner() -> None:
    """
    Print the startup summary: version, bind address, database backend and
    which notification channels are live.
    """
    backend = make_url(settings.DATABASE_URL).get_backend_name()
    routes = sum(loaded_modules.values())

    lines = [
        f"\033[1;38;5;39m  Taskflow API v{__version__}\033[0m  ({settings.ENVIRONMENT})",
        f"  listening   {settings.HOST}:{settings.PORT}",
        f"  database    {backend}",
        f"  inbox       {_flag(True)}",
        f"  broadcast   {_flag(settings.NOTIFICATIONS_BROADCAST_ENABLED)}",
        f"  debug       {_flag(settings.DEBUG)}",
        f"  routes      {routes} in {len(loaded_modules)} routers",
    ]
    print("\n" + "\n".join(lines) + "\n")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager
    :param app: FastAPI application
    """
    setup_logging()
    print_banner()
    logger.info(f"🚀 {settings.APP_NAME} starting up ({settings.ENVIRONMENT})")

    if settings.ENVIRONMENT == "development":
        await create_tables()

    if settings.NOTIFICATIONS_BROADCAST_ENABLED:
        await redis_client.connect()
    else:
        logger.info("Real-time broadcast disabled, notifications go to the inbox only")

    yield

    await redis_client.disconnect()
    logger.info(f"⚡ {settings.APP_NAME} shutting down")


def create_app() -> FastAPI:
    """
    Build the application: CORS, error envelopes and the versioned API.
    :return: FastAPI application
    """
    app = FastAPI(
        title=settings.APP_NAME,
        description="Project and task tracking with role-based access and notifications",
        version=__version__,
        docs_url="/docs" if settings.DOCS_ENABLED else None,
        redoc_url="/redoc" if settings.DOCS_ENABLED else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for exc_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exc_class, handler)

    app.include_router(api_router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )

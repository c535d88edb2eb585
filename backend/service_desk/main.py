from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

from service_desk.api.health import router as health_router
from service_desk.api.router import api_router
from service_desk.config import get_settings
from service_desk.db import dispose_engine
from service_desk.exceptions import setup_exception_handlers
from service_desk.logging_config import setup_logging
from service_desk.middleware import setup_middleware
from service_desk.seed import seed_identities
from service_desk.services.identity import InMemoryIdentityProvider, get_identity_provider

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager for startup and shutdown."""
    settings = get_settings()
    setup_logging(settings.log_level)
    logger.info("Starting %s v%s [%s]", settings.app_name, settings.app_version, settings.environment)
    provider = get_identity_provider()
    if settings.environment == "development" and isinstance(provider, InMemoryIdentityProvider):
        tokens = seed_identities(provider)
        logger.info("Dev sessions opened for %s", ", ".join(sorted(tokens)))
        for email, token in tokens.items():
            logger.debug("Dev session for %s: %s", email, token)
    yield
    await dispose_engine()
    logger.info("Shutting down %s", settings.app_name)


def create_app() -> FastAPI:
    """Application factory."""
    settings = get_settings()

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.environment != "production" else None,
        redoc_url="/redoc" if settings.environment != "production" else None,
    )

    setup_middleware(application, settings)
    setup_exception_handlers(application)

    application.include_router(health_router)
    application.include_router(api_router)

    return application


app = create_app()

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from fastapi import FastAPI

from custody.api.health import router as health_router
from custody.api.router import api_router
from custody.api.uploads import files_router
from custody.config import Settings, get_settings
from custody.db import dispose_engine
from custody.exceptions import setup_exception_handlers
from custody.middleware import setup_middleware
from custody.services.export import XlsxReportExporter
from custody.services.notification import build_notification_dispatcher
from custody.services.storage import build_object_store

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


def setup_logging(settings: Settings) -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


def files_prefix(settings: Settings) -> str:
    """Route prefix for stored files, taken from the path of ``public_base_url``."""
    path = urlsplit(settings.public_base_url).path.rstrip("/")
    return path or "/files"


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager for startup and shutdown."""
    settings = get_settings()
    logger.info("Starting %s v%s [%s]", settings.app_name, settings.app_version, settings.environment)
    yield
    logger.info("Shutting down %s", settings.app_name)
    await dispose_engine()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Application factory."""
    settings = settings or get_settings()
    setup_logging(settings)

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.environment != "production" else None,
        redoc_url="/redoc" if settings.environment != "production" else None,
    )

    application.state.notifier = build_notification_dispatcher(settings)
    application.state.object_store = build_object_store(settings)
    application.state.report_exporter = XlsxReportExporter()

    setup_middleware(application, settings)
    setup_exception_handlers(application)

    application.include_router(health_router)
    application.include_router(api_router)
    application.include_router(files_router, prefix=files_prefix(settings))

    return application


app = create_app()

import logging
from typing import Literal

from fastapi import APIRouter, Request
from pydantic import BaseModel
from sqlalchemy import text

from custody.config import get_settings
from custody.db import SessionDep
from custody.services.notification import LoggingNotificationDispatcher, WebhookNotificationDispatcher

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["ok", "degraded", "error"]
    version: str
    environment: str
    database: Literal["ok", "unreachable"]
    notifications: Literal["webhook", "log", "custom"]


@router.get("/health", response_model=HealthResponse)
async def health(request: Request, session: SessionDep) -> HealthResponse:
    """Return the health status of the API service and its collaborators."""
    settings = get_settings()
    database: Literal["ok", "unreachable"] = "ok"

    try:
        await session.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Health check: database connectivity failed")
        database = "unreachable"

    notifier = getattr(request.app.state, "notifier", None)
    notifications: Literal["webhook", "log", "custom"] = "custom"
    if isinstance(notifier, WebhookNotificationDispatcher):
        notifications = "webhook"
    elif isinstance(notifier, LoggingNotificationDispatcher):
        notifications = "log"

    return HealthResponse(
        status="ok" if database == "ok" else "degraded",
        version=settings.app_version,
        environment=settings.environment,
        database=database,
        notifications=notifications,
    )

# gstkit/main.py
"""
Application factory.

``create_app()`` wires the Redis store and notifier from settings; tests pass
their own ``store`` / ``notifier`` and nothing external is opened.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from gstkit.api.routes import health
from gstkit.api.v1 import v1_router
from gstkit.api.v1.envelope import error
from gstkit.config.settings import settings
from gstkit.core.errors import (
    CalculationInputError,
    InputParseError,
    PresetProtectedError,
    ReminderNotFoundError,
    StorageError,
)
from gstkit.core.logging_config import setup_logging
from gstkit.domain.services.reminder_service import ReminderService
from gstkit.infrastructure.notifications.base import Notifier
from gstkit.infrastructure.notifications.listener import setup_notification_listener
from gstkit.infrastructure.notifications.redis_notifier import RedisNotifier
from gstkit.infrastructure.repositories.history_repository import HistoryRepository
from gstkit.infrastructure.repositories.margin_repository import MarginRepository
from gstkit.infrastructure.repositories.reminder_repository import ReminderRepository
from gstkit.infrastructure.store.base import KeyValueStore
from gstkit.infrastructure.store.redis_store import RedisStore

logger = logging.getLogger("gstkit")


def _wire(app: FastAPI, store: KeyValueStore, notifier: Notifier) -> None:
    history_repo = HistoryRepository(store)
    reminder_repo = ReminderRepository(store)
    app.state.store = store
    app.state.notifier = notifier
    app.state.history_repo = history_repo
    # Margin auto-save shares the history repository so both use the same key lock
    app.state.margin_repo = MarginRepository(store, history=history_repo)
    app.state.reminder_repo = reminder_repo
    app.state.reminder_service = ReminderService(reminder_repo, notifier)


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(InputParseError)
    async def _parse_error(request: Request, exc: InputParseError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error("Invalid input", errors=exc.details),
        )

    @app.exception_handler(CalculationInputError)
    async def _calculation_error(request: Request, exc: CalculationInputError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error(str(exc), errors=[{"field": exc.field, "message": str(exc)}]),
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        details = [
            {"field": ".".join(str(p) for p in e["loc"][1:]) or None, "message": e["msg"]}
            for e in exc.errors()
        ]
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error("Invalid input", errors=details))

    @app.exception_handler(PresetProtectedError)
    async def _preset_protected(request: Request, exc: PresetProtectedError):
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=error(str(exc)))

    @app.exception_handler(ReminderNotFoundError)
    async def _not_found(request: Request, exc: ReminderNotFoundError):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=error(str(exc)))

    @app.exception_handler(StorageError)
    async def _storage_error(request: Request, exc: StorageError):
        logger.error("Storage unavailable on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=error("Storage is temporarily unavailable. Please try again."),
        )


def create_app(store: KeyValueStore | None = None, notifier: Notifier | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.LOG_LEVEL)

        app_store = store or RedisStore(settings.REDIS_URL, prefix=settings.STORE_KEY_PREFIX)
        app_notifier = notifier or RedisNotifier(settings.REDIS_URL, prefix=settings.STORE_KEY_PREFIX)
        _wire(app, app_store, app_notifier)

        listener = None
        if hasattr(app_notifier, "pop_due"):
            listener = setup_notification_listener(app_notifier)
            listener.start()

        logger.info("%s started (env=%s)", settings.APP_NAME, settings.ENVIRONMENT)
        try:
            yield
        finally:
            if listener is not None:
                await listener.close()
            if notifier is None:
                await app_notifier.close()
            if store is None:
                await app_store.close()

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    _register_exception_handlers(app)
    app.include_router(health.router)
    app.include_router(v1_router)
    return app


app = create_app()

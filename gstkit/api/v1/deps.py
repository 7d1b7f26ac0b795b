# gstkit/api/v1/deps.py
"""
FastAPI dependencies for the v1 API layer.

Repositories and the reminder service are built once by the application
lifespan and kept on ``app.state``; these helpers hand them to routes.
"""

from __future__ import annotations

from fastapi import Request

from gstkit.core.errors import InputParseError
from gstkit.domain.services.input_parsing import ParseResult
from gstkit.domain.services.reminder_service import ReminderService
from gstkit.infrastructure.repositories.history_repository import HistoryRepository
from gstkit.infrastructure.repositories.margin_repository import MarginRepository
from gstkit.infrastructure.repositories.reminder_repository import ReminderRepository


def get_history_repo(request: Request) -> HistoryRepository:
    return request.app.state.history_repo


def get_margin_repo(request: Request) -> MarginRepository:
    return request.app.state.margin_repo


def get_reminder_repo(request: Request) -> ReminderRepository:
    return request.app.state.reminder_repo


def get_reminder_service(request: Request) -> ReminderService:
    return request.app.state.reminder_service


def require_parsed(*results: ParseResult) -> list:
    """Values of ``results`` in order, or ``InputParseError`` listing every failed field."""
    failures = [r for r in results if not r.ok]
    if failures:
        raise InputParseError([{"field": r.field, "message": r.error} for r in failures])
    return [r.value for r in results]

# gstkit/api/v1/__init__.py
"""
Versioned API v1, aggregating all sub-routers under ``/api/v1``.

Usage in ``main.py``::

    from gstkit.api.v1 import v1_router
    app.include_router(v1_router)
"""

from fastapi import APIRouter

from gstkit.api.v1.routes.gst import router as gst_router
from gstkit.api.v1.routes.history import router as history_router
from gstkit.api.v1.routes.margin import router as margin_router
from gstkit.api.v1.routes.margin_history import router as margin_history_router
from gstkit.api.v1.routes.filing import router as filing_router
from gstkit.api.v1.routes.reminders import router as reminders_router

v1_router = APIRouter(prefix="/api/v1")

# GST calculator
v1_router.include_router(gst_router)
v1_router.include_router(history_router)

# Profit margin
v1_router.include_router(margin_router)
v1_router.include_router(margin_history_router)

# Filing calendar and reminders
v1_router.include_router(filing_router)
v1_router.include_router(reminders_router)

__all__ = ["v1_router"]

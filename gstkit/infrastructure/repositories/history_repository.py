# gstkit/infrastructure/repositories/history_repository.py
"""
GST calculation history and calculator preferences.

History is a newest-last list capped at ``HISTORY_LIMIT`` entries. Records
written by older app versions are upgraded once at load time
(``migrate_history_record``) and written back.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from pydantic import ValidationError

from gstkit.config.settings import settings
from gstkit.core.errors import StorageError
from gstkit.domain.models.tax import HISTORY_SCHEMA_VERSION, Preferences, TaxCalculation
from gstkit.infrastructure.store.base import JsonCollection, KeyValueStore

logger = logging.getLogger("history_repository")

HISTORY_KEY = "gst_calculator_history"
PREFERENCES_KEY = "gst_calculator_preferences"

# v1 records were written by the mobile client with camelCase keys
_V1_FIELD_MAP = {
    "isInclusive": "is_inclusive",
    "gstRate": "gst_rate",
    "netAmount": "net_amount",
    "gstAmount": "gst_amount",
    "cgstAmount": "cgst_amount",
    "sgstAmount": "sgst_amount",
    "grossAmount": "gross_amount",
}


def migrate_history_record(record: dict[str, Any]) -> dict[str, Any]:
    """Upgrade a stored history record to the current schema in-place and return it.

    * Renames v1 camelCase keys.
    * Fills ``cgst_amount`` / ``sgst_amount`` (missing before the split was
      shown) with half of ``gst_amount`` each.
    * Stamps ``schema_version``.
    """
    if record.get("schema_version", 1) >= HISTORY_SCHEMA_VERSION:
        return record

    for old, new in _V1_FIELD_MAP.items():
        if old in record:
            record.setdefault(new, record.pop(old))

    if "cgst_amount" not in record or "sgst_amount" not in record:
        half = Decimal(str(record.get("gst_amount", 0))) / 2
        record.setdefault("cgst_amount", float(half))
        record.setdefault("sgst_amount", float(half))

    record.setdefault("currency", "INR")
    record["schema_version"] = HISTORY_SCHEMA_VERSION
    return record


class HistoryRepository:
    def __init__(self, store: KeyValueStore, limit: int | None = None):
        self.store = store
        self.collection = JsonCollection(store)
        self.limit = limit or settings.HISTORY_LIMIT

    # -- preferences ---------------------------------------------------------
    async def get_preferences(self) -> Preferences | None:
        raw = await self.store.get(PREFERENCES_KEY)
        if not raw:
            return None
        try:
            return Preferences.model_validate(raw)
        except ValidationError as exc:
            raise StorageError("Stored preferences are malformed", key=PREFERENCES_KEY) from exc

    async def save_preferences(self, preferences: Preferences) -> None:
        await self.store.set(PREFERENCES_KEY, preferences.model_dump(mode="json"))

    # -- history ---------------------------------------------------------------
    async def save_calculation(self, calculation: TaxCalculation) -> bool:
        """Append ``calculation``; returns False when the user disabled history."""
        prefs = await self.get_preferences()
        if prefs is not None and not prefs.save_history:
            logger.debug("History disabled in preferences; not saving %s", calculation.description)
            return False

        record = calculation.model_dump(mode="json")

        def _append(items: list) -> list:
            items.append(record)
            return items[-self.limit:]

        await self.collection.update(HISTORY_KEY, _append)
        return True

    async def get_history(self) -> list[TaxCalculation]:
        async with self.collection.lock(HISTORY_KEY):
            records = await self.collection.read(HISTORY_KEY)
            stale = [r for r in records if r.get("schema_version", 1) < HISTORY_SCHEMA_VERSION]
            for record in stale:
                migrate_history_record(record)
            if stale:
                logger.info("Migrated %d history records to schema v%d", len(stale), HISTORY_SCHEMA_VERSION)
                await self.store.set(HISTORY_KEY, records)

        try:
            return [TaxCalculation.model_validate(r) for r in records]
        except ValidationError as exc:
            raise StorageError("Stored history is malformed", key=HISTORY_KEY) from exc

    async def clear_history(self) -> None:
        async with self.collection.lock(HISTORY_KEY):
            await self.store.remove(HISTORY_KEY)

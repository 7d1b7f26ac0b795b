# gstkit/infrastructure/repositories/margin_repository.py
"""
Profit-margin history, presets and settings.

Margin calculations are kept newest-first (capped at ``MARGIN_HISTORY_LIMIT``)
and, when auto-save is on, also projected into the GST calculation history
so both calculators share one timeline.
"""

from __future__ import annotations

import logging
from datetime import datetime

from pydantic import ValidationError

from gstkit.config.settings import settings
from gstkit.core.errors import PresetProtectedError, StorageError
from gstkit.domain.models.common import IST, BusinessType
from gstkit.domain.models.margin import (
    MarginCalculation,
    MarginPreset,
    MarginSettings,
    MarginStatistics,
)
from gstkit.domain.models.tax import TaxCalculation
from gstkit.domain.services.currency import resolve_currency_code
from gstkit.domain.services.history_export import ExportFormat, export_margin_history
from gstkit.domain.services.margin_engine import DEFAULT_MARGIN_PRESETS, margin_statistics
from gstkit.infrastructure.repositories.history_repository import HistoryRepository
from gstkit.infrastructure.store.base import JsonCollection, KeyValueStore

logger = logging.getLogger("margin_repository")

MARGIN_CALCULATIONS_KEY = "profit_margin_calculations"
MARGIN_PRESETS_KEY = "profit_margin_presets"
MARGIN_SETTINGS_KEY = "profit_margin_settings"


def margin_to_history_entry(calc: MarginCalculation, currency: str | None = None) -> TaxCalculation:
    """Lossy projection of a margin calculation into the GST history shape.

    Cost price is always tax-exclusive, so ``is_inclusive`` is False and the
    pre-tax selling price plays the role of the net amount.
    """
    half = calc.gst_amount / 2
    return TaxCalculation(
        timestamp=calc.timestamp,
        description=f"{calc.description or 'Profit Margin'} ({calc.business_type})",
        amount=calc.cost_price,
        is_inclusive=False,
        gst_rate=calc.gst_rate,
        net_amount=calc.selling_price_before_gst,
        gst_amount=calc.gst_amount,
        cgst_amount=half,
        sgst_amount=half,
        gross_amount=calc.final_selling_price,
        currency=currency or settings.DEFAULT_CURRENCY,
    )


def filter_by_date_range(
    calculations: list[MarginCalculation], start: datetime | None, end: datetime | None
) -> list[MarginCalculation]:
    """Calculations inside the inclusive range; a missing bound is open.

    Naive bounds are read as IST.
    """
    if start is not None and start.tzinfo is None:
        start = start.replace(tzinfo=IST)
    if end is not None and end.tzinfo is None:
        end = end.replace(tzinfo=IST)
    return [
        c for c in calculations
        if (start is None or c.timestamp >= start) and (end is None or c.timestamp <= end)
    ]


def filter_by_business_type(
    calculations: list[MarginCalculation], business_type: BusinessType
) -> list[MarginCalculation]:
    return [c for c in calculations if c.business_type == business_type]


class MarginRepository:
    def __init__(
        self,
        store: KeyValueStore,
        history: HistoryRepository | None = None,
        limit: int | None = None,
    ):
        self.store = store
        self.collection = JsonCollection(store)
        self.history = history or HistoryRepository(store)
        self.limit = limit or settings.MARGIN_HISTORY_LIMIT

    # -- calculations ----------------------------------------------------------
    async def get_calculations(self) -> list[MarginCalculation]:
        records = await self.collection.read(MARGIN_CALCULATIONS_KEY)
        try:
            return [MarginCalculation.model_validate(r) for r in records]
        except ValidationError as exc:
            raise StorageError("Stored margin calculations are malformed", key=MARGIN_CALCULATIONS_KEY) from exc

    async def save_calculation(self, calculation: MarginCalculation) -> None:
        record = calculation.model_dump(mode="json")

        def _prepend(items: list) -> list:
            items.insert(0, record)
            return items[: self.limit]

        await self.collection.update(MARGIN_CALCULATIONS_KEY, _prepend)

        margin_settings = await self.get_settings()
        if margin_settings.auto_save_calculations:
            currency = resolve_currency_code(margin_settings.preferred_currency)
            await self._save_to_main_history(calculation, currency)

    async def _save_to_main_history(self, calculation: MarginCalculation, currency: str | None) -> None:
        try:
            await self.history.save_calculation(margin_to_history_entry(calculation, currency))
        except StorageError:
            # The margin record is already stored; the unified timeline is optional
            logger.exception("Failed to copy margin calculation %s into GST history", calculation.id)

    async def delete_calculation(self, calculation_id: str) -> None:
        await self.collection.update(
            MARGIN_CALCULATIONS_KEY,
            lambda items: [c for c in items if c.get("id") != calculation_id],
        )

    async def clear_calculations(self) -> None:
        async with self.collection.lock(MARGIN_CALCULATIONS_KEY):
            await self.store.remove(MARGIN_CALCULATIONS_KEY)

    # -- queries ---------------------------------------------------------------
    async def search(self, query: str) -> list[MarginCalculation]:
        lower = query.lower()
        return [
            c for c in await self.get_calculations()
            if (c.description and lower in c.description.lower())
            or lower in c.business_type.lower()
            or query in f"{c.cost_price.normalize():f}"
            or query in f"{c.desired_margin_percent.normalize():f}"
        ]

    async def by_date_range(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> list[MarginCalculation]:
        return filter_by_date_range(await self.get_calculations(), start, end)

    async def by_business_type(self, business_type: BusinessType) -> list[MarginCalculation]:
        return filter_by_business_type(await self.get_calculations(), business_type)

    async def statistics(self) -> MarginStatistics:
        return margin_statistics(await self.get_calculations())

    async def export(self, fmt: ExportFormat = "json") -> str:
        return export_margin_history(await self.get_calculations(), fmt)

    # -- presets ---------------------------------------------------------------
    async def _load_presets(self) -> list[MarginPreset]:
        # Caller holds the presets lock
        records = await self.store.get(MARGIN_PRESETS_KEY)
        if records is None:
            # First run: seed the built-in presets
            await self._write_presets(DEFAULT_MARGIN_PRESETS)
            return [p.model_copy() for p in DEFAULT_MARGIN_PRESETS]
        try:
            return [MarginPreset.model_validate(r) for r in records]
        except ValidationError as exc:
            raise StorageError("Stored margin presets are malformed", key=MARGIN_PRESETS_KEY) from exc

    async def _write_presets(self, presets: list[MarginPreset]) -> None:
        await self.store.set(MARGIN_PRESETS_KEY, [p.model_dump(mode="json") for p in presets])

    async def get_presets(self) -> list[MarginPreset]:
        async with self.collection.lock(MARGIN_PRESETS_KEY):
            return await self._load_presets()

    async def add_preset(self, preset: MarginPreset) -> None:
        """Insert ``preset``; an existing custom preset with the same name is replaced."""
        async with self.collection.lock(MARGIN_PRESETS_KEY):
            presets = await self._load_presets()
            for i, existing in enumerate(presets):
                if existing.name == preset.name:
                    if existing.is_default:
                        raise PresetProtectedError(f"Preset {existing.name!r} is a built-in default and cannot be replaced")
                    presets[i] = preset
                    break
            else:
                presets.append(preset)
            await self._write_presets(presets)

    async def delete_preset(self, preset_id: str) -> None:
        async with self.collection.lock(MARGIN_PRESETS_KEY):
            presets = await self._load_presets()
            if any(p.id == preset_id and p.is_default for p in presets):
                raise PresetProtectedError(f"Preset {preset_id} is a built-in default and cannot be deleted")
            await self._write_presets([p for p in presets if p.id != preset_id])

    async def get_default_presets(self, business_type: BusinessType | None = None) -> list[MarginPreset]:
        defaults = [p for p in await self.get_presets() if p.is_default]
        if business_type:
            return [p for p in defaults if p.business_type == business_type]
        return defaults

    # -- settings --------------------------------------------------------------
    async def get_settings(self) -> MarginSettings:
        raw = await self.store.get(MARGIN_SETTINGS_KEY)
        if not raw:
            return MarginSettings()
        try:
            return MarginSettings.model_validate(raw)
        except ValidationError as exc:
            raise StorageError("Stored margin settings are malformed", key=MARGIN_SETTINGS_KEY) from exc

    async def save_settings(self, margin_settings: MarginSettings) -> None:
        await self.store.set(MARGIN_SETTINGS_KEY, margin_settings.model_dump(mode="json"))

    async def clear_all(self) -> None:
        await self.store.remove_many([
            MARGIN_CALCULATIONS_KEY,
            MARGIN_PRESETS_KEY,
            MARGIN_SETTINGS_KEY,
        ])

# gstkit/domain/services/share_text.py
"""Plain-text summaries for the share sheet and notification bodies."""

from __future__ import annotations

from datetime import date

from gstkit.domain.models.filing import FilingReminder
from gstkit.domain.models.margin import MarginCalculation
from gstkit.domain.models.tax import TaxCalculation
from gstkit.domain.services.currency import format_currency, format_percentage


def tax_share_message(calc: TaxCalculation) -> str:
    def fmt(v):
        return format_currency(v, calc.currency)

    half_rate = calc.gst_rate / 2
    return (
        f"GST Calculation for {calc.description}\n\n"
        f"Amount: {fmt(calc.amount)}\n"
        f"GST Rate: {calc.gst_rate.normalize():f}%\n"
        f"Calculation Type: {'Inclusive' if calc.is_inclusive else 'Exclusive'}\n\n"
        f"Net Amount: {fmt(calc.net_amount)}\n"
        f"CGST ({half_rate.normalize():f}%): {fmt(calc.cgst_amount)}\n"
        f"SGST ({half_rate.normalize():f}%): {fmt(calc.sgst_amount)}\n"
        f"Total GST: {fmt(calc.gst_amount)}\n"
        f"Gross Amount: {fmt(calc.gross_amount)}"
    )


def margin_share_message(calc: MarginCalculation, currency: str = "INR") -> str:
    def fmt(v):
        return format_currency(v, currency)

    return (
        f"Profit Margin for {calc.description or 'Profit Margin'} ({calc.business_type})\n\n"
        f"Cost Price: {fmt(calc.cost_price)}\n"
        f"Desired Margin: {format_percentage(calc.desired_margin_percent)}\n"
        f"Selling Price (before GST): {fmt(calc.selling_price_before_gst)}\n"
        f"GST @ {calc.gst_rate.normalize():f}%: {fmt(calc.gst_amount)}\n"
        f"Final Selling Price: {fmt(calc.final_selling_price)}\n"
        f"Profit: {fmt(calc.profit_amount)}\n"
        f"Effective Margin: {format_percentage(calc.effective_margin_percent)}"
    )


def _long_date(d: date) -> str:
    return f"{d.day} {d.strftime('%B %Y')}"


def reminder_notification_body(reminder: FilingReminder, days_before: int) -> str:
    if days_before == 0:
        return f"{reminder.return_name} for {reminder.period} is due today!"
    if days_before == 1:
        return (
            f"{reminder.return_name} for {reminder.period} is due tomorrow "
            f"({_long_date(reminder.due_date)})"
        )
    return (
        f"{reminder.return_name} for {reminder.period} is due in {days_before} days "
        f"({_long_date(reminder.due_date)})"
    )

"""Tests for the GST return due-date calendar."""

from datetime import date

import pytest

from gstkit.domain.services.filing_dates import (
    GST_RETURNS,
    _add_months,
    days_until_due,
    get_applicable_returns,
    get_filing_period,
    get_next_due_date,
    get_upcoming_filing_dates,
    is_overdue,
)

RULES = {r.id: r for r in GST_RETURNS}


class TestApplicableReturns:
    def test_large_regular_taxpayer_files_gstr1_monthly(self):
        ids = [r.id for r in get_applicable_returns("regular", 200_000_000)]
        assert "gstr1" in ids
        assert "gstr1_quarterly" not in ids
        assert "gstr9c" in ids

    def test_small_regular_taxpayer_files_gstr1_quarterly(self):
        ids = [r.id for r in get_applicable_returns("regular", 1_000_000)]
        assert "gstr1_quarterly" in ids
        assert "gstr1" not in ids
        assert "gstr9c" not in ids

    @pytest.mark.parametrize("turnover", [0, 150_000_000, 150_000_001, 500_000_000])
    def test_exactly_one_gstr1_rule(self, turnover):
        ids = [r.id for r in get_applicable_returns("regular", turnover)]
        assert ids.count("gstr1") + ids.count("gstr1_quarterly") == 1

    def test_composition_only_files_gstr4(self):
        assert [r.id for r in get_applicable_returns("composition", 0)] == ["gstr4"]

    def test_nil_filer_has_no_rules(self):
        assert get_applicable_returns("nil", 0) == []


class TestNextDueDate:
    def test_monthly_same_month_until_due_day(self):
        assert get_next_due_date(RULES["gstr3b"], date(2026, 9, 20)) == date(2026, 9, 20)

    def test_monthly_rolls_to_next_month(self):
        assert get_next_due_date(RULES["gstr3b"], date(2026, 9, 21)) == date(2026, 10, 20)

    def test_monthly_rolls_over_year_end(self):
        assert get_next_due_date(RULES["gstr3b"], date(2026, 12, 25)) == date(2027, 1, 20)

    def test_quarterly(self):
        assert get_next_due_date(RULES["gstr4"], date(2026, 9, 5)) == date(2026, 10, 18)
        assert get_next_due_date(RULES["gstr4"], date(2026, 11, 5)) == date(2027, 1, 18)

    def test_annual(self):
        assert get_next_due_date(RULES["gstr9"], date(2026, 3, 1)) == date(2026, 12, 31)
        assert get_next_due_date(RULES["gstr9"], date(2026, 12, 31)) == date(2026, 12, 31)


class TestFilingPeriod:
    def test_monthly_is_previous_month(self):
        assert get_filing_period(RULES["gstr3b"], date(2026, 9, 20)) == "August 2026"
        assert get_filing_period(RULES["gstr3b"], date(2027, 1, 20)) == "December 2026"

    def test_quarterly(self):
        assert get_filing_period(RULES["gstr4"], date(2026, 10, 18)) == "Q4 2026"

    def test_annual(self):
        assert get_filing_period(RULES["gstr9"], date(2026, 12, 31)) == "FY 2025-26"


class TestDayCounts:
    def test_days_until_due(self):
        assert days_until_due(date(2026, 9, 20), today=date(2026, 9, 5)) == 15

    def test_overdue(self):
        assert is_overdue(date(2026, 9, 1), today=date(2026, 9, 5))
        assert not is_overdue(date(2026, 9, 5), today=date(2026, 9, 5))

    def test_add_months_clamps_day(self):
        assert _add_months(date(2026, 1, 31), 1) == date(2026, 2, 28)


class TestUpcomingFilingDates:
    def test_large_taxpayer_next_90_days(self, today):
        dates = get_upcoming_filing_dates("regular", 200_000_000, 90, today=today)
        ids = [d.id for d in dates]
        assert ids == [
            "gstr1_2026-09-11",
            "gstr3b_2026-09-20",
            "gstr1_2026-10-11",
            "gstr3b_2026-10-20",
            "gstr1_2026-11-11",
            "gstr3b_2026-11-20",
        ]
        assert all(not d.return_type == "gstr1_quarterly" for d in dates)

    def test_fields(self, today):
        first = get_upcoming_filing_dates("regular", 200_000_000, 90, today=today)[0]
        assert first.return_name == "GSTR-1"
        assert first.period == "August 2026"
        assert first.days_until_due == 6
        assert first.is_overdue is False

    def test_longer_window_includes_annual_returns(self, today):
        ids = [d.return_type for d in get_upcoming_filing_dates("regular", 200_000_000, 120, today=today)]
        assert "gstr9" in ids
        assert "gstr9c" in ids

    def test_small_taxpayer(self, today):
        dates = get_upcoming_filing_dates("regular", 0, 90, today=today)
        assert [d.return_type for d in dates] == ["gstr3b", "gstr1_quarterly", "gstr3b", "gstr3b"]

    def test_sorted_ascending(self, today):
        dates = get_upcoming_filing_dates("regular", 300_000_000, 365, today=today)
        assert [d.due_date for d in dates] == sorted(d.due_date for d in dates)

    def test_window_respected(self, today):
        dates = get_upcoming_filing_dates("regular", 0, 10, today=today)
        assert all(d.days_until_due <= 10 for d in dates)

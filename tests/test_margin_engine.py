"""Tests for the profit-margin pricing engine."""

from datetime import datetime
from decimal import Decimal

import pytest

from gstkit.core.errors import CalculationInputError
from gstkit.domain.models.common import IST
from gstkit.domain.services.margin_engine import (
    DEFAULT_MARGIN_PRESETS,
    RECOMMEND_B2B_HIGH,
    RECOMMEND_B2C_LOW,
    RECOMMEND_HEALTHY,
    RECOMMEND_HIGH_MARGINS,
    RECOMMEND_RAISE_MARGINS,
    calculate_actual_margin,
    calculate_break_even_price,
    calculate_profit_margin,
    calculate_volume_based_pricing,
    compare_margin_scenarios,
    get_pricing_strategy_recommendation,
    margin_statistics,
    volume_adjusted_margin,
)

CENT = Decimal("0.01")


def q(value: Decimal) -> Decimal:
    return value.quantize(CENT)


class TestCalculateProfitMargin:
    def test_reference_case(self):
        calc = calculate_profit_margin(100, 20, 18)
        assert calc.selling_price_before_gst == Decimal("125")
        assert calc.gst_amount == Decimal("22.5")
        assert calc.final_selling_price == Decimal("147.5")
        assert calc.profit_amount == Decimal("25")
        assert q(calc.effective_margin_percent) == Decimal("16.95")

    def test_effective_margin_below_desired_when_gst_positive(self):
        calc = calculate_profit_margin(250, 35, 12)
        assert calc.effective_margin_percent < calc.desired_margin_percent

    def test_zero_rate_makes_margins_equal(self):
        calc = calculate_profit_margin(80, 20, 0)
        assert q(calc.effective_margin_percent) == Decimal("20.00")

    def test_metadata(self):
        now = datetime(2026, 9, 5, 11, 0, tzinfo=IST)
        calc = calculate_profit_margin(100, 20, 18, "B2B", description="Widget", now=now)
        assert calc.id.startswith("margin_")
        assert calc.business_type == "B2B"
        assert calc.description == "Widget"
        assert calc.timestamp == now

    def test_ids_are_unique(self):
        assert calculate_profit_margin(1, 1, 1).id != calculate_profit_margin(1, 1, 1).id

    @pytest.mark.parametrize("cost,margin,rate,field", [
        (0, 20, 18, "cost_price"),
        (-10, 20, 18, "cost_price"),
        (100, -1, 18, "desired_margin_percent"),
        (100, 100, 18, "desired_margin_percent"),
        (100, 150, 18, "desired_margin_percent"),
        (100, 20, -5, "gst_rate"),
    ])
    def test_rejects_invalid_input(self, cost, margin, rate, field):
        with pytest.raises(CalculationInputError) as exc:
            calculate_profit_margin(cost, margin, rate)
        assert exc.value.field == field


class TestActualMargin:
    def test_price_including_gst(self):
        r = calculate_actual_margin(100, Decimal("147.5"), 18, includes_gst=True)
        assert r.selling_price_before_gst == Decimal("125")
        assert r.actual_margin_percent == Decimal("20")
        assert r.gst_amount == Decimal("22.5")

    def test_price_excluding_gst(self):
        r = calculate_actual_margin(100, 125, 18, includes_gst=False)
        assert r.actual_margin_percent == Decimal("20")
        assert r.gst_amount == Decimal("22.5")

    def test_loss_gives_negative_margin(self):
        r = calculate_actual_margin(100, 90, 0, includes_gst=False)
        assert r.profit_amount == Decimal("-10")
        assert r.actual_margin_percent < 0

    def test_inverts_forward_pricing(self):
        calc = calculate_profit_margin(340, 27, 28)
        r = calculate_actual_margin(340, calc.final_selling_price, 28)
        assert q(r.actual_margin_percent) == Decimal("27.00")

    def test_rejects_zero_selling_price(self):
        with pytest.raises(CalculationInputError):
            calculate_actual_margin(100, 0, 18)


class TestBreakEven:
    def test_reference_case(self):
        r = calculate_break_even_price(100, 18)
        assert r.break_even_price_before_gst == Decimal("100")
        assert r.gst_amount == Decimal("18")
        assert r.break_even_price_with_gst == Decimal("118")

    def test_rejects_bad_cost(self):
        with pytest.raises(CalculationInputError):
            calculate_break_even_price(0, 18)


class TestCompareScenarios:
    def test_best_is_highest_within_ceiling(self):
        result = compare_margin_scenarios(100, [10, 20, 30], 18)
        assert len(result.scenarios) == 3
        assert result.best_scenario.desired_margin_percent == Decimal("30")

    def test_all_above_ceiling_keeps_first(self):
        result = compare_margin_scenarios(100, [70, 80], 18)
        assert result.best_scenario.desired_margin_percent == Decimal("70")

    def test_tie_keeps_first(self):
        result = compare_margin_scenarios(100, [20, 20], 18)
        assert result.best_scenario is result.scenarios[0]

    def test_healthy_b2c_below_twenty(self):
        result = compare_margin_scenarios(100, [10, 20, 30], 18, "B2C")
        assert result.recommendations == [RECOMMEND_HEALTHY, RECOMMEND_B2C_LOW]

    def test_high_margins(self):
        result = compare_margin_scenarios(100, [70, 80], 18, "B2C")
        assert result.recommendations == [RECOMMEND_HIGH_MARGINS]

    def test_b2b_high(self):
        result = compare_margin_scenarios(100, [40, 45], 18, "B2B")
        assert result.recommendations == [RECOMMEND_HEALTHY, RECOMMEND_B2B_HIGH]

    def test_raise_margins(self):
        result = compare_margin_scenarios(100, [5], 18, "B2C")
        assert result.recommendations == [RECOMMEND_RAISE_MARGINS, RECOMMEND_B2C_LOW]

    def test_empty_list_rejected(self):
        with pytest.raises(CalculationInputError):
            compare_margin_scenarios(100, [], 18)


class TestPricingStrategy:
    @pytest.mark.parametrize("margin,expected", [
        (25, "cost_plus"),
        (20, "cost_plus"),
        (15, "competitive"),
        (12, "penetration"),
        (60, "value_based"),
        (90, "skimming"),
    ])
    def test_first_matching_band_wins(self, margin, expected):
        assert get_pricing_strategy_recommendation(margin).type == expected

    def test_no_band(self):
        assert get_pricing_strategy_recommendation(5) is None


class TestVolumePricing:
    @pytest.mark.parametrize("volume,expected", [
        (1, Decimal("20")),
        (49, Decimal("20")),
        (50, Decimal("19")),
        (100, Decimal("18")),
        (500, Decimal("17")),
        (1000, Decimal("16")),
        (5000, Decimal("16")),
    ])
    def test_adjusted_margin(self, volume, expected):
        assert volume_adjusted_margin(20, volume) == expected

    def test_tiers(self):
        tiers = calculate_volume_based_pricing(100, 20, 18, [1, 10])
        assert [t.volume for t in tiers] == [1, 10]
        assert tiers[0].unit_price == Decimal("147.5")
        assert tiers[1].total_revenue == Decimal("1475")
        assert tiers[1].total_profit == Decimal("250")

    def test_bigger_orders_get_cheaper_units(self):
        small, large = calculate_volume_based_pricing(100, 30, 18, [10, 1000])
        assert large.unit_price < small.unit_price


class TestStatistics:
    def test_empty(self):
        stats = margin_statistics([])
        assert stats.total_calculations == 0
        assert stats.most_used_business_type == "B2C"
        assert stats.margin_distribution == []

    def test_buckets_and_averages(self):
        calcs = [
            calculate_profit_margin(100, 15, 0, "B2B"),   # 15% effective
            calculate_profit_margin(100, 20, 18, "B2B"),  # 16.95%
            calculate_profit_margin(100, 50, 0, "B2C"),   # 50%
        ]
        stats = margin_statistics(calcs)
        assert stats.total_calculations == 3
        assert stats.most_used_business_type == "B2B"
        assert stats.average_cost_price == Decimal("100")
        buckets = {b.range: b.count for b in stats.margin_distribution}
        assert buckets == {"0-10%": 0, "10-20%": 2, "20-30%": 0, "30-40%": 0, "40%+": 1}

    def test_tie_in_business_type_favours_b2c(self):
        calcs = [calculate_profit_margin(100, 10, 0, "B2B"), calculate_profit_margin(100, 10, 0, "B2C")]
        assert margin_statistics(calcs).most_used_business_type == "B2C"


def test_two_default_presets():
    defaults = [p for p in DEFAULT_MARGIN_PRESETS if p.is_default]
    assert [p.id for p in defaults] == ["retail_standard", "wholesale_standard"]

"""Tests for the straight-line depreciation scheduler."""

from datetime import date
from decimal import Decimal

import pytest

from statement_engine.config import DepreciationConfig
from statement_engine.depreciation import months_in_period, schedule_depreciation


class TestMonthsInPeriod:
    @pytest.mark.parametrize(
        "first,last,expected",
        [
            (date(2023, 10, 1), date(2023, 10, 31), 1),
            (date(2023, 10, 31), date(2023, 11, 1), 2),
            (date(2023, 10, 15), date(2024, 3, 2), 6),
            (date(2022, 1, 1), date(2024, 12, 31), 36),
        ],
    )
    def test_inclusive_month_count(self, first, last, expected):
        assert months_in_period(first, last) == expected

    def test_missing_dates(self):
        assert months_in_period(None, None) == 0


class TestScheduleDepreciation:
    def test_no_capex_no_depreciation(self):
        schedule = schedule_depreciation(Decimal("0"), 12)
        assert schedule.monthly_depreciation == 0
        assert schedule.total_depreciation == 0
        assert schedule.months == 12

    @pytest.mark.parametrize("months", [1, 5, 12, 36])
    def test_linear_within_useful_life(self, months):
        capex = Decimal("7200")
        schedule = schedule_depreciation(capex, months)
        assert schedule.monthly_depreciation == Decimal("200")
        assert schedule.total_depreciation == (capex / 36) * months

    def test_non_round_monthly_charge(self):
        schedule = schedule_depreciation(Decimal("3000"), 1)
        assert schedule.total_depreciation == Decimal("3000") / 36
        assert float(schedule.total_depreciation) == pytest.approx(83.3333, rel=1e-6)

    def test_capped_at_cost_beyond_useful_life(self):
        schedule = schedule_depreciation(Decimal("3600"), 48)
        assert schedule.monthly_depreciation == Decimal("100")
        assert schedule.total_depreciation == Decimal("3600")

    def test_uncapped_keeps_growing(self):
        config = DepreciationConfig(cap_at_cost=False)
        schedule = schedule_depreciation(Decimal("3600"), 48, config)
        assert schedule.total_depreciation == Decimal("4800")

    def test_custom_useful_life(self):
        config = DepreciationConfig(useful_life_months=60)
        schedule = schedule_depreciation(6000, 3, config)
        assert schedule.monthly_depreciation == Decimal("100")
        assert schedule.total_depreciation == Decimal("300")

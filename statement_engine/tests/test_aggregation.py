"""Tests for monthly aggregation of transactions."""

from datetime import date
from decimal import Decimal

from statement_engine.aggregation import (
    aggregate_transactions,
    apply_monthly_depreciation,
    month_label,
    month_label_to_date,
    sort_month_labels,
)
from statement_engine.config import ReportingConfig
from statement_engine.models import ActivityType


class TestMonthLabels:
    def test_default_label(self):
        assert month_label(date(2023, 10, 17)) == "Oct 2023"

    def test_label_round_trip_gives_first_of_month(self):
        assert month_label_to_date("Oct 2023") == date(2023, 10, 1)

    def test_chronological_not_lexical_order(self):
        labels = ["Oct 2023", "Apr 2024", "Jan 2024", "Dec 2023"]
        assert sort_month_labels(labels) == ["Oct 2023", "Dec 2023", "Jan 2024", "Apr 2024"]
        assert sorted(labels) != sort_month_labels(labels)

    def test_custom_format(self):
        assert sort_month_labels(["2024-01", "2023-12"], "%Y-%m") == ["2023-12", "2024-01"]


class TestAggregateTransactions:
    def test_empty_input(self):
        result = aggregate_transactions([])
        assert result.months == {}
        assert result.expense_by_category == {}
        assert result.total_capital_expenditures == Decimal("0")
        assert result.first_date is None and result.last_date is None

    def test_months_in_chronological_order(self, business_transactions):
        result = aggregate_transactions(business_transactions)
        assert list(result.months) == ["Oct 2023", "Nov 2023", "Dec 2023"]
        assert result.first_date == date(2023, 10, 1)
        assert result.last_date == date(2023, 12, 30)

    def test_year_boundary_ordering(self, make_income):
        result = aggregate_transactions(
            [
                make_income("b", date(2024, 4, 1), 1),
                make_income("a", date(2023, 10, 1), 1),
                make_income("c", date(2024, 1, 1), 1),
            ]
        )
        assert list(result.months) == ["Oct 2023", "Jan 2024", "Apr 2024"]

    def test_bucket_contents(self, business_transactions):
        october = aggregate_transactions(business_transactions).months["Oct 2023"]
        assert october.revenue == Decimal("10000")
        assert october.cost_of_goods_sold == Decimal("4000")
        assert october.operating_expenses == Decimal("1500")
        assert october.cash_inflow == Decimal("45000")
        assert october.cash_outflow == Decimal("12700")
        assert october.depreciation == Decimal("0")

    def test_non_operating_income_is_not_revenue(self, business_transactions):
        result = aggregate_transactions(business_transactions)
        assert result.total("revenue") == Decimal("31000")
        assert result.total("cash_inflow") == Decimal("67300")

    def test_capitalized_expenses_tracked_separately(self, business_transactions):
        result = aggregate_transactions(business_transactions)
        assert result.total_capital_expenditures == Decimal("7200")
        assert "equipment" not in result.expense_by_category

    def test_expense_by_category_only_operating(self, business_transactions):
        result = aggregate_transactions(business_transactions)
        assert result.expense_by_category == {
            "purchased-goods": Decimal("4000"),
            "office-rent": Decimal("1500"),
            "marketing": Decimal("800"),
            "production-wages": Decimal("2000"),
        }

    def test_cogs_opex_partition(self, make_expense):
        transactions = [
            make_expense("1", date(2023, 1, 5), "0.10", "raw-materials"),
            make_expense("2", date(2023, 1, 6), "0.20", "utilities"),
            make_expense("3", date(2023, 2, 7), "0.30", "production-rent"),
            make_expense("4", date(2023, 2, 8), "99.99", "unknown-category"),
        ]
        result = aggregate_transactions(transactions)
        total = result.total("cost_of_goods_sold") + result.total("operating_expenses")
        assert total == Decimal("100.59")
        assert result.total("cost_of_goods_sold") == Decimal("0.40")

    def test_operating_capitalized_expense_excluded_from_pnl(self, make_expense):
        result = aggregate_transactions(
            [make_expense("1", date(2023, 1, 5), 900, "equipment", ActivityType.OPERATING, True)]
        )
        bucket = result.months["Jan 2023"]
        assert bucket.operating_expenses == Decimal("0")
        assert bucket.cash_outflow == Decimal("900")
        assert result.total_capital_expenditures == Decimal("900")

    def test_input_order_does_not_matter(self, business_transactions):
        forward = aggregate_transactions(business_transactions)
        backward = aggregate_transactions(list(reversed(business_transactions)))
        assert forward == backward

    def test_month_label_format_from_config(self, business_transactions):
        result = aggregate_transactions(
            business_transactions, ReportingConfig(month_label_format="%Y-%m")
        )
        assert list(result.months) == ["2023-10", "2023-11", "2023-12"]

    def test_apply_monthly_depreciation(self, business_transactions):
        result = aggregate_transactions(business_transactions)
        apply_monthly_depreciation(result, Decimal("200"))
        assert all(b.depreciation == Decimal("200") for b in result.months.values())

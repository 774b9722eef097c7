"""Tests for the category enumeration and mapping table."""

import pytest

from statement_engine.categories import (
    CATEGORY_RULES,
    COGS_CATEGORIES,
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    CashFlowLine,
    Category,
    PnLLine,
    is_cogs_category,
    rule_for,
)
from statement_engine.models import ActivityType, EntryKind


class TestEnumeration:
    """The enumeration strings are a breaking-change contract."""

    def test_counts(self):
        assert len(EXPENSE_CATEGORIES) == 36
        assert len(INCOME_CATEGORIES) == 12
        assert set(CATEGORY_RULES) == {c.value for c in Category}

    def test_expense_enumeration_order(self):
        assert EXPENSE_CATEGORIES[:5] == (
            "purchased-goods",
            "raw-materials",
            "production-wages",
            "production-rent",
            "production-services",
        )
        assert EXPENSE_CATEGORIES[-1] == "other"

    def test_income_enumeration(self):
        assert INCOME_CATEGORIES == (
            "core-revenue",
            "ancillary-services",
            "commission-income",
            "rental-income",
            "royalties",
            "interest-income",
            "positive-fx",
            "dividends-received",
            "asset-sale-proceeds",
            "loan-proceeds",
            "owner-contribution",
            "other-income",
        )

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            CATEGORY_RULES["new"] = rule_for("other")  # type: ignore[index]


class TestStatementMapping:
    """Test how categories map onto statement lines."""

    def test_cogs_allow_list(self):
        assert COGS_CATEGORIES == {
            "purchased-goods",
            "raw-materials",
            "production-wages",
            "production-rent",
            "production-services",
        }
        assert is_cogs_category("raw-materials")
        assert not is_cogs_category("office-rent")

    @pytest.mark.parametrize(
        "category,line",
        [
            ("loan-interest", PnLLine.FINANCIAL_EXPENSE),
            ("interest-income", PnLLine.FINANCIAL_INCOME),
            ("positive-fx", PnLLine.FINANCIAL_INCOME),
            ("negative-fx", PnLLine.OPERATING_EXPENSE),
            ("core-revenue", PnLLine.REVENUE),
            ("equipment", PnLLine.NONE),
        ],
    )
    def test_pnl_lines(self, category, line):
        assert rule_for(category).pnl_line is line

    @pytest.mark.parametrize(
        "category,line",
        [
            ("asset-sale-proceeds", CashFlowLine.ASSET_DISPOSAL),
            ("loan-proceeds", CashFlowLine.DEBT_PROCEEDS),
            ("loan-repayment", CashFlowLine.DEBT_REPAYMENT),
            ("dividends-paid", CashFlowLine.DIVIDENDS),
            ("owner-contribution", CashFlowLine.EQUITY_CONTRIBUTION),
            ("lease-payments", None),
            ("unknown", None),
        ],
    )
    def test_cash_flow_lines(self, category, line):
        assert rule_for(category).cash_flow_line is line

    def test_owner_withdrawals(self):
        assert rule_for("personal-withdrawals").owner_withdrawal
        assert rule_for("dividends-paid").owner_withdrawal
        assert not rule_for("loan-repayment").owner_withdrawal

    def test_capex_defaults(self):
        for category in ("equipment", "vehicles", "real-estate", "intangibles", "asset-upgrades"):
            rule = rule_for(category)
            assert rule.default_capitalized
            assert rule.default_activity is ActivityType.INVESTING


class TestUnknownCategories:
    def test_unknown_expense_is_operating_expense(self):
        rule = rule_for("crypto-mining")
        assert rule.pnl_line is PnLLine.OPERATING_EXPENSE
        assert rule.cash_flow_line is None

    def test_unknown_income_is_revenue(self):
        assert rule_for("crypto-mining", EntryKind.INCOME).pnl_line is PnLLine.REVENUE

    def test_enum_member_lookup(self):
        assert rule_for(Category.LOAN_PROCEEDS).cash_flow_line is CashFlowLine.DEBT_PROCEEDS

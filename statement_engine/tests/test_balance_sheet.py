"""Tests for the proxy balance sheet builder."""

from decimal import Decimal
import warnings

import pytest

from statement_engine._warnings import ProxyBalanceWarning
from statement_engine.aggregation import aggregate_transactions
from statement_engine.balance_sheet import build_balance_sheet, total_owner_withdrawals
from statement_engine.config import EngineConfig
from statement_engine.models import (
    BalanceSheetMode,
    CashFlowData,
    FinancingDetails,
    PnLData,
)


@pytest.fixture
def pnl():
    return PnLData(
        total_revenue=Decimal("31000"),
        cost_of_goods_sold=Decimal("6000"),
        total_operating_expenses=Decimal("2300"),
        depreciation=Decimal("600"),
        taxes=Decimal("4380"),
        net_profit=Decimal("17520"),
    )


@pytest.fixture
def cash_flow():
    return CashFlowData(
        net_cash_flow=Decimal("45000"),
        operating_activities=Decimal("22700"),
        investing_activities=Decimal("-6000"),
        financing_activities=Decimal("28300"),
        financing_details=FinancingDetails(
            debt_proceeds=Decimal("20000"),
            debt_repayments=Decimal("-5000"),
            dividends=Decimal("-1000"),
            equity_changes=Decimal("15000"),
            other_financing=Decimal("-700"),
        ),
    )


@pytest.fixture
def sheet(pnl, cash_flow, business_transactions):
    return build_balance_sheet(pnl, cash_flow, Decimal("7200"), business_transactions)


class TestAssets:
    def test_current_assets(self, sheet):
        assets = sheet.assets
        assert assets.cash == Decimal("45000")
        assert assets.accounts_receivable == Decimal("3100")
        assert assets.inventory == Decimal("900")
        assert assets.prepaid_expenses == Decimal("115")
        assert assets.short_term_investments == 0
        assert assets.total_current_assets == Decimal("49115")

    def test_non_current_assets(self, sheet):
        assets = sheet.assets
        assert assets.equipment == Decimal("7200")
        assert assets.accumulated_depreciation == Decimal("-600")
        assert assets.net_equipment == Decimal("6600")
        assert assets.total_non_current_assets == Decimal("6600")
        assert assets.total_assets == Decimal("55715")


class TestLiabilitiesAndEquity:
    def test_liabilities(self, sheet):
        liabilities = sheet.liabilities
        assert liabilities.accounts_payable == Decimal("480")
        assert liabilities.accrued_expenses == Decimal("69")
        assert liabilities.taxes_payable == Decimal("4380")
        assert liabilities.total_current_liabilities == Decimal("4929")
        assert liabilities.loans_payable == Decimal("15000")
        assert liabilities.total_liabilities == Decimal("19929")

    def test_equity(self, sheet):
        equity = sheet.equity
        assert equity.authorized_capital == Decimal("15000")
        assert equity.owner_contributions == Decimal("15000")
        assert equity.retained_earnings == Decimal("18520")
        assert equity.owner_withdrawals == Decimal("1500")
        assert equity.total_equity == Decimal("32020")
        assert equity.total_equity == (
            equity.authorized_capital + equity.retained_earnings - equity.owner_withdrawals
        )

    def test_totals_and_balancing_difference(self, sheet):
        assert sheet.total_liabilities_and_equity == Decimal("51949")
        assert sheet.balancing_difference == Decimal("3766")
        assert sheet.mode is BalanceSheetMode.PROXY
        assert not sheet.is_balanced

    def test_owner_withdrawals_include_dividends(self, business_transactions):
        assert total_owner_withdrawals(business_transactions) == Decimal("1500")


class TestRatios:
    def test_ratios(self, sheet):
        ratios = sheet.ratios
        assert ratios.current_ratio == Decimal("49115") / Decimal("4929")
        assert ratios.quick_ratio == Decimal("48215") / Decimal("4929")
        assert ratios.debt_to_equity == Decimal("19929") / Decimal("32020")
        assert ratios.asset_turnover == Decimal("31000") / Decimal("55715")

    def test_ratios_guarded_on_empty_statements(self):
        sheet = build_balance_sheet(PnLData(), CashFlowData(), Decimal("0"), [])
        assert sheet.ratios.current_ratio == 0
        assert sheet.ratios.quick_ratio == 0
        assert sheet.ratios.debt_to_equity == 0
        assert sheet.ratios.asset_turnover == 0
        assert sheet.is_balanced

    def test_negative_equity_gives_zero_leverage(self):
        pnl = PnLData(net_profit=Decimal("-1000"), taxes=Decimal("0"))
        cash_flow = CashFlowData(operating_activities=Decimal("-1000"))
        sheet = build_balance_sheet(pnl, cash_flow, Decimal("0"), [])
        assert sheet.equity.total_equity == Decimal("-1000")
        assert sheet.ratios.debt_to_equity == 0


class TestConfiguration:
    def test_proxy_ratios_from_config(self, pnl, cash_flow, business_transactions):
        config = EngineConfig().override(proxy_ratios__receivables_to_revenue=0.2)
        sheet = build_balance_sheet(pnl, cash_flow, Decimal("7200"), business_transactions, config)
        assert sheet.assets.accounts_receivable == Decimal("6200")

    def test_imbalance_warning_when_enabled(self, pnl, cash_flow, business_transactions):
        config = EngineConfig().override(reporting__warn_on_imbalance=True)
        with pytest.warns(ProxyBalanceWarning, match="off by 3,766.00"):
            build_balance_sheet(pnl, cash_flow, Decimal("7200"), business_transactions, config)

    def test_no_warning_by_default(self, pnl, cash_flow, business_transactions):
        with warnings.catch_warnings():
            warnings.simplefilter("error", ProxyBalanceWarning)
            build_balance_sheet(pnl, cash_flow, Decimal("7200"), business_transactions)

    def test_balance_sheet_uses_aggregated_capex(self, pnl, cash_flow, business_transactions):
        capex = aggregate_transactions(business_transactions).total_capital_expenditures
        sheet = build_balance_sheet(pnl, cash_flow, capex, business_transactions)
        assert sheet.assets.equipment == Decimal("7200")

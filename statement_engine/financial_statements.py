"""Tabular presentation of financial reports.

This module renders a :class:`~statement_engine.models.FinancialReport` as
pandas DataFrames laid out like printed statements (Profit & Loss, Cash
Flow Statement, Balance Sheet), plus a monthly summary, a ratio summary and
a reconciliation report of the accounting identities the engine relies on.

Statement frames have an ``Item`` column, one amount column and a ``Type``
column marking ``subtotal`` and ``total`` rows. Section headers and spacer
rows carry empty strings.

Example:
    Render and export a report::

        from statement_engine import generate_financial_report
        from statement_engine.financial_statements import FinancialStatementGenerator

        report = generate_financial_report(transactions)
        generator = FinancialStatementGenerator(report)
        print(generator.generate_income_statement().to_string(index=False))
        generator.export_csv(Path("out"))
"""

from dataclasses import dataclass
from decimal import Decimal
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from .decimal_utils import is_zero, safe_ratio
from .models import FinancialReport

logger = logging.getLogger(__name__)

Cell = Union[str, float]
Row = Tuple[str, Cell, str]


@dataclass
class FinancialStatementConfig:
    """Configuration for financial statement rendering.

    Attributes:
        decimal_places: Number of decimal places for amounts.
        ratio_decimal_places: Number of decimal places for ratios.
        include_percentages: Whether the P&L gets a "% of Revenue" column.
        amount_column: Header of the amount column.
    """

    decimal_places: int = 2
    ratio_decimal_places: int = 4
    include_percentages: bool = True
    amount_column: str = "Amount"


class FinancialStatementGenerator:
    """Renders one financial report as DataFrames.

    Args:
        report: Report produced by the engine.
        config: Rendering configuration.
    """

    def __init__(self, report: FinancialReport, config: Optional[FinancialStatementConfig] = None):
        self.report = report
        self.config = config or FinancialStatementConfig()

    def _amount(self, value: Decimal) -> float:
        return round(float(value), self.config.decimal_places)

    def _ratio(self, value: Decimal) -> float:
        return round(float(value), self.config.ratio_decimal_places)

    def _frame(self, rows: List[Row]) -> pd.DataFrame:
        return pd.DataFrame(rows, columns=["Item", self.config.amount_column, "Type"])

    # ------------------------------------------------------------------
    # Profit & Loss
    # ------------------------------------------------------------------

    def generate_income_statement(self) -> pd.DataFrame:
        """Generate the Profit & Loss statement.

        Returns:
            DataFrame with one row per P&L line from revenue down to net
            profit, followed by the expense breakdown by category.
        """
        pnl = self.report.pnl
        a = self._amount
        rows: List[Row] = [
            ("REVENUE", "", ""),
            ("  Revenue", a(pnl.total_revenue), ""),
            ("  Cost of Goods Sold", a(-pnl.cost_of_goods_sold), ""),
            ("GROSS PROFIT", a(pnl.gross_profit), "subtotal"),
            ("", "", ""),
            ("OPERATING EXPENSES", "", ""),
            ("  Operating Expenses", a(-pnl.total_operating_expenses), ""),
            ("EBITDA", a(pnl.ebitda), "subtotal"),
            ("  Depreciation and Amortization", a(-pnl.depreciation), ""),
            ("OPERATING INCOME (EBIT)", a(pnl.ebit), "subtotal"),
            ("", "", ""),
            ("NON-OPERATING ITEMS", "", ""),
            ("  Financial Income", a(pnl.financial_income), ""),
            ("  Financial Expense", a(-pnl.financial_expense), ""),
            ("INCOME BEFORE TAXES", a(pnl.ebt), "subtotal"),
            ("  Income Tax", a(-pnl.taxes), ""),
            ("NET PROFIT", a(pnl.net_profit), "total"),
        ]
        self._build_expense_breakdown(rows)
        df = self._frame(rows)

        if self.config.include_percentages:
            df["% of Revenue"] = [
                self._percent_of_revenue(value) if item.strip() else ""
                for item, value in zip(df["Item"], df[self.config.amount_column])
            ]
            df = df[["Item", self.config.amount_column, "% of Revenue", "Type"]]
        return df

    def _build_expense_breakdown(self, rows: List[Row]) -> None:
        """Append the expense-by-category section."""
        breakdown = self.report.pnl.expense_by_category
        if not breakdown:
            return
        rows.append(("", "", ""))
        rows.append(("EXPENSES BY CATEGORY", "", ""))
        for entry in breakdown:
            rows.append((f"  {entry.name}", self._amount(entry.value), ""))

    def _percent_of_revenue(self, value: Cell) -> Cell:
        if value == "":
            return ""
        return round(
            float(safe_ratio(Decimal(str(value)), self.report.pnl.total_revenue)) * 100, 1
        )

    # ------------------------------------------------------------------
    # Cash flow
    # ------------------------------------------------------------------

    def generate_cash_flow_statement(self) -> pd.DataFrame:
        """Generate the cash flow statement (indirect method).

        Returns:
            DataFrame with operating, investing and financing sections and
            the net change in cash.
        """
        cash_flow = self.report.cash_flow
        rows: List[Row] = []
        self._build_operating_activities(rows)
        self._build_investing_activities(rows)
        self._build_financing_activities(rows)
        rows.append(("NET CHANGE IN CASH", self._amount(cash_flow.net_cash_flow), "total"))
        return self._frame(rows)

    def _build_operating_activities(self, rows: List[Row]) -> None:
        cash_flow = self.report.cash_flow
        details = cash_flow.operating_details
        a = self._amount
        rows.append(("OPERATING ACTIVITIES", "", ""))
        rows.append(("  Net Income", a(details.from_net_income), ""))
        rows.append(("  Adjustments to reconcile:", "", ""))
        rows.append(("    Depreciation", a(details.depreciation), ""))
        rows.append(("    Change in Working Capital", a(details.working_capital_changes), ""))
        rows.append(
            ("  Net Cash from Operating Activities", a(cash_flow.operating_activities), "subtotal")
        )
        rows.append(("", "", ""))

    def _build_investing_activities(self, rows: List[Row]) -> None:
        cash_flow = self.report.cash_flow
        details = cash_flow.investing_details
        a = self._amount
        rows.append(("INVESTING ACTIVITIES", "", ""))
        rows.append(("  Capital Expenditures", a(details.capital_expenditures), ""))
        rows.append(("  Proceeds from Asset Disposals", a(details.asset_disposals), ""))
        rows.append(("  Other Investments", a(details.investments), ""))
        rows.append(
            ("  Net Cash from Investing Activities", a(cash_flow.investing_activities), "subtotal")
        )
        rows.append(("", "", ""))

    def _build_financing_activities(self, rows: List[Row]) -> None:
        cash_flow = self.report.cash_flow
        details = cash_flow.financing_details
        a = self._amount
        rows.append(("FINANCING ACTIVITIES", "", ""))
        rows.append(("  Debt Proceeds", a(details.debt_proceeds), ""))
        rows.append(("  Debt Repayments", a(details.debt_repayments), ""))
        rows.append(("  Dividends Paid", a(details.dividends), ""))
        rows.append(("  Owner Contributions", a(details.equity_changes), ""))
        rows.append(("  Other Financing", a(details.other_financing), ""))
        rows.append(
            ("  Net Cash from Financing Activities", a(cash_flow.financing_activities), "subtotal")
        )
        rows.append(("", "", ""))

    # ------------------------------------------------------------------
    # Balance sheet
    # ------------------------------------------------------------------

    def generate_balance_sheet(self) -> pd.DataFrame:
        """Generate the proxy balance sheet.

        Returns:
            DataFrame with assets, liabilities and equity sections. The last
            row is the balancing difference of the proxy statement.
        """
        rows: List[Row] = []
        self._build_assets_section(rows)
        self._build_liabilities_section(rows)
        self._build_equity_section(rows)
        return self._frame(rows)

    def _build_assets_section(self, rows: List[Row]) -> None:
        """Build assets section of balance sheet."""
        assets = self.report.balance_sheet.assets
        a = self._amount
        rows.append(("ASSETS", "", ""))
        rows.append(("Current Assets", "", ""))
        rows.append(("  Cash and Cash Equivalents", a(assets.cash), ""))
        rows.append(("  Accounts Receivable", a(assets.accounts_receivable), ""))
        rows.append(("  Inventory", a(assets.inventory), ""))
        rows.append(("  Short-Term Investments", a(assets.short_term_investments), ""))
        rows.append(("  Prepaid Expenses", a(assets.prepaid_expenses), ""))
        rows.append(("  Total Current Assets", a(assets.total_current_assets), "subtotal"))
        rows.append(("", "", ""))
        rows.append(("Non-Current Assets", "", ""))
        rows.append(("  Equipment", a(assets.equipment), ""))
        rows.append(("  Real Estate", a(assets.real_estate), ""))
        rows.append(("  Intangible Assets", a(assets.intangible_assets), ""))
        rows.append(("  Long-Term Investments", a(assets.long_term_investments), ""))
        rows.append(("  Less: Accumulated Depreciation", a(assets.accumulated_depreciation), ""))
        rows.append(("  Net Equipment", a(assets.net_equipment), ""))
        rows.append(("  Total Non-Current Assets", a(assets.total_non_current_assets), "subtotal"))
        rows.append(("TOTAL ASSETS", a(assets.total_assets), "total"))
        rows.append(("", "", ""))

    def _build_liabilities_section(self, rows: List[Row]) -> None:
        """Build liabilities section of balance sheet."""
        liabilities = self.report.balance_sheet.liabilities
        a = self._amount
        rows.append(("LIABILITIES", "", ""))
        rows.append(("Current Liabilities", "", ""))
        rows.append(("  Accounts Payable", a(liabilities.accounts_payable), ""))
        rows.append(("  Short-Term Loans", a(liabilities.short_term_loans), ""))
        rows.append(("  Accrued Expenses", a(liabilities.accrued_expenses), ""))
        rows.append(("  Taxes Payable", a(liabilities.taxes_payable), ""))
        rows.append(
            ("  Total Current Liabilities", a(liabilities.total_current_liabilities), "subtotal")
        )
        rows.append(("", "", ""))
        rows.append(("Non-Current Liabilities", "", ""))
        rows.append(("  Loans Payable", a(liabilities.loans_payable), ""))
        rows.append(("  Deferred Taxes", a(liabilities.deferred_taxes), ""))
        rows.append(
            (
                "  Total Non-Current Liabilities",
                a(liabilities.total_non_current_liabilities),
                "subtotal",
            )
        )
        rows.append(("TOTAL LIABILITIES", a(liabilities.total_liabilities), "total"))
        rows.append(("", "", ""))

    def _build_equity_section(self, rows: List[Row]) -> None:
        """Build equity section of balance sheet."""
        balance_sheet = self.report.balance_sheet
        equity = balance_sheet.equity
        a = self._amount
        rows.append(("EQUITY", "", ""))
        rows.append(("  Authorized Capital", a(equity.authorized_capital), ""))
        rows.append(("  Retained Earnings", a(equity.retained_earnings), ""))
        rows.append(("  Owner Contributions", a(equity.owner_contributions), ""))
        rows.append(("  Owner Withdrawals", a(equity.owner_withdrawals), ""))
        rows.append(("TOTAL EQUITY", a(equity.total_equity), "total"))
        rows.append(("", "", ""))
        rows.append(
            (
                "TOTAL LIABILITIES + EQUITY",
                a(balance_sheet.total_liabilities_and_equity),
                "total",
            )
        )
        rows.append(("Balancing Difference", a(balance_sheet.balancing_difference), ""))

    # ------------------------------------------------------------------
    # Summaries
    # ------------------------------------------------------------------

    def generate_monthly_summary(self) -> pd.DataFrame:
        """Generate a month-by-month summary of the P&L and cash series.

        Returns:
            DataFrame indexed by month label in chronological order, with
            P&L, cash movement, cumulative cash and operating margin
            columns. Empty for an empty report.
        """
        pnl_months = self.report.pnl.monthly_data
        cash_months = {m.month: m for m in self.report.cash_flow.monthly_data}
        columns = [
            "Revenue",
            "Cost of Goods Sold",
            "Operating Expenses",
            "Depreciation",
            "Profit",
            "Cash Inflow",
            "Cash Outflow",
            "Net Cash Flow",
        ]
        records = []
        for month in pnl_months:
            cash = cash_months.get(month.month)
            records.append(
                [
                    month.revenue,
                    month.cost_of_goods_sold,
                    month.operating_expenses,
                    month.depreciation,
                    month.profit,
                    cash.inflow if cash else 0,
                    cash.outflow if cash else 0,
                    cash.net if cash else 0,
                ]
            )

        index = pd.Index([m.month for m in pnl_months], name="Month")
        values = np.array(records, dtype=float).reshape(len(records), len(columns))
        df = pd.DataFrame(values, index=index, columns=columns)

        df["Cumulative Cash"] = np.cumsum(df["Net Cash Flow"].to_numpy())
        revenue = df["Revenue"].to_numpy()
        profit = df["Profit"].to_numpy()
        with np.errstate(divide="ignore", invalid="ignore"):
            df["Operating Margin"] = np.where(revenue > 0, profit / revenue, 0.0)
        return df.round(self.config.decimal_places)

    def generate_ratio_summary(self) -> pd.DataFrame:
        """Collect every ratio of the report in one table.

        Returns:
            DataFrame with ``Statement``, ``Ratio`` and ``Value`` columns.
        """
        report = self.report
        r = self._ratio
        pnl_ratios = report.pnl.ratios
        bs_ratios = report.balance_sheet.ratios
        liquidity = report.cash_flow.liquidity
        rows = [
            ("Profit & Loss", "Gross Margin", r(pnl_ratios.gross_margin)),
            ("Profit & Loss", "Operating Margin", r(pnl_ratios.operating_margin)),
            ("Profit & Loss", "Net Margin", r(pnl_ratios.net_margin)),
            ("Profit & Loss", "Return on Assets", r(pnl_ratios.roa)),
            ("Profit & Loss", "Return on Equity", r(pnl_ratios.roe)),
            ("Cash Flow", "Operating Cash Flow Ratio", r(liquidity.operating_cash_flow_ratio)),
            ("Cash Flow", "Cash Conversion Cycle (days)", float(liquidity.cash_conversion_cycle)),
            ("Balance Sheet", "Current Ratio", r(bs_ratios.current_ratio)),
            ("Balance Sheet", "Quick Ratio", r(bs_ratios.quick_ratio)),
            ("Balance Sheet", "Debt to Equity", r(bs_ratios.debt_to_equity)),
            ("Balance Sheet", "Asset Turnover", r(bs_ratios.asset_turnover)),
        ]
        return pd.DataFrame(rows, columns=["Statement", "Ratio", "Value"])

    def generate_reconciliation_report(self) -> pd.DataFrame:
        """Check the accounting identities between the three statements.

        Returns:
            DataFrame with ``Check``, ``Value``, ``Expected`` and ``Status``
            columns. The balance sheet check reports ``PROXY`` instead of
            ``FAIL`` when the proxy statement does not balance.
        """
        report = self.report
        pnl = report.pnl
        cash_flow = report.cash_flow
        balance_sheet = report.balance_sheet
        financing = cash_flow.financing_details
        investing = cash_flow.investing_details
        operating = cash_flow.operating_details

        checks = [
            (
                "Assets = Liabilities + Equity",
                balance_sheet.assets.total_assets,
                balance_sheet.total_liabilities_and_equity,
                "PROXY",
            ),
            (
                "Cash = Net Cash Flow",
                balance_sheet.assets.cash,
                cash_flow.net_cash_flow,
                "FAIL",
            ),
            (
                "Operating CF = Net Income + Depreciation + Working Capital",
                cash_flow.operating_activities,
                operating.from_net_income + operating.depreciation + operating.working_capital_changes,
                "FAIL",
            ),
            (
                "Investing CF = Detail Lines",
                cash_flow.investing_activities,
                investing.capital_expenditures + investing.asset_disposals + investing.investments,
                "FAIL",
            ),
            (
                "Financing CF = Detail Lines",
                cash_flow.financing_activities,
                financing.debt_proceeds
                + financing.debt_repayments
                + financing.dividends
                + financing.equity_changes
                + financing.other_financing,
                "FAIL",
            ),
            (
                "Total Equity = Capital + Retained Earnings - Withdrawals",
                balance_sheet.equity.total_equity,
                balance_sheet.equity.authorized_capital
                + balance_sheet.equity.retained_earnings
                - balance_sheet.equity.owner_withdrawals,
                "FAIL",
            ),
            (
                "Taxes Payable = Income Tax",
                balance_sheet.liabilities.taxes_payable,
                pnl.taxes,
                "FAIL",
            ),
        ]

        rows = []
        for name, value, expected, failure in checks:
            status = "PASS" if is_zero(value - expected) else failure
            rows.append((name, self._amount(value), self._amount(expected), status))
        return pd.DataFrame(rows, columns=["Check", "Value", "Expected", "Status"])

    def export_csv(self, directory: Path) -> Dict[str, Path]:
        """Write every table to a CSV file.

        Args:
            directory: Output directory; created if missing.

        Returns:
            Mapping of table name to written file path.
        """
        directory.mkdir(parents=True, exist_ok=True)
        tables = {
            "income_statement": self.generate_income_statement(),
            "cash_flow_statement": self.generate_cash_flow_statement(),
            "balance_sheet": self.generate_balance_sheet(),
            "monthly_summary": self.generate_monthly_summary(),
            "ratios": self.generate_ratio_summary(),
            "reconciliation": self.generate_reconciliation_report(),
        }
        paths = {}
        for name, df in tables.items():
            path = directory / f"{name}.csv"
            df.to_csv(path, index=name == "monthly_summary")
            paths[name] = path
        logger.info(f"Exported {len(paths)} statement tables to {directory}")
        return paths

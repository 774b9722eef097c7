"""Financial report assembly.

Runs the statement builders in their fixed dependency order and finalizes
the ratios that need totals from more than one statement:

1. aggregate transactions into monthly buckets
2. schedule depreciation of capitalized spend
3. build the P&L
4. build the cash flow statement from net profit and depreciation
5. build the proxy balance sheet from the P&L and cash flow totals
6. finalize return on assets, return on equity and the operating cash
   flow ratio from the balance sheet totals

The balance sheet only consumes finished flow totals, so the ratios that
depend on it are filled in by a separate pass over the immutable builder
output instead of being threaded through the builders.

Example:
    Generate a report and serialize it::

        from statement_engine import generate_financial_report

        report = generate_financial_report(transactions)
        print(report.pnl.net_profit, report.balance_sheet.assets.total_assets)
        payload = report.to_dict()
"""

from dataclasses import replace
import logging
from typing import Iterable, Optional

from .aggregation import aggregate_transactions, apply_monthly_depreciation, sort_transactions
from .balance_sheet import build_balance_sheet
from .cash_flow import build_cash_flow_statement
from .config import EngineConfig
from .decimal_utils import safe_ratio
from .depreciation import months_in_period, schedule_depreciation
from .income_statement import build_income_statement
from .models import DateRange, FinancialReport, Transaction

logger = logging.getLogger(__name__)


def empty_financial_report() -> FinancialReport:
    """Return the canonical report of an empty transaction list.

    Every amount and ratio is zero, every series is empty, the cash
    conversion cycle is zero and the date range has no bounds.
    """
    return FinancialReport()


def finalize_ratios(report: FinancialReport) -> FinancialReport:
    """Fill in the ratios that need balance sheet totals.

    Sets ``pnl.ratios.roa``, ``pnl.ratios.roe`` and
    ``cash_flow.liquidity.operating_cash_flow_ratio``. Each ratio is zero
    unless its denominator is positive.

    Args:
        report: Report with placeholder ratios.

    Returns:
        New report with finalized ratios; the input is not modified.
    """
    pnl = report.pnl
    cash_flow = report.cash_flow
    balance_sheet = report.balance_sheet

    pnl_ratios = replace(
        pnl.ratios,
        roa=safe_ratio(pnl.net_profit, balance_sheet.assets.total_assets),
        roe=safe_ratio(pnl.net_profit, balance_sheet.equity.total_equity),
    )
    liquidity = replace(
        cash_flow.liquidity,
        operating_cash_flow_ratio=safe_ratio(
            cash_flow.operating_activities,
            balance_sheet.liabilities.total_current_liabilities,
        ),
    )
    return replace(
        report,
        pnl=replace(pnl, ratios=pnl_ratios),
        cash_flow=replace(cash_flow, liquidity=liquidity),
    )


class FinancialReportGenerator:
    """Derives financial reports under one engine configuration.

    The generator holds no state besides its configuration; ``generate`` is
    a pure function of its input and may be called concurrently.

    Args:
        config: Engine configuration; defaults to the published policy.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    def generate(self, transactions: Iterable[Transaction]) -> FinancialReport:
        """Derive the P&L, cash flow statement and balance sheet.

        Args:
            transactions: Classified transactions in any order, possibly
                empty. Records must already be validated.

        Returns:
            Complete FinancialReport.
        """
        ordered = sort_transactions(transactions)
        if not ordered:
            logger.info("No transactions supplied; returning empty report")
            return empty_financial_report()

        config = self.config
        aggregation = aggregate_transactions(ordered, config.reporting)

        months = months_in_period(aggregation.first_date, aggregation.last_date)
        schedule = schedule_depreciation(
            aggregation.total_capital_expenditures, months, config.depreciation
        )
        apply_monthly_depreciation(aggregation, schedule.monthly_depreciation)

        pnl = build_income_statement(aggregation, schedule.total_depreciation, ordered, config)
        cash_flow = build_cash_flow_statement(
            ordered, aggregation, pnl.net_profit, schedule.total_depreciation, config
        )
        balance_sheet = build_balance_sheet(
            pnl, cash_flow, aggregation.total_capital_expenditures, ordered, config
        )

        report = finalize_ratios(
            FinancialReport(
                pnl=pnl,
                cash_flow=cash_flow,
                balance_sheet=balance_sheet,
                date_range=DateRange(start=aggregation.first_date, end=aggregation.last_date),
            )
        )

        logger.info(
            f"Generated report for {len(ordered)} transactions over {months} months "
            f"({aggregation.first_date} to {aggregation.last_date}): "
            f"revenue={pnl.total_revenue:,.2f}, net profit={pnl.net_profit:,.2f}, "
            f"net cash flow={cash_flow.net_cash_flow:,.2f}"
        )
        return report


def generate_financial_report(
    transactions: Iterable[Transaction], config: Optional[EngineConfig] = None
) -> FinancialReport:
    """Derive a complete financial report from classified transactions.

    Args:
        transactions: Classified transactions in any order, possibly empty.
        config: Engine configuration; defaults to the published policy.

    Returns:
        Complete FinancialReport.
    """
    return FinancialReportGenerator(config).generate(transactions)

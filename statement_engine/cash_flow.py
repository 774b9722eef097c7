"""Cash flow statement builder (indirect method).

Each transaction's cash effect is assigned to the activity its classifier
gave it: operating, investing or financing. Operating cash flow is then
reconciled to net profit through depreciation and a working capital
plug, since no receivable or payable sub-ledger exists to derive the
working capital movement independently.

Detail lines are isolated by category through the shared category table
and signed as cash effects: proceeds and contributions are positive,
capital expenditure, repayments and dividends negative. Whatever part of
the financing total none of the isolated categories explain is reported
as ``other_financing``, so the financing details always sum to the
financing total.
"""

from decimal import Decimal
import logging
from typing import Dict, Iterable, Optional

from .aggregation import AggregationResult
from .categories import CashFlowLine, rule_for
from .config import EngineConfig
from .decimal_utils import ZERO
from .models import (
    ActivityType,
    CashFlowData,
    CashFlowMonth,
    FinancingDetails,
    InvestingDetails,
    LiquidityMetrics,
    OperatingDetails,
    Transaction,
)

logger = logging.getLogger(__name__)


def activity_totals(transactions: Iterable[Transaction]) -> Dict[ActivityType, Decimal]:
    """Net cash effect per activity: income minus expense within each type."""
    totals = {activity: ZERO for activity in ActivityType}
    for txn in transactions:
        totals[txn.transaction_type] += txn.signed_amount
    return totals


def detail_line_totals(transactions: Iterable[Transaction]) -> Dict[CashFlowLine, Decimal]:
    """Sum transaction amounts per cash flow detail line, as magnitudes."""
    totals = {line: ZERO for line in CashFlowLine}
    for txn in transactions:
        line = rule_for(txn.category, txn.type).cash_flow_line
        if line is not None:
            totals[line] += txn.amount
    return totals


def build_cash_flow_statement(
    transactions: Iterable[Transaction],
    aggregation: AggregationResult,
    net_profit: Decimal,
    total_depreciation: Decimal,
    config: Optional[EngineConfig] = None,
) -> CashFlowData:
    """Build the cash flow statement.

    Args:
        transactions: Classified transactions.
        aggregation: Monthly buckets for the cash movement series.
        net_profit: Net profit from the P&L.
        total_depreciation: Depreciation charged over the period.
        config: Engine configuration supplying the cash conversion cycle.

    Returns:
        CashFlowData with the operating cash flow ratio still zero.
    """
    config = config or EngineConfig()
    transactions = list(transactions)

    activities = activity_totals(transactions)
    operating = activities[ActivityType.OPERATING]
    investing = activities[ActivityType.INVESTING]
    financing = activities[ActivityType.FINANCING]

    operating_details = OperatingDetails(
        from_net_income=net_profit,
        depreciation=total_depreciation,
        working_capital_changes=operating - net_profit - total_depreciation,
    )

    lines = detail_line_totals(transactions)
    capital_expenditures = -sum(
        (t.amount for t in transactions if t.is_expense and t.is_capitalized), ZERO
    )
    asset_disposals = lines[CashFlowLine.ASSET_DISPOSAL]
    investing_details = InvestingDetails(
        capital_expenditures=capital_expenditures,
        asset_disposals=asset_disposals,
        investments=investing - capital_expenditures - asset_disposals,
    )

    debt_proceeds = lines[CashFlowLine.DEBT_PROCEEDS]
    debt_repayments = -lines[CashFlowLine.DEBT_REPAYMENT]
    dividends = -lines[CashFlowLine.DIVIDENDS]
    equity_changes = lines[CashFlowLine.EQUITY_CONTRIBUTION]
    other_financing = financing - (debt_proceeds + debt_repayments + dividends + equity_changes)
    financing_details = FinancingDetails(
        debt_proceeds=debt_proceeds,
        debt_repayments=debt_repayments,
        dividends=dividends,
        equity_changes=equity_changes,
        other_financing=other_financing,
    )
    if other_financing != ZERO:
        logger.debug(f"Financing activity not matched by detail lines: {other_financing:,.2f}")

    monthly_data = tuple(
        CashFlowMonth(
            month=label,
            inflow=bucket.cash_inflow,
            outflow=bucket.cash_outflow,
            net=bucket.cash_inflow - bucket.cash_outflow,
        )
        for label, bucket in aggregation.months.items()
    )

    net_cash_flow = operating + investing + financing
    logger.debug(
        f"Cash flow: operating={operating:,.2f}, investing={investing:,.2f}, "
        f"financing={financing:,.2f}, net={net_cash_flow:,.2f}"
    )

    return CashFlowData(
        net_cash_flow=net_cash_flow,
        operating_activities=operating,
        investing_activities=investing,
        financing_activities=financing,
        operating_details=operating_details,
        investing_details=investing_details,
        financing_details=financing_details,
        monthly_data=monthly_data,
        liquidity=LiquidityMetrics(
            cash_conversion_cycle=config.liquidity.cash_conversion_cycle_days
        ),
    )

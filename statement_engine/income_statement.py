"""Profit & Loss statement builder.

Computes the income statement from aggregated monthly buckets in a fixed
order, each line depending on the previous one:

1. revenue, cost of goods sold and operating expenses summed over months
2. gross profit = revenue - COGS
3. EBITDA = gross profit - operating expenses
4. EBIT = EBITDA - depreciation
5. EBT = EBIT + financial income - financial expense
6. taxes = max(0, EBT * rate)
7. net profit = EBT - taxes
8. margins against revenue, 0 when there is no revenue

Return on assets and equity need balance sheet totals and are left at zero
here; the report assembler fills them in.

The monthly series only lists months that have transactions, while total
depreciation covers every calendar month of the period. When a month has
no transactions, or the charge is capped at cost, the monthly profits do
not add up to EBIT.
"""

from decimal import Decimal
import logging
from typing import Iterable, List, Optional, Tuple

from .aggregation import AggregationResult
from .categories import PnLLine, rule_for
from .config import EngineConfig
from .decimal_utils import ZERO, safe_ratio
from .models import CategoryAmount, PnLData, PnLMonth, PnLRatios, Transaction

logger = logging.getLogger(__name__)


def financial_items(transactions: Iterable[Transaction]) -> Tuple[Decimal, Decimal]:
    """Sum financial income and financial expense by category.

    Interest income and positive FX gains are financial income; loan
    interest is financial expense. The match is on category and direction
    only, independent of the transaction's activity.

    Args:
        transactions: Classified transactions.

    Returns:
        ``(financial_income, financial_expense)``.
    """
    income = ZERO
    expense = ZERO
    for txn in transactions:
        line = rule_for(txn.category, txn.type).pnl_line
        if txn.is_income and line is PnLLine.FINANCIAL_INCOME:
            income += txn.amount
        elif txn.is_expense and line is PnLLine.FINANCIAL_EXPENSE:
            expense += txn.amount
    return income, expense


def expense_breakdown(
    aggregation: AggregationResult, total_depreciation: Decimal, depreciation_label: str
) -> Tuple[CategoryAmount, ...]:
    """Expense-by-category breakdown, largest first.

    A synthetic depreciation entry is appended after the sorted categories
    when depreciation was charged.
    """
    entries: List[CategoryAmount] = [
        CategoryAmount(name=name, value=value)
        for name, value in sorted(
            aggregation.expense_by_category.items(), key=lambda item: item[1], reverse=True
        )
    ]
    if total_depreciation > ZERO:
        entries.append(CategoryAmount(name=depreciation_label, value=total_depreciation))
    return tuple(entries)


def monthly_series(aggregation: AggregationResult) -> Tuple[PnLMonth, ...]:
    """Per-month P&L points for months with transactions; profit is the month's EBIT."""
    return tuple(
        PnLMonth(
            month=label,
            revenue=bucket.revenue,
            cost_of_goods_sold=bucket.cost_of_goods_sold,
            operating_expenses=bucket.operating_expenses,
            depreciation=bucket.depreciation,
            profit=bucket.revenue
            - bucket.cost_of_goods_sold
            - bucket.operating_expenses
            - bucket.depreciation,
        )
        for label, bucket in aggregation.months.items()
    )


def build_income_statement(
    aggregation: AggregationResult,
    total_depreciation: Decimal,
    transactions: Iterable[Transaction],
    config: Optional[EngineConfig] = None,
) -> PnLData:
    """Build the Profit & Loss statement.

    Args:
        aggregation: Monthly buckets and expense breakdown.
        total_depreciation: Depreciation charged over the period.
        transactions: Classified transactions, used to isolate financial
            income and expense.
        config: Engine configuration supplying the tax rate and labels.

    Returns:
        PnLData with ``roa`` and ``roe`` still zero.
    """
    config = config or EngineConfig()

    total_revenue = aggregation.total("revenue")
    cost_of_goods_sold = aggregation.total("cost_of_goods_sold")
    total_operating_expenses = aggregation.total("operating_expenses")

    gross_profit = total_revenue - cost_of_goods_sold
    ebitda = gross_profit - total_operating_expenses
    ebit = ebitda - total_depreciation

    financial_income, financial_expense = financial_items(transactions)
    ebt = ebit + financial_income - financial_expense

    # No refund or carryforward on losses
    taxes = max(ZERO, ebt * config.tax.rate)
    net_profit = ebt - taxes

    ratios = PnLRatios(
        gross_margin=safe_ratio(gross_profit, total_revenue),
        operating_margin=safe_ratio(ebit, total_revenue),
        net_margin=safe_ratio(net_profit, total_revenue),
    )

    logger.debug(
        f"P&L: revenue={total_revenue:,.2f}, EBITDA={ebitda:,.2f}, "
        f"EBT={ebt:,.2f}, net profit={net_profit:,.2f}"
    )

    return PnLData(
        total_revenue=total_revenue,
        cost_of_goods_sold=cost_of_goods_sold,
        gross_profit=gross_profit,
        total_operating_expenses=total_operating_expenses,
        ebitda=ebitda,
        depreciation=total_depreciation,
        ebit=ebit,
        financial_income=financial_income,
        financial_expense=financial_expense,
        ebt=ebt,
        taxes=taxes,
        net_profit=net_profit,
        monthly_data=monthly_series(aggregation),
        expense_by_category=expense_breakdown(
            aggregation, total_depreciation, config.reporting.depreciation_label
        ),
        ratios=ratios,
    )

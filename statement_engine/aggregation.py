"""Period aggregation of classified transactions.

Groups a transaction list by calendar month and by expense category,
producing the running sums the statement builders consume. The aggregator
is a pure function of its input.

Month labels are human readable ("Oct 2023" with the default format) and
are therefore ordered by re-deriving the first day of the month from each
label, never by string order ("Apr 2024" sorts after "Oct 2023").

Example:
    Aggregate a statement::

        result = aggregate_transactions(transactions)
        for label, bucket in result.months.items():
            print(label, bucket.revenue, bucket.cash_outflow)
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
import logging
from typing import Dict, Iterable, List, Optional

from .categories import is_cogs_category
from .config import ReportingConfig
from .decimal_utils import ZERO
from .models import ActivityType, MonthlyBucket, Transaction

logger = logging.getLogger(__name__)


@dataclass
class AggregationResult:
    """Output of :func:`aggregate_transactions`.

    Attributes:
        months: Month label -> bucket, in chronological order.
        expense_by_category: Category -> summed operating, non-capitalized
            expense amount.
        total_capital_expenditures: Sum of all capitalized expenses.
        first_date: Date of the earliest transaction.
        last_date: Date of the latest transaction.
    """

    months: Dict[str, MonthlyBucket] = field(default_factory=dict)
    expense_by_category: Dict[str, Decimal] = field(default_factory=dict)
    total_capital_expenditures: Decimal = ZERO
    first_date: Optional[date] = None
    last_date: Optional[date] = None

    def total(self, attribute: str) -> Decimal:
        """Sum one bucket attribute across all months.

        Args:
            attribute: MonthlyBucket field name, e.g. ``"revenue"``.

        Returns:
            Period total.
        """
        return sum((getattr(b, attribute) for b in self.months.values()), ZERO)


def sort_transactions(transactions: Iterable[Transaction]) -> List[Transaction]:
    """Return transactions sorted ascending by date; ties keep input order."""
    return sorted(transactions, key=lambda t: t.date)


def month_label(day: date, label_format: str = "%b %Y") -> str:
    """Format the month a date falls in, e.g. ``"Oct 2023"``."""
    return day.strftime(label_format)


def month_label_to_date(label: str, label_format: str = "%b %Y") -> date:
    """Re-derive the first day of the month from a month label.

    Args:
        label: Label produced by :func:`month_label`.
        label_format: Format the label was produced with.

    Returns:
        First day of the labelled month.
    """
    return datetime.strptime(label, label_format).date().replace(day=1)


def sort_month_labels(labels: Iterable[str], label_format: str = "%b %Y") -> List[str]:
    """Order month labels chronologically."""
    return sorted(labels, key=lambda label: month_label_to_date(label, label_format))


def aggregate_transactions(
    transactions: Iterable[Transaction], reporting: Optional[ReportingConfig] = None
) -> AggregationResult:
    """Aggregate transactions into monthly buckets and expense categories.

    Income adds to the month's cash inflow and, when operating, to revenue.
    Expenses add to cash outflow; operating, non-capitalized expenses are
    split into cost of goods sold or operating expenses by category and
    summed per category. Capitalized expenses stay out of both P&L buckets
    and are totalled separately for depreciation.

    Args:
        transactions: Classified transactions in any order.
        reporting: Presentation config supplying the month label format.

    Returns:
        AggregationResult; empty when there are no transactions.
    """
    reporting = reporting or ReportingConfig()
    ordered = sort_transactions(transactions)
    result = AggregationResult()
    if not ordered:
        return result

    buckets: Dict[str, MonthlyBucket] = {}
    expense_by_category: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    capex = ZERO

    for txn in ordered:
        label = month_label(txn.date, reporting.month_label_format)
        bucket = buckets.get(label)
        if bucket is None:
            bucket = buckets[label] = MonthlyBucket()

        if txn.is_income:
            bucket.cash_inflow += txn.amount
            if txn.transaction_type is ActivityType.OPERATING:
                bucket.revenue += txn.amount
            continue

        bucket.cash_outflow += txn.amount
        if txn.is_capitalized:
            capex += txn.amount
        elif txn.transaction_type is ActivityType.OPERATING:
            if is_cogs_category(txn.category):
                bucket.cost_of_goods_sold += txn.amount
            else:
                bucket.operating_expenses += txn.amount
            expense_by_category[txn.category] += txn.amount

    result.months = {
        label: buckets[label]
        for label in sort_month_labels(buckets, reporting.month_label_format)
    }
    result.expense_by_category = dict(expense_by_category)
    result.total_capital_expenditures = capex
    result.first_date = ordered[0].date
    result.last_date = ordered[-1].date

    logger.debug(
        f"Aggregated {len(ordered)} transactions into {len(result.months)} months "
        f"and {len(result.expense_by_category)} expense categories"
    )
    return result


def apply_monthly_depreciation(result: AggregationResult, monthly_depreciation: Decimal) -> None:
    """Set the constant monthly depreciation charge on every bucket.

    Args:
        result: Aggregation to update in place.
        monthly_depreciation: Straight-line charge per month.
    """
    for bucket in result.months.values():
        bucket.depreciation = monthly_depreciation

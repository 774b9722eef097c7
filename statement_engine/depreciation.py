"""Straight-line depreciation of capitalized expenditure.

All capitalized spend of the period is pooled and depreciated over a single
useful life (36 months by default) regardless of asset type. The charge
runs for every calendar month the report spans, inclusive of the first and
last month.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
import logging
from typing import Optional, Union

from .config import DepreciationConfig
from .decimal_utils import ZERO, to_decimal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DepreciationSchedule:
    """Result of :func:`schedule_depreciation`.

    Attributes:
        monthly_depreciation: Straight-line charge per month.
        total_depreciation: Charge accumulated over the report period.
        months: Number of months in the report period.
    """

    monthly_depreciation: Decimal = ZERO
    total_depreciation: Decimal = ZERO
    months: int = 0


def months_in_period(first: Optional[date], last: Optional[date]) -> int:
    """Count the calendar months spanned by two dates, inclusive.

    Args:
        first: Earliest transaction date.
        last: Latest transaction date.

    Returns:
        Month count; 0 when either date is missing.

    Example:
        >>> months_in_period(date(2023, 10, 31), date(2023, 11, 1))
        2
    """
    if first is None or last is None:
        return 0
    return (last.year - first.year) * 12 + (last.month - first.month) + 1


def schedule_depreciation(
    total_capital_expenditures: Union[Decimal, float, int],
    months: int,
    config: Optional[DepreciationConfig] = None,
) -> DepreciationSchedule:
    """Depreciate pooled capital expenditure on a straight-line basis.

    ``monthly = capex / useful_life_months`` and ``total = monthly * months``.
    With ``cap_at_cost`` the total never exceeds the capitalized cost, so
    assets held beyond their useful life stop depreciating at zero net book
    value.

    Args:
        total_capital_expenditures: Sum of capitalized expense amounts.
        months: Months in the report period.
        config: Depreciation policy; defaults to a 36-month life.

    Returns:
        DepreciationSchedule; all zero when there is no capital expenditure.
    """
    config = config or DepreciationConfig()
    capex = to_decimal(total_capital_expenditures)
    if capex <= ZERO or months <= 0:
        return DepreciationSchedule(months=max(months, 0))

    monthly = capex / Decimal(config.useful_life_months)
    total = monthly * months
    if config.cap_at_cost and total > capex:
        logger.debug(
            f"Depreciation over {months} months exceeds cost; capping at {capex:,.2f}"
        )
        total = capex

    return DepreciationSchedule(monthly_depreciation=monthly, total_depreciation=total, months=months)

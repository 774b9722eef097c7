"""Counterparty turnover and lender debt reports.

Both reports read the ``counterparty`` name an input adapter attached to a
transaction; transactions without one are ignored. They are independent of
the three statements and can be derived from any transaction list::

    summaries = build_counterparty_report(transactions)
    debts = build_debt_report(transactions)
    debts.total_payables
"""

from collections import defaultdict
from decimal import Decimal
import logging
from typing import Dict, Iterable, Optional, Tuple

from .categories import CashFlowLine, rule_for
from .config import EngineConfig
from .decimal_utils import ZERO, quantize_currency
from .models import CounterpartySummary, DebtPosition, DebtReport, Transaction

logger = logging.getLogger(__name__)


def _counterparty_name(txn: Transaction) -> Optional[str]:
    name = (txn.counterparty or "").strip()
    return name or None


def is_internal_counterparty(name: str, config: Optional[EngineConfig] = None) -> bool:
    """Return True for technical counterparties such as ATMs or own deposits."""
    config = config or EngineConfig()
    lowered = name.lower()
    return any(
        fragment.lower() in lowered for fragment in config.reporting.internal_counterparties
    )


def build_counterparty_report(
    transactions: Iterable[Transaction], config: Optional[EngineConfig] = None
) -> Tuple[CounterpartySummary, ...]:
    """Summarize income and expense per external counterparty.

    Args:
        transactions: Classified transactions.
        config: Engine configuration supplying the internal counterparty list.

    Returns:
        One summary per counterparty, largest absolute balance first and
        ties broken by name.
    """
    config = config or EngineConfig()
    income: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    expense: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    skipped = 0

    for txn in transactions:
        name = _counterparty_name(txn)
        if name is None:
            continue
        if is_internal_counterparty(name, config):
            skipped += 1
            continue
        if txn.is_income:
            income[name] += txn.amount
        else:
            expense[name] += txn.amount

    if skipped:
        logger.debug(f"Left {skipped} transactions with internal counterparties out of the report")

    summaries = [
        CounterpartySummary(
            name=name,
            income=income[name],
            expense=expense[name],
            balance=income[name] - expense[name],
        )
        for name in set(income) | set(expense)
    ]
    summaries.sort(key=lambda s: (-abs(s.balance), s.name))
    return tuple(summaries)


def build_debt_report(transactions: Iterable[Transaction]) -> DebtReport:
    """Net loan proceeds against repayments per lender.

    Args:
        transactions: Classified transactions.

    Returns:
        DebtReport listing lenders still owed a positive amount. The total
        nets every lender, including those repaid beyond the proceeds seen
        in the period.
    """
    balances: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    for txn in transactions:
        name = _counterparty_name(txn)
        if name is None:
            continue
        line = rule_for(txn.category, txn.type).cash_flow_line
        if line is CashFlowLine.DEBT_PROCEEDS:
            balances[name] += txn.amount
        elif line is CashFlowLine.DEBT_REPAYMENT:
            balances[name] -= txn.amount

    payables = sorted(
        (
            DebtPosition(counterparty=name, amount=amount)
            for name, amount in balances.items()
            if quantize_currency(amount) > ZERO
        ),
        key=lambda p: (-p.amount, p.counterparty),
    )
    return DebtReport(
        payables=tuple(payables),
        total_payables=sum(balances.values(), ZERO),
    )

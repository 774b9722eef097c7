"""Data models for classified transactions and derived financial reports.

Transactions enter the engine already classified and are consumed read-only.
Every derived structure (P&L, cash flow, balance sheet and the report that
holds them) is an immutable value object owned by the report it belongs to;
nothing in a report refers back to the source transactions.

All monetary values are ``decimal.Decimal``. ``to_dict()`` turns any report
record into the JSON-compatible, camelCase structure consumed by chart and
export layers::

    report = generate_financial_report(transactions)
    payload = report.to_dict()
    payload["pnl"]["ratios"]["grossMargin"]  # float
"""

from dataclasses import dataclass, field, fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from .decimal_utils import ZERO, is_zero, to_decimal


class EntryKind(str, Enum):
    """Direction of a transaction. Amounts are always positive magnitudes."""

    INCOME = "income"
    EXPENSE = "expense"


class ActivityType(str, Enum):
    """Cash flow activity a transaction belongs to."""

    OPERATING = "operating"
    INVESTING = "investing"
    FINANCING = "financing"


class BalanceSheetMode(str, Enum):
    """How a balance sheet was produced.

    ``PROXY`` balance sheets are synthesized from period flow totals and
    fixed proxy ratios; assets and liabilities + equity are not reconciled
    by double entry, so ``balancing_difference`` may be non-zero.
    """

    PROXY = "proxy"


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def serialize(value: Any) -> Any:
    """Convert a report value into a JSON-compatible structure.

    Dataclasses become dicts with camelCase keys, Decimals become floats,
    dates become ISO strings, enums their values and tuples lists.

    Args:
        value: Any report value.

    Returns:
        JSON-compatible representation.
    """
    if is_dataclass(value) and not isinstance(value, type):
        return {_camel(f.name): serialize(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [serialize(v) for v in value]
    if isinstance(value, dict):
        return {k: serialize(v) for k, v in value.items()}
    return value


class _Serializable:
    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON-compatible camelCase representation."""
        return serialize(self)  # type: ignore[no-any-return]


@dataclass(frozen=True)
class Transaction(_Serializable):
    """A classified bank transaction.

    Attributes:
        id: Unique identifier.
        date: Calendar date of the transaction.
        description: Free text from the statement.
        amount: Positive magnitude; direction is carried by ``type``.
        type: Income or expense.
        category: Category slug from :class:`~statement_engine.categories.Category`.
        transaction_type: Operating, investing or financing activity.
        is_capitalized: Whether an expense is capitalized as a long-lived asset.
        counterparty: Optional counterparty name.

    Raises:
        ValueError: If the amount is not a finite positive number or the
            date cannot be interpreted.
    """

    id: str
    date: date
    description: str
    amount: Decimal
    type: EntryKind
    category: str
    transaction_type: ActivityType
    is_capitalized: bool = False
    counterparty: Optional[str] = None

    def __post_init__(self) -> None:
        """Normalize field types and validate invariants."""
        amount = self.amount if isinstance(self.amount, Decimal) else to_decimal(self.amount)
        if not amount.is_finite():
            raise ValueError(f"Transaction {self.id}: amount must be finite, got {self.amount}")
        if amount <= ZERO:
            raise ValueError(f"Transaction {self.id}: amount must be positive, got {self.amount}")
        object.__setattr__(self, "amount", amount)
        object.__setattr__(self, "type", EntryKind(self.type))
        object.__setattr__(self, "transaction_type", ActivityType(self.transaction_type))
        object.__setattr__(self, "date", _coerce_date(self.date, self.id))

    @property
    def is_income(self) -> bool:
        return self.type is EntryKind.INCOME

    @property
    def is_expense(self) -> bool:
        return self.type is EntryKind.EXPENSE

    @property
    def signed_amount(self) -> Decimal:
        """Cash effect: positive for income, negative for expense."""
        return self.amount if self.is_income else -self.amount


def _coerce_date(value: Union[date, datetime, str], transaction_id: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError as e:
            raise ValueError(f"Transaction {transaction_id}: invalid date {value!r}") from e
    raise ValueError(f"Transaction {transaction_id}: invalid date {value!r}")


@dataclass(slots=True)
class MonthlyBucket:
    """Running sums for one calendar month.

    Built by the aggregator and discarded once the statement builders have
    consumed it. ``depreciation`` is the constant monthly charge.
    """

    revenue: Decimal = ZERO
    cost_of_goods_sold: Decimal = ZERO
    operating_expenses: Decimal = ZERO
    cash_inflow: Decimal = ZERO
    cash_outflow: Decimal = ZERO
    depreciation: Decimal = ZERO


@dataclass(frozen=True)
class DateRange(_Serializable):
    """First and last transaction dates; both None for an empty report."""

    start: Optional[date] = None
    end: Optional[date] = None

    @property
    def is_empty(self) -> bool:
        return self.start is None and self.end is None


@dataclass(frozen=True)
class CategoryAmount(_Serializable):
    """One entry of the expense-by-category breakdown."""

    name: str
    value: Decimal


# ---------------------------------------------------------------------------
# Profit & Loss
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PnLMonth(_Serializable):
    """Monthly P&L series point; ``profit`` is the month's EBIT."""

    month: str
    revenue: Decimal
    cost_of_goods_sold: Decimal
    operating_expenses: Decimal
    depreciation: Decimal
    profit: Decimal


@dataclass(frozen=True)
class PnLRatios(_Serializable):
    """Profitability ratios. ``roa``/``roe`` need balance sheet totals."""

    gross_margin: Decimal = ZERO
    operating_margin: Decimal = ZERO
    net_margin: Decimal = ZERO
    roa: Decimal = ZERO
    roe: Decimal = ZERO


@dataclass(frozen=True)
class PnLData(_Serializable):
    """Profit & Loss statement for the report period."""

    total_revenue: Decimal = ZERO
    cost_of_goods_sold: Decimal = ZERO
    gross_profit: Decimal = ZERO
    total_operating_expenses: Decimal = ZERO
    ebitda: Decimal = ZERO
    depreciation: Decimal = ZERO
    ebit: Decimal = ZERO
    financial_income: Decimal = ZERO
    financial_expense: Decimal = ZERO
    ebt: Decimal = ZERO
    taxes: Decimal = ZERO
    net_profit: Decimal = ZERO
    monthly_data: Tuple[PnLMonth, ...] = ()
    expense_by_category: Tuple[CategoryAmount, ...] = ()
    ratios: PnLRatios = field(default_factory=PnLRatios)


# ---------------------------------------------------------------------------
# Cash flow
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OperatingDetails(_Serializable):
    """Indirect-method reconciliation of operating cash flow."""

    from_net_income: Decimal = ZERO
    depreciation: Decimal = ZERO
    working_capital_changes: Decimal = ZERO


@dataclass(frozen=True)
class InvestingDetails(_Serializable):
    """Investing cash flow detail. Capital expenditures are negative."""

    capital_expenditures: Decimal = ZERO
    asset_disposals: Decimal = ZERO
    investments: Decimal = ZERO


@dataclass(frozen=True)
class FinancingDetails(_Serializable):
    """Financing cash flow detail, signed as cash effects.

    Repayments and dividends are negative. ``other_financing`` is the part
    of the financing total not matched by any of the isolated categories.
    """

    debt_proceeds: Decimal = ZERO
    debt_repayments: Decimal = ZERO
    dividends: Decimal = ZERO
    equity_changes: Decimal = ZERO
    other_financing: Decimal = ZERO


@dataclass(frozen=True)
class CashFlowMonth(_Serializable):
    """Monthly cash movement series point."""

    month: str
    inflow: Decimal
    outflow: Decimal
    net: Decimal


@dataclass(frozen=True)
class LiquidityMetrics(_Serializable):
    """Liquidity figures; the cash conversion cycle is a configured constant."""

    operating_cash_flow_ratio: Decimal = ZERO
    cash_conversion_cycle: int = 0


@dataclass(frozen=True)
class CashFlowData(_Serializable):
    """Cash flow statement for the report period."""

    net_cash_flow: Decimal = ZERO
    operating_activities: Decimal = ZERO
    investing_activities: Decimal = ZERO
    financing_activities: Decimal = ZERO
    operating_details: OperatingDetails = field(default_factory=OperatingDetails)
    investing_details: InvestingDetails = field(default_factory=InvestingDetails)
    financing_details: FinancingDetails = field(default_factory=FinancingDetails)
    monthly_data: Tuple[CashFlowMonth, ...] = ()
    liquidity: LiquidityMetrics = field(default_factory=LiquidityMetrics)


# ---------------------------------------------------------------------------
# Balance sheet
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Assets(_Serializable):
    """Asset side of the balance sheet. Accumulated depreciation is negative."""

    cash: Decimal = ZERO
    accounts_receivable: Decimal = ZERO
    inventory: Decimal = ZERO
    short_term_investments: Decimal = ZERO
    prepaid_expenses: Decimal = ZERO
    total_current_assets: Decimal = ZERO
    equipment: Decimal = ZERO
    real_estate: Decimal = ZERO
    intangible_assets: Decimal = ZERO
    long_term_investments: Decimal = ZERO
    accumulated_depreciation: Decimal = ZERO
    net_equipment: Decimal = ZERO
    total_non_current_assets: Decimal = ZERO
    total_assets: Decimal = ZERO


@dataclass(frozen=True)
class Liabilities(_Serializable):
    """Current and non-current liabilities."""

    accounts_payable: Decimal = ZERO
    short_term_loans: Decimal = ZERO
    accrued_expenses: Decimal = ZERO
    taxes_payable: Decimal = ZERO
    total_current_liabilities: Decimal = ZERO
    loans_payable: Decimal = ZERO
    deferred_taxes: Decimal = ZERO
    total_non_current_liabilities: Decimal = ZERO
    total_liabilities: Decimal = ZERO


@dataclass(frozen=True)
class Equity(_Serializable):
    """Owner's equity."""

    authorized_capital: Decimal = ZERO
    retained_earnings: Decimal = ZERO
    owner_contributions: Decimal = ZERO
    owner_withdrawals: Decimal = ZERO
    total_equity: Decimal = ZERO


@dataclass(frozen=True)
class BalanceSheetRatios(_Serializable):
    """Leverage and liquidity ratios."""

    current_ratio: Decimal = ZERO
    quick_ratio: Decimal = ZERO
    debt_to_equity: Decimal = ZERO
    asset_turnover: Decimal = ZERO


@dataclass(frozen=True)
class BalanceSheetData(_Serializable):
    """Balance sheet at the end of the report period.

    ``mode`` tells the caller how the statement was produced. In proxy mode
    ``total_assets`` and ``total_liabilities_and_equity`` come from the same
    flow totals but are not reconciled; ``balancing_difference`` reports
    the gap instead of hiding it.
    """

    assets: Assets = field(default_factory=Assets)
    liabilities: Liabilities = field(default_factory=Liabilities)
    equity: Equity = field(default_factory=Equity)
    total_liabilities_and_equity: Decimal = ZERO
    ratios: BalanceSheetRatios = field(default_factory=BalanceSheetRatios)
    mode: BalanceSheetMode = BalanceSheetMode.PROXY
    balancing_difference: Decimal = ZERO

    @property
    def is_balanced(self) -> bool:
        """True when assets equal liabilities + equity to the cent."""
        return is_zero(self.balancing_difference)


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FinancialReport(_Serializable):
    """The three statements derived from one transaction list."""

    pnl: PnLData = field(default_factory=PnLData)
    cash_flow: CashFlowData = field(default_factory=CashFlowData)
    balance_sheet: BalanceSheetData = field(default_factory=BalanceSheetData)
    date_range: DateRange = field(default_factory=DateRange)


# ---------------------------------------------------------------------------
# Counterparties
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CounterpartySummary(_Serializable):
    """Turnover with one counterparty; ``balance`` is income less expense."""

    name: str
    income: Decimal = ZERO
    expense: Decimal = ZERO
    balance: Decimal = ZERO


@dataclass(frozen=True)
class DebtPosition(_Serializable):
    counterparty: str
    amount: Decimal


@dataclass(frozen=True)
class DebtReport(_Serializable):
    """Outstanding loan principal per lender.

    ``payables`` lists only lenders still owed a positive amount, while
    ``total_payables`` nets every lender, over-repaid ones included.
    """

    payables: Tuple[DebtPosition, ...] = ()
    total_payables: Decimal = ZERO

"""Transaction category enumeration and statement mapping table.

The transaction classifier assigns every transaction one category from a
fixed, versioned enumeration. This module holds that enumeration together
with a single lookup table, :data:`CATEGORY_RULES`, that tells every
statement builder what a category means:

* which P&L line an operating expense feeds (cost of goods sold versus
  operating expenses) and which categories are financial income/expense,
* which cash flow detail line a category isolates (debt proceeds,
  repayments, dividends, equity contributions, asset disposals),
* which categories count as owner withdrawals on the balance sheet,
* the default activity and capitalization a classifier should assign.

Builders never match category strings themselves; they ask this table.
Any change to the enumeration is a breaking change to report derivation.

Example:
    Look up how a category is treated::

        from statement_engine.categories import Category, rule_for

        rule = rule_for(Category.RAW_MATERIALS)
        assert rule.pnl_line is PnLLine.COST_OF_GOODS_SOLD
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional, Union

from .models import ActivityType, EntryKind


class Category(str, Enum):
    """Category enumeration assigned by the transaction classifier."""

    # --- Expense: cost of goods sold ---
    PURCHASED_GOODS = "purchased-goods"
    RAW_MATERIALS = "raw-materials"
    PRODUCTION_WAGES = "production-wages"
    PRODUCTION_RENT = "production-rent"
    PRODUCTION_SERVICES = "production-services"

    # --- Expense: selling ---
    MARKETING = "marketing"
    SALES_COMMISSIONS = "sales-commissions"
    LOGISTICS = "logistics"

    # --- Expense: general & administrative ---
    ADMIN_WAGES = "admin-wages"
    OFFICE_RENT = "office-rent"
    UTILITIES = "utilities"
    COMMUNICATIONS = "communications"
    OFFICE_SUPPLIES = "office-supplies"
    CONSULTING_AUDIT = "consulting-audit"
    INSURANCE = "insurance"
    HOSPITALITY = "hospitality"
    TRAVEL = "travel"
    TRAINING = "training"
    SOFTWARE_SUBSCRIPTIONS = "software-subscriptions"

    # --- Expense: taxes and fees other than income tax ---
    OTHER_TAXES = "other-taxes"
    BANK_FEES = "bank-fees"
    FINES = "fines"

    # --- Expense: financial ---
    LOAN_INTEREST = "loan-interest"
    NEGATIVE_FX = "negative-fx"

    # --- Expense: capital expenditure ---
    EQUIPMENT = "equipment"
    VEHICLES = "vehicles"
    REAL_ESTATE = "real-estate"
    INTANGIBLES = "intangibles"
    ASSET_UPGRADES = "asset-upgrades"

    # --- Expense: financing ---
    LOAN_REPAYMENT = "loan-repayment"
    LEASE_PAYMENTS = "lease-payments"
    DIVIDENDS_PAID = "dividends-paid"
    EQUITY_BUYBACK = "equity-buyback"

    # --- Expense: other cash movements ---
    SAVINGS_TRANSFER = "savings-transfer"
    PERSONAL_WITHDRAWALS = "personal-withdrawals"
    OTHER = "other"

    # --- Income: operating ---
    CORE_REVENUE = "core-revenue"
    ANCILLARY_SERVICES = "ancillary-services"
    COMMISSION_INCOME = "commission-income"
    RENTAL_INCOME = "rental-income"
    ROYALTIES = "royalties"

    # --- Income: financial ---
    INTEREST_INCOME = "interest-income"
    POSITIVE_FX = "positive-fx"
    DIVIDENDS_RECEIVED = "dividends-received"

    # --- Income: investing ---
    ASSET_SALE_PROCEEDS = "asset-sale-proceeds"

    # --- Income: financing ---
    LOAN_PROCEEDS = "loan-proceeds"
    OWNER_CONTRIBUTION = "owner-contribution"

    OTHER_INCOME = "other-income"


class PnLLine(Enum):
    """Income statement line a category feeds."""

    REVENUE = "revenue"
    COST_OF_GOODS_SOLD = "cost_of_goods_sold"
    OPERATING_EXPENSE = "operating_expense"
    FINANCIAL_INCOME = "financial_income"
    FINANCIAL_EXPENSE = "financial_expense"
    NONE = "none"


class CashFlowLine(Enum):
    """Cash flow statement detail line a category is isolated into."""

    ASSET_DISPOSAL = "asset_disposal"
    DEBT_PROCEEDS = "debt_proceeds"
    DEBT_REPAYMENT = "debt_repayment"
    DIVIDENDS = "dividends"
    EQUITY_CONTRIBUTION = "equity_contribution"


@dataclass(frozen=True)
class CategoryRule:
    """How one category maps onto the three statements.

    Attributes:
        kind: Whether the category is an income or an expense category.
        pnl_line: P&L line fed when the transaction is operating and not
            capitalized (COGS vs opex), or the financial income/expense
            line matched regardless of activity.
        default_activity: Activity a classifier assigns by default.
        default_capitalized: Whether a classifier capitalizes by default.
        cash_flow_line: Cash flow detail line, if any.
        owner_withdrawal: Whether the amount reduces equity as a withdrawal.
    """

    kind: EntryKind
    pnl_line: PnLLine
    default_activity: ActivityType
    default_capitalized: bool = False
    cash_flow_line: Optional[CashFlowLine] = None
    owner_withdrawal: bool = False


_EXPENSE = EntryKind.EXPENSE
_INCOME = EntryKind.INCOME
_OPERATING = ActivityType.OPERATING
_INVESTING = ActivityType.INVESTING
_FINANCING = ActivityType.FINANCING


def _cogs() -> CategoryRule:
    return CategoryRule(_EXPENSE, PnLLine.COST_OF_GOODS_SOLD, _OPERATING)


def _opex() -> CategoryRule:
    return CategoryRule(_EXPENSE, PnLLine.OPERATING_EXPENSE, _OPERATING)


def _capex() -> CategoryRule:
    return CategoryRule(_EXPENSE, PnLLine.NONE, _INVESTING, default_capitalized=True)


def _revenue() -> CategoryRule:
    return CategoryRule(_INCOME, PnLLine.REVENUE, _OPERATING)


_RULES = {
    Category.PURCHASED_GOODS: _cogs(),
    Category.RAW_MATERIALS: _cogs(),
    Category.PRODUCTION_WAGES: _cogs(),
    Category.PRODUCTION_RENT: _cogs(),
    Category.PRODUCTION_SERVICES: _cogs(),
    Category.MARKETING: _opex(),
    Category.SALES_COMMISSIONS: _opex(),
    Category.LOGISTICS: _opex(),
    Category.ADMIN_WAGES: _opex(),
    Category.OFFICE_RENT: _opex(),
    Category.UTILITIES: _opex(),
    Category.COMMUNICATIONS: _opex(),
    Category.OFFICE_SUPPLIES: _opex(),
    Category.CONSULTING_AUDIT: _opex(),
    Category.INSURANCE: _opex(),
    Category.HOSPITALITY: _opex(),
    Category.TRAVEL: _opex(),
    Category.TRAINING: _opex(),
    Category.SOFTWARE_SUBSCRIPTIONS: _opex(),
    Category.OTHER_TAXES: _opex(),
    Category.BANK_FEES: _opex(),
    Category.FINES: _opex(),
    Category.LOAN_INTEREST: CategoryRule(_EXPENSE, PnLLine.FINANCIAL_EXPENSE, _FINANCING),
    Category.NEGATIVE_FX: _opex(),
    Category.EQUIPMENT: _capex(),
    Category.VEHICLES: _capex(),
    Category.REAL_ESTATE: _capex(),
    Category.INTANGIBLES: _capex(),
    Category.ASSET_UPGRADES: _capex(),
    Category.LOAN_REPAYMENT: CategoryRule(
        _EXPENSE, PnLLine.NONE, _FINANCING, cash_flow_line=CashFlowLine.DEBT_REPAYMENT
    ),
    Category.LEASE_PAYMENTS: CategoryRule(_EXPENSE, PnLLine.NONE, _FINANCING),
    Category.DIVIDENDS_PAID: CategoryRule(
        _EXPENSE,
        PnLLine.NONE,
        _FINANCING,
        cash_flow_line=CashFlowLine.DIVIDENDS,
        owner_withdrawal=True,
    ),
    Category.EQUITY_BUYBACK: CategoryRule(_EXPENSE, PnLLine.NONE, _FINANCING),
    Category.SAVINGS_TRANSFER: CategoryRule(_EXPENSE, PnLLine.NONE, _INVESTING),
    Category.PERSONAL_WITHDRAWALS: CategoryRule(
        _EXPENSE, PnLLine.NONE, _FINANCING, owner_withdrawal=True
    ),
    Category.OTHER: _opex(),
    Category.CORE_REVENUE: _revenue(),
    Category.ANCILLARY_SERVICES: _revenue(),
    Category.COMMISSION_INCOME: _revenue(),
    Category.RENTAL_INCOME: _revenue(),
    Category.ROYALTIES: _revenue(),
    Category.INTEREST_INCOME: CategoryRule(_INCOME, PnLLine.FINANCIAL_INCOME, _FINANCING),
    Category.POSITIVE_FX: CategoryRule(_INCOME, PnLLine.FINANCIAL_INCOME, _FINANCING),
    Category.DIVIDENDS_RECEIVED: CategoryRule(_INCOME, PnLLine.NONE, _INVESTING),
    Category.ASSET_SALE_PROCEEDS: CategoryRule(
        _INCOME, PnLLine.NONE, _INVESTING, cash_flow_line=CashFlowLine.ASSET_DISPOSAL
    ),
    Category.LOAN_PROCEEDS: CategoryRule(
        _INCOME, PnLLine.NONE, _FINANCING, cash_flow_line=CashFlowLine.DEBT_PROCEEDS
    ),
    Category.OWNER_CONTRIBUTION: CategoryRule(
        _INCOME, PnLLine.NONE, _FINANCING, cash_flow_line=CashFlowLine.EQUITY_CONTRIBUTION
    ),
    Category.OTHER_INCOME: _revenue(),
}

CATEGORY_RULES: Mapping[str, CategoryRule] = MappingProxyType(
    {category.value: rule for category, rule in _RULES.items()}
)
"""Category slug -> :class:`CategoryRule`; keyed exactly on the enumeration strings."""

UNKNOWN_EXPENSE_RULE = CategoryRule(_EXPENSE, PnLLine.OPERATING_EXPENSE, _OPERATING)
UNKNOWN_INCOME_RULE = CategoryRule(_INCOME, PnLLine.REVENUE, _OPERATING)

COGS_CATEGORIES: FrozenSet[str] = frozenset(
    slug for slug, rule in CATEGORY_RULES.items() if rule.pnl_line is PnLLine.COST_OF_GOODS_SOLD
)

EXPENSE_CATEGORIES = tuple(c.value for c in Category if _RULES[c].kind is _EXPENSE)
INCOME_CATEGORIES = tuple(c.value for c in Category if _RULES[c].kind is _INCOME)

DEFAULT_INCOME_CATEGORY = Category.CORE_REVENUE.value
DEFAULT_EXPENSE_CATEGORY = Category.OTHER.value


def rule_for(category: Union[str, Category], kind: Optional[EntryKind] = None) -> CategoryRule:
    """Return the mapping rule of a category.

    Categories outside the enumeration are treated as "other": operating
    expenses for expense transactions, revenue for income transactions,
    and no cash flow detail line.

    Args:
        category: Category slug or enum member.
        kind: Direction of the transaction, used to pick the fallback rule
            for unknown categories. Defaults to expense.

    Returns:
        The category's rule.
    """
    slug = category.value if isinstance(category, Category) else category
    rule = CATEGORY_RULES.get(slug)
    if rule is not None:
        return rule
    return UNKNOWN_INCOME_RULE if kind is EntryKind.INCOME else UNKNOWN_EXPENSE_RULE


def is_cogs_category(category: str) -> bool:
    """Return True when an operating expense category belongs to cost of goods sold."""
    return category in COGS_CATEGORIES

"""Proxy balance sheet builder.

Bank statements carry flows, not balances: there is no opening balance and
no receivable, inventory or payable sub-ledger. The balance sheet is
therefore synthesized from the period's P&L and cash flow totals:

* cash is the cumulative net cash flow of the period,
* receivables, inventory, prepaid expenses, payables and accrued expenses
  are fixed shares of revenue, COGS or operating expenses
  (:class:`~statement_engine.config.ProxyRatioConfig`),
* equipment is the capitalized spend less accumulated depreciation,
* taxes payable is the P&L tax charge, loans payable the outstanding
  principal (proceeds less repayments),
* equity is contributed capital plus retained earnings (net profit less
  signed dividends) less owner withdrawals.

Because the sides are not reconciled by double entry, the result carries
``mode=BalanceSheetMode.PROXY`` and the gap between total assets and total
liabilities and equity as ``balancing_difference``.
"""

from decimal import Decimal
import logging
from typing import Iterable, Optional
import warnings

from ._warnings import ProxyBalanceWarning
from .categories import rule_for
from .config import EngineConfig
from .decimal_utils import ZERO, is_zero, safe_ratio
from .models import (
    Assets,
    BalanceSheetData,
    BalanceSheetMode,
    BalanceSheetRatios,
    CashFlowData,
    Equity,
    Liabilities,
    PnLData,
    Transaction,
)

logger = logging.getLogger(__name__)


def total_owner_withdrawals(transactions: Iterable[Transaction]) -> Decimal:
    """Sum personal withdrawals and dividends paid."""
    return sum(
        (
            txn.amount
            for txn in transactions
            if txn.is_expense and rule_for(txn.category, txn.type).owner_withdrawal
        ),
        ZERO,
    )


def build_balance_sheet(
    pnl: PnLData,
    cash_flow: CashFlowData,
    total_capital_expenditures: Decimal,
    transactions: Iterable[Transaction],
    config: Optional[EngineConfig] = None,
) -> BalanceSheetData:
    """Build the proxy balance sheet at the end of the report period.

    Args:
        pnl: Finalized P&L totals.
        cash_flow: Finalized cash flow totals.
        total_capital_expenditures: Sum of capitalized expenses.
        transactions: Classified transactions, used for owner withdrawals.
        config: Engine configuration supplying the proxy ratios.

    Returns:
        BalanceSheetData in proxy mode.
    """
    config = config or EngineConfig()
    proxies = config.proxy_ratios
    financing = cash_flow.financing_details

    # Current assets
    cash = (
        cash_flow.operating_activities
        + cash_flow.investing_activities
        + cash_flow.financing_activities
    )
    accounts_receivable = pnl.total_revenue * proxies.as_decimal("receivables_to_revenue")
    inventory = pnl.cost_of_goods_sold * proxies.as_decimal("inventory_to_cogs")
    prepaid_expenses = pnl.total_operating_expenses * proxies.as_decimal("prepaid_to_opex")
    total_current_assets = cash + accounts_receivable + inventory + prepaid_expenses

    # Non-current assets
    equipment = total_capital_expenditures
    accumulated_depreciation = -pnl.depreciation
    net_equipment = equipment + accumulated_depreciation
    total_non_current_assets = net_equipment
    total_assets = total_current_assets + total_non_current_assets

    assets = Assets(
        cash=cash,
        accounts_receivable=accounts_receivable,
        inventory=inventory,
        prepaid_expenses=prepaid_expenses,
        total_current_assets=total_current_assets,
        equipment=equipment,
        accumulated_depreciation=accumulated_depreciation,
        net_equipment=net_equipment,
        total_non_current_assets=total_non_current_assets,
        total_assets=total_assets,
    )

    # Liabilities
    accounts_payable = pnl.cost_of_goods_sold * proxies.as_decimal("payables_to_cogs")
    accrued_expenses = pnl.total_operating_expenses * proxies.as_decimal("accrued_to_opex")
    taxes_payable = pnl.taxes
    total_current_liabilities = accounts_payable + accrued_expenses + taxes_payable

    # Repayments are negative cash effects
    loans_payable = financing.debt_proceeds + financing.debt_repayments
    total_non_current_liabilities = loans_payable
    total_liabilities = total_current_liabilities + total_non_current_liabilities

    liabilities = Liabilities(
        accounts_payable=accounts_payable,
        accrued_expenses=accrued_expenses,
        taxes_payable=taxes_payable,
        total_current_liabilities=total_current_liabilities,
        loans_payable=loans_payable,
        total_non_current_liabilities=total_non_current_liabilities,
        total_liabilities=total_liabilities,
    )

    # Dividends are a negative cash effect, so retained earnings add them
    # back before owner withdrawals (dividends included) are deducted.
    owner_withdrawals = total_owner_withdrawals(transactions)
    authorized_capital = financing.equity_changes
    retained_earnings = pnl.net_profit - financing.dividends
    total_equity = authorized_capital + retained_earnings - owner_withdrawals

    equity = Equity(
        authorized_capital=authorized_capital,
        retained_earnings=retained_earnings,
        owner_contributions=financing.equity_changes,
        owner_withdrawals=owner_withdrawals,
        total_equity=total_equity,
    )

    total_liabilities_and_equity = total_liabilities + total_equity
    balancing_difference = total_assets - total_liabilities_and_equity

    ratios = BalanceSheetRatios(
        current_ratio=safe_ratio(total_current_assets, total_current_liabilities),
        quick_ratio=safe_ratio(total_current_assets - inventory, total_current_liabilities),
        debt_to_equity=safe_ratio(total_liabilities, total_equity),
        asset_turnover=safe_ratio(pnl.total_revenue, total_assets),
    )

    if not is_zero(balancing_difference):
        message = (
            f"Proxy balance sheet is off by {balancing_difference:,.2f} "
            f"(assets {total_assets:,.2f}, liabilities and equity "
            f"{total_liabilities_and_equity:,.2f})"
        )
        logger.debug(message)
        if config.reporting.warn_on_imbalance:
            warnings.warn(message, ProxyBalanceWarning, stacklevel=2)

    return BalanceSheetData(
        assets=assets,
        liabilities=liabilities,
        equity=equity,
        total_liabilities_and_equity=total_liabilities_and_equity,
        ratios=ratios,
        mode=BalanceSheetMode.PROXY,
        balancing_difference=balancing_difference,
    )

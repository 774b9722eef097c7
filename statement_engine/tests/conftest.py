"""Pytest configuration and shared fixtures."""

from datetime import date
from decimal import Decimal

import pytest

from statement_engine.config import EngineConfig
from statement_engine.models import ActivityType, EntryKind, Transaction


def make_transaction(
    txn_id,
    day,
    amount,
    kind,
    category,
    activity=ActivityType.OPERATING,
    capitalized=False,
    description="",
):
    """Build a classified transaction with terse arguments."""
    return Transaction(
        id=txn_id,
        date=day,
        description=description or category,
        amount=Decimal(str(amount)),
        type=kind,
        category=category,
        transaction_type=activity,
        is_capitalized=capitalized,
    )


def income(txn_id, day, amount, category="core-revenue", activity=ActivityType.OPERATING):
    return make_transaction(txn_id, day, amount, EntryKind.INCOME, category, activity)


def expense(
    txn_id, day, amount, category="other", activity=ActivityType.OPERATING, capitalized=False
):
    return make_transaction(txn_id, day, amount, EntryKind.EXPENSE, category, activity, capitalized)


@pytest.fixture
def config():
    """Return the default engine configuration."""
    return EngineConfig()


@pytest.fixture
def scenario_transactions():
    """Revenue, office rent and a capitalized equipment purchase in one month."""
    return [
        income("tx_1", date(2023, 10, 2), 5000),
        expense("tx_2", date(2023, 10, 5), 1500, "office-rent"),
        expense("tx_3", date(2023, 10, 20), 3000, "equipment", ActivityType.INVESTING, True),
    ]


@pytest.fixture
def business_transactions():
    """Three months of a small trading business, deliberately unsorted."""
    return [
        income("s1", date(2023, 12, 3), 12000),
        expense("p1", date(2023, 10, 4), 4000, "purchased-goods"),
        income("s2", date(2023, 10, 15), 10000),
        expense("r1", date(2023, 10, 1), 1500, "office-rent"),
        expense("w1", date(2023, 11, 25), 2000, "production-wages"),
        expense("m1", date(2023, 11, 10), 800, "marketing"),
        income("s3", date(2023, 11, 20), 9000, "ancillary-services"),
        expense("e1", date(2023, 10, 10), 7200, "equipment", ActivityType.INVESTING, True),
        income("l1", date(2023, 10, 12), 20000, "loan-proceeds", ActivityType.FINANCING),
        expense("l2", date(2023, 12, 12), 5000, "loan-repayment", ActivityType.FINANCING),
        expense("i1", date(2023, 12, 12), 300, "loan-interest", ActivityType.FINANCING),
        income("ii", date(2023, 12, 28), 100, "interest-income", ActivityType.FINANCING),
        income("c1", date(2023, 10, 1), 15000, "owner-contribution", ActivityType.FINANCING),
        expense("d1", date(2023, 12, 30), 1000, "dividends-paid", ActivityType.FINANCING),
        expense("pw", date(2023, 11, 30), 500, "personal-withdrawals", ActivityType.FINANCING),
        income("a1", date(2023, 11, 2), 1200, "asset-sale-proceeds", ActivityType.INVESTING),
    ]


@pytest.fixture
def make_income():
    """Return the income transaction factory."""
    return income


@pytest.fixture
def make_expense():
    """Return the expense transaction factory."""
    return expense

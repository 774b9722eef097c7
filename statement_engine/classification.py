"""Interface to the external transaction classifier.

The classifier (a rules engine, an ML model or an LLM service) lives outside
this package. Given ``(id, description, type)`` triples it returns
``(id, category, transaction_type, is_capitalized)`` for each. This module
defines that contract and merges classifier output into
:class:`~statement_engine.models.Transaction` records.

Example:
    Classify raw statement lines with any classifier::

        raw = parse_statement_csv("statement.csv")
        transactions = classify_transactions(raw, my_classifier)
        report = generate_financial_report(transactions)
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
import logging
from typing import Dict, Iterable, List, Optional, Protocol, Sequence

from .categories import (
    DEFAULT_EXPENSE_CATEGORY,
    DEFAULT_INCOME_CATEGORY,
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    rule_for,
)
from .exceptions import TransactionValidationError
from .models import ActivityType, EntryKind, Transaction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawTransaction:
    """A statement line produced by an input adapter, before classification."""

    id: str
    date: date
    description: str
    amount: Decimal
    type: EntryKind
    counterparty: Optional[str] = None


@dataclass(frozen=True)
class ClassificationRequest:
    """What the classifier sees of a transaction."""

    id: str
    description: str
    type: EntryKind


@dataclass(frozen=True)
class Classification:
    """Classifier verdict for one transaction."""

    id: str
    category: str
    transaction_type: ActivityType = ActivityType.OPERATING
    is_capitalized: bool = False


class TransactionClassifier(Protocol):
    """Anything that can classify a batch of transactions."""

    def classify(self, requests: Sequence[ClassificationRequest]) -> List[Classification]:
        """Return one classification per request it could classify."""
        ...


class CategoryRuleClassifier:
    """Static-lookup classifier for lines whose category is already known.

    Useful when an upstream system (or the user) supplies categories but not
    activity and capitalization. Activity and capitalization come from the
    category's defaults in :data:`~statement_engine.categories.CATEGORY_RULES`.

    Args:
        categories: Mapping of transaction id to category slug.
    """

    def __init__(self, categories: Dict[str, str]):
        self.categories = dict(categories)

    def classify(self, requests: Sequence[ClassificationRequest]) -> List[Classification]:
        result = []
        for request in requests:
            category = self.categories.get(request.id)
            if category is None:
                continue
            rule = rule_for(category, request.type)
            result.append(
                Classification(
                    id=request.id,
                    category=category,
                    transaction_type=rule.default_activity,
                    is_capitalized=rule.default_capitalized and request.type is EntryKind.EXPENSE,
                )
            )
        return result


def apply_classifications(
    raw_transactions: Iterable[RawTransaction], classifications: Iterable[Classification]
) -> List[Transaction]:
    """Merge classifier output into classified transactions.

    A transaction the classifier did not return keeps the defaults: income
    becomes core revenue, expense becomes "other", both operating and not
    capitalized. Capitalization is dropped for income transactions.

    Args:
        raw_transactions: Unclassified statement lines.
        classifications: Classifier output, matched by id.

    Returns:
        Classified transactions in input order.
    """
    by_id = {c.id: c for c in classifications}
    transactions = []
    unclassified = 0
    for raw in raw_transactions:
        verdict = by_id.get(raw.id)
        if verdict is None:
            unclassified += 1
            category = (
                DEFAULT_INCOME_CATEGORY if raw.type is EntryKind.INCOME else DEFAULT_EXPENSE_CATEGORY
            )
            activity = ActivityType.OPERATING
            capitalized = False
        else:
            category = verdict.category
            activity = verdict.transaction_type
            capitalized = verdict.is_capitalized and raw.type is EntryKind.EXPENSE
            known = INCOME_CATEGORIES if raw.type is EntryKind.INCOME else EXPENSE_CATEGORIES
            if category not in known:
                logger.warning(
                    f"Transaction {raw.id}: {raw.type.value} category {category!r} is not "
                    "in the category enumeration"
                )

        transactions.append(
            Transaction(
                id=raw.id,
                date=raw.date,
                description=raw.description,
                amount=raw.amount,
                type=raw.type,
                category=category,
                transaction_type=activity,
                is_capitalized=capitalized,
                counterparty=raw.counterparty,
            )
        )

    if unclassified:
        logger.info(f"{unclassified} transactions left unclassified, using default categories")
    return transactions


def classify_transactions(
    raw_transactions: Sequence[RawTransaction], classifier: TransactionClassifier
) -> List[Transaction]:
    """Classify raw statement lines with an external classifier.

    Args:
        raw_transactions: Unclassified statement lines.
        classifier: Classifier implementing :class:`TransactionClassifier`.

    Returns:
        Classified transactions in input order.

    Raises:
        TransactionValidationError: If there are no transactions to classify.
    """
    if not raw_transactions:
        raise TransactionValidationError(["No transactions found in the statement"])

    requests = [ClassificationRequest(r.id, r.description, r.type) for r in raw_transactions]
    logger.debug(f"Classifying {len(requests)} transactions")
    return apply_classifications(raw_transactions, classifier.classify(requests))

"""Input adapters: bank statement CSV parsing and transaction validation.

The derivation engine assumes clean, classified input. This module is the
validation boundary in front of it:

* :func:`parse_statement_csv` reads a generic bank statement export into
  unclassified :class:`~statement_engine.classification.RawTransaction`
  lines, dropping rows it cannot interpret with a
  :class:`~statement_engine._warnings.DataQualityWarning`.
* :func:`validate_transactions` validates already-classified records (for
  example a ``POST /reports`` JSON payload) and rejects the whole batch with
  a :class:`~statement_engine.exceptions.TransactionValidationError` listing
  every issue.

Bank-specific PDF layouts are handled by dedicated adapters outside this
package; they feed :class:`RawTransaction` lines into the same pipeline.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
import logging
from pathlib import Path
import re
from typing import IO, Any, Iterable, List, Mapping, Optional, Sequence, Union
import warnings

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from ._warnings import DataQualityWarning
from .classification import RawTransaction
from .exceptions import StatementFormatError, TransactionValidationError
from .models import ActivityType, EntryKind, Transaction

logger = logging.getLogger(__name__)

DATE_KEYWORDS = ("date", "дата")
DESCRIPTION_KEYWORDS = ("desc", "описание")
AMOUNT_KEYWORDS = ("amount", "сумма")
COUNTERPARTY_KEYWORDS = ("counterparty", "контрагент")

_DATE_FORMATS = ("%Y-%m-%d", "%Y.%m.%d", "%d.%m.%Y", "%d-%m-%Y")
_AMOUNT_NOISE = re.compile(r"[\s\"'₸$€£]")


def _find_column(headers: Sequence[str], keywords: Sequence[str]) -> Optional[int]:
    for index, header in enumerate(headers):
        if any(keyword in header for keyword in keywords):
            return index
    return None


def parse_statement_date(value: str) -> Optional[date]:
    """Parse a statement date in ``YYYY-MM-DD`` or ``DD.MM.YYYY`` form.

    Other layouts are handed to :func:`pandas.to_datetime` as a last resort.

    Args:
        value: Raw date cell.

    Returns:
        Parsed date, or None if the value cannot be interpreted.
    """
    value = value.strip().strip('"')
    if not value:
        return None
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    parsed = pd.to_datetime(value, errors="coerce")
    if pd.isna(parsed):
        return None
    return parsed.date()


def parse_statement_amount(value: str) -> Optional[Decimal]:
    """Parse a signed statement amount.

    Whitespace (including thousands separators), quotes and currency signs
    are removed and a decimal comma is accepted.

    Args:
        value: Raw amount cell, e.g. ``"-1 250,50 ₸"``.

    Returns:
        Signed amount, or None if the value is not a finite number.
    """
    cleaned = _AMOUNT_NOISE.sub("", value).replace(",", ".")
    if not cleaned:
        return None
    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        return None
    return amount if amount.is_finite() else None


def parse_statement_csv(source: Union[str, Path, IO[str]]) -> List[RawTransaction]:
    """Read a bank statement CSV export into unclassified transactions.

    The date, description and amount columns are located by header keywords
    (English or Russian). Negative amounts are expenses and positive amounts
    income; the stored amount is always the magnitude. Rows with an
    unparseable date or a missing, zero or non-numeric amount are skipped.

    Args:
        source: Path or open text stream of the CSV file.

    Returns:
        Raw transactions in file order, with ids ``tx_<row>``.

    Raises:
        StatementFormatError: If a required column cannot be found.
    """
    df = pd.read_csv(source, dtype=str, keep_default_na=False, skipinitialspace=True)
    headers = [str(c).strip().lower() for c in df.columns]

    date_idx = _find_column(headers, DATE_KEYWORDS)
    desc_idx = _find_column(headers, DESCRIPTION_KEYWORDS)
    amount_idx = _find_column(headers, AMOUNT_KEYWORDS)
    counterparty_idx = _find_column(headers, COUNTERPARTY_KEYWORDS)

    missing = [
        name
        for name, idx in (("date", date_idx), ("description", desc_idx), ("amount", amount_idx))
        if idx is None
    ]
    if missing:
        raise StatementFormatError(
            f"Statement CSV is missing required columns: {', '.join(missing)}", columns=missing
        )

    transactions: List[RawTransaction] = []
    skipped = 0
    for row_number, row in enumerate(df.itertuples(index=False, name=None), start=1):
        txn_date = parse_statement_date(str(row[date_idx]))
        amount = parse_statement_amount(str(row[amount_idx]))
        if txn_date is None or amount is None or amount == 0:
            skipped += 1
            logger.debug(f"Skipping statement row {row_number}: {row!r}")
            continue

        counterparty = str(row[counterparty_idx]).strip() if counterparty_idx is not None else ""
        transactions.append(
            RawTransaction(
                id=f"tx_{row_number}",
                date=txn_date,
                description=str(row[desc_idx]).strip().strip('"'),
                amount=abs(amount),
                type=EntryKind.INCOME if amount > 0 else EntryKind.EXPENSE,
                counterparty=counterparty or None,
            )
        )

    if skipped:
        warnings.warn(
            f"Skipped {skipped} statement rows with an invalid date or amount",
            DataQualityWarning,
            stacklevel=2,
        )
    logger.info(f"Parsed {len(transactions)} transactions from statement ({skipped} skipped)")
    return transactions


class TransactionRecord(BaseModel):
    """Schema of one classified transaction in an API payload.

    Accepts both camelCase (``transactionType``) and snake_case
    (``transaction_type``) keys.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: str = Field(min_length=1)
    date: date
    description: str = ""
    amount: Decimal = Field(gt=0, allow_inf_nan=False)
    type: EntryKind
    category: str = Field(min_length=1)
    transaction_type: ActivityType
    is_capitalized: bool = False
    counterparty: Optional[str] = None

    def to_transaction(self) -> Transaction:
        """Build the engine's immutable transaction record."""
        return Transaction(
            id=self.id,
            date=self.date,
            description=self.description,
            amount=self.amount,
            type=self.type,
            category=self.category,
            transaction_type=self.transaction_type,
            is_capitalized=self.is_capitalized and self.type is EntryKind.EXPENSE,
            counterparty=self.counterparty,
        )


def validate_transactions(records: Iterable[Mapping[str, Any]]) -> List[Transaction]:
    """Validate classified transaction records before report generation.

    Every record is checked; all problems are collected and reported
    together. Duplicate ids are rejected.

    Args:
        records: Mappings with transaction fields.

    Returns:
        Validated transactions in input order.

    Raises:
        TransactionValidationError: If any record is invalid.
    """
    issues: List[str] = []
    transactions: List[Transaction] = []
    seen_ids = set()

    for index, record in enumerate(records):
        label = f"record {index} ({record.get('id', '?')})"
        try:
            validated = TransactionRecord.model_validate(record)
        except ValidationError as e:
            for error in e.errors():
                location = ".".join(str(part) for part in error["loc"])
                issues.append(f"{label}: {location}: {error['msg']}")
            continue

        if validated.id in seen_ids:
            issues.append(f"{label}: duplicate transaction id")
            continue
        seen_ids.add(validated.id)
        transactions.append(validated.to_transaction())

    if issues:
        raise TransactionValidationError(issues)
    return transactions

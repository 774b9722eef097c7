"""Exceptions raised at the input boundary of the statement engine.

The derivation engine itself never raises on degenerate input; these
exceptions belong to the adapters that turn raw statements and payloads
into validated :class:`~statement_engine.models.Transaction` records.
"""

from typing import List, Optional


class StatementEngineError(Exception):
    """Base class for all statement_engine errors."""


class TransactionValidationError(StatementEngineError):
    """Raised when transaction records fail validation.

    Attributes:
        issues: List of specific problems found, one per invalid field.

    Examples:
        Catching and inspecting issues::

            try:
                transactions = validate_transactions(payload["transactions"])
            except TransactionValidationError as e:
                for issue in e.issues:
                    print(f"  - {issue}")
    """

    def __init__(self, issues: List[str]) -> None:
        self.issues = issues
        bullet_list = "\n".join(f"  - {issue}" for issue in issues)
        super().__init__(
            f"Transaction data has {len(issues)} "
            f"{'issue' if len(issues) == 1 else 'issues'}:\n{bullet_list}"
        )


class StatementFormatError(StatementEngineError):
    """Raised when a bank statement file lacks a required column."""

    def __init__(self, message: str, columns: Optional[List[str]] = None) -> None:
        self.columns = columns or []
        super().__init__(message)

"""Statement Engine: financial statements from classified bank transactions"""

from ._version import __version__

# Use lazy imports so that importing the package does not pull in pandas
# Direct imports are defined but modules are imported only when accessed

__all__ = [
    "__version__",
    "Category",
    "EngineConfig",
    "FinancialReport",
    "FinancialReportGenerator",
    "FinancialStatementGenerator",
    "Transaction",
    "TransactionValidationError",
    "build_counterparty_report",
    "build_debt_report",
    "classify_transactions",
    "empty_financial_report",
    "generate_financial_report",
    "parse_statement_csv",
    "validate_transactions",
]


def __getattr__(name):
    """Lazy import public names on first access."""
    if name == "Category":
        from .categories import Category

        return Category
    elif name == "EngineConfig":
        from .config import EngineConfig

        return EngineConfig
    elif name == "FinancialReport" or name == "Transaction":
        from .models import FinancialReport, Transaction

        return locals()[name]
    elif name in ["FinancialReportGenerator", "empty_financial_report", "generate_financial_report"]:
        from .report import (
            FinancialReportGenerator,
            empty_financial_report,
            generate_financial_report,
        )

        return locals()[name]
    elif name == "FinancialStatementGenerator":
        from .financial_statements import FinancialStatementGenerator

        return FinancialStatementGenerator
    elif name == "TransactionValidationError":
        from .exceptions import TransactionValidationError

        return TransactionValidationError
    elif name == "build_counterparty_report" or name == "build_debt_report":
        from .counterparties import build_counterparty_report, build_debt_report

        return locals()[name]
    elif name == "classify_transactions":
        from .classification import classify_transactions

        return classify_transactions
    elif name == "parse_statement_csv" or name == "validate_transactions":
        from .ingest import parse_statement_csv, validate_transactions

        return locals()[name]
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")

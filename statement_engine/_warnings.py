"""Custom warning classes for the statement_engine package.

These warning classes allow users to programmatically filter, suppress,
or capture warnings using Python's standard ``warnings`` module.

Example:
    Suppress configuration warnings in a batch run::

        import warnings
        from statement_engine._warnings import ConfigurationWarning

        warnings.filterwarnings("ignore", category=ConfigurationWarning)

    Capture rows dropped while reading a bank statement::

        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter("always", DataQualityWarning)
            raw = parse_statement_csv("statement.csv")
            dropped = [x for x in w if issubclass(x.category, DataQualityWarning)]
"""


class StatementEngineWarning(UserWarning):
    """Base class for all statement_engine warnings."""


class ConfigurationWarning(StatementEngineWarning):
    """Unusual or potentially incorrect configuration parameters.

    Raised during config validation when parameter values fall outside
    typical ranges (e.g., a proxy ratio above 100%, a zero tax rate).
    """


class DataQualityWarning(StatementEngineWarning):
    """Input data anomalies found by the statement adapters.

    Raised when a statement row is skipped because its date cannot be
    parsed or its amount is missing, zero or non-numeric.
    """


class ProxyBalanceWarning(StatementEngineWarning):
    """The proxy balance sheet does not balance.

    Only raised when ``ReportingConfig.warn_on_imbalance`` is enabled. The
    balance sheet is synthesized from flow totals with fixed proxy ratios,
    so a non-zero difference is expected and is always available on
    ``BalanceSheetData.balancing_difference``.
    """

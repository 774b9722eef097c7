"""Configuration management using Pydantic v2 models.

This module provides the configuration classes for the statement engine. It
uses Pydantic models for validation, type safety, and serialization of the
policy parameters that drive report derivation.

Every heuristic constant of the engine lives here as a named, overridable
field: the straight-line useful life, the flat income tax rate, the proxy
ratios used to synthesize balance sheet lines in the absence of
sub-ledgers, and the placeholder cash conversion cycle. ``EngineConfig()``
with no arguments reproduces the published reporting policy.

Examples:
    Default policy::

        from statement_engine.config import EngineConfig

        config = EngineConfig()
        assert config.tax.income_tax_rate == 0.20

    Override individual parameters::

        config = EngineConfig().override(
            depreciation__useful_life_months=60,
            tax__income_tax_rate=0.25,
        )

    Loading from file::

        config = EngineConfig.from_yaml(Path("engine.yaml"))

Note:
    Rates and ratios are expressed as decimals (0.1 = 10%).
"""

from decimal import Decimal
import logging
from pathlib import Path
import sys
from typing import Any, Dict, List, Literal, Optional
import warnings

from pydantic import BaseModel, Field, field_validator, model_validator
import yaml

from ._warnings import ConfigurationWarning
from .decimal_utils import to_decimal


class DepreciationConfig(BaseModel):
    """Straight-line depreciation policy for capitalized expenditure.

    A single useful life applies regardless of asset type. Callers needing
    asset-specific useful lives must extend the scheduler rather than tune
    this value per report.

    Attributes:
        useful_life_months: Months over which capitalized spend is
            depreciated on a straight-line basis.
        cap_at_cost: Whether total depreciation is capped at the
            capitalized cost once the period exceeds the useful life.
    """

    useful_life_months: int = Field(
        default=36, gt=0, description="Straight-line useful life in months"
    )
    cap_at_cost: bool = Field(
        default=True, description="Cap accumulated depreciation at capitalized cost"
    )


class TaxConfig(BaseModel):
    """Income tax policy.

    Tax is a flat rate on earnings before tax, floored at zero. No refund
    or loss carryforward is modeled.
    """

    income_tax_rate: float = Field(default=0.20, ge=0, le=1, description="Flat income tax rate")

    @field_validator("income_tax_rate")
    @classmethod
    def validate_rate(cls, v: float) -> float:
        """Warn if the tax rate is zero or unusually high.

        Args:
            v: Income tax rate to validate.

        Returns:
            float: The validated rate.
        """
        if v == 0:
            warnings.warn(
                "Income tax rate is 0%; taxes and taxes payable will always be zero",
                ConfigurationWarning,
                stacklevel=2,
            )
        elif v > 0.5:
            warnings.warn(
                f"Income tax rate {v:.1%} is unusually high", ConfigurationWarning, stacklevel=2
            )
        return v

    @property
    def rate(self) -> Decimal:
        """Income tax rate as Decimal."""
        return to_decimal(self.income_tax_rate)


class ProxyRatioConfig(BaseModel):
    """Fixed ratios used as proxies for missing sub-ledgers.

    Bank statements carry no receivables, inventory or payables data, so
    these balance sheet lines are estimated as fixed shares of the period
    flow totals. Replace them with real sub-ledger balances once available.

    Attributes:
        receivables_to_revenue: Accounts receivable as a share of revenue.
        inventory_to_cogs: Inventory as a share of cost of goods sold.
        prepaid_to_opex: Prepaid expenses as a share of operating expenses.
        payables_to_cogs: Accounts payable as a share of cost of goods sold.
        accrued_to_opex: Accrued expenses as a share of operating expenses.
    """

    receivables_to_revenue: float = Field(default=0.10, ge=0)
    inventory_to_cogs: float = Field(default=0.15, ge=0)
    prepaid_to_opex: float = Field(default=0.05, ge=0)
    payables_to_cogs: float = Field(default=0.08, ge=0)
    accrued_to_opex: float = Field(default=0.03, ge=0)

    @model_validator(mode="after")
    def warn_on_large_ratios(self) -> "ProxyRatioConfig":
        """Warn when any proxy exceeds 100% of its base flow.

        Returns:
            The validated config.
        """
        for name, value in self.model_dump().items():
            if value > 1:
                warnings.warn(
                    f"Proxy ratio {name}={value:.1%} exceeds the flow it is derived from",
                    ConfigurationWarning,
                    stacklevel=2,
                )
        return self

    def as_decimal(self, name: str) -> Decimal:
        """Return a proxy ratio as Decimal.

        Args:
            name: Field name, e.g. ``"inventory_to_cogs"``.

        Returns:
            Ratio value as Decimal.
        """
        return to_decimal(getattr(self, name))


class LiquidityConfig(BaseModel):
    """Liquidity placeholders.

    The cash conversion cycle is not computed from receivable, payable and
    inventory turns; it is reported as this fixed number of days.
    """

    cash_conversion_cycle_days: int = Field(default=45, ge=0)


class ReportingConfig(BaseModel):
    """Presentation parameters of the derived report."""

    month_label_format: str = Field(
        default="%b %Y", description="strftime format of monthly series labels"
    )
    depreciation_label: str = Field(
        default="Amortization/Depreciation",
        description="Name of the synthetic depreciation entry in the expense breakdown",
    )
    warn_on_imbalance: bool = Field(
        default=False, description="Emit ProxyBalanceWarning when the balance sheet is off"
    )
    internal_counterparties: List[str] = Field(
        default_factory=lambda: [
            "atm",
            "terminal",
            "deposit",
            "own account",
            "cash withdrawal",
            "банкомат",
            "терминал",
            "депозит",
        ],
        description="Case-insensitive name fragments of technical counterparties "
        "left out of the counterparty report",
    )

    @field_validator("month_label_format")
    @classmethod
    def validate_month_format(cls, v: str) -> str:
        """Require a format that identifies both month and year.

        Month labels are parsed back into dates for chronological sorting,
        so the format must contain a month and a year directive.

        Args:
            v: strftime format string.

        Returns:
            str: The validated format.

        Raises:
            ValueError: If the month or year directive is missing.
        """
        if not any(d in v for d in ("%b", "%B", "%m")):
            raise ValueError(f"month_label_format {v!r} has no month directive")
        if not any(d in v for d in ("%Y", "%y")):
            raise ValueError(f"month_label_format {v!r} has no year directive")
        return v


class LoggingConfig(BaseModel):
    """Logging configuration.

    Controls logging behavior including level, output destinations,
    and message formatting.
    """

    enabled: bool = Field(default=True, description="Enable logging")
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )
    log_file: Optional[str] = Field(
        default=None, description="Log file path (None=no file logging)"
    )
    console_output: bool = Field(default=True, description="Log to console")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format",
    )


class EngineConfig(BaseModel):
    """Complete configuration for financial report derivation.

    Combines all sub-configurations and provides methods for loading,
    saving, and overriding them. All sections have defaults.
    """

    depreciation: DepreciationConfig = Field(default_factory=DepreciationConfig)
    tax: TaxConfig = Field(default_factory=TaxConfig)
    proxy_ratios: ProxyRatioConfig = Field(default_factory=ProxyRatioConfig)
    liquidity: LiquidityConfig = Field(default_factory=LiquidityConfig)
    reporting: ReportingConfig = Field(default_factory=ReportingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> "EngineConfig":
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file.

        Returns:
            EngineConfig object with validated parameters.

        Raises:
            FileNotFoundError: If config file doesn't exist.
            ValidationError: If configuration is invalid.
        """
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        # Remove private anchors if present
        data = {k: v for k, v in data.items() if not k.startswith("_")}

        return cls(**data)

    @classmethod
    def from_dict(
        cls, data: Dict[str, Any], base_config: Optional["EngineConfig"] = None
    ) -> "EngineConfig":
        """Create config from dictionary, optionally overriding base config.

        Args:
            data: Dictionary with configuration parameters.
            base_config: Optional base configuration to override.

        Returns:
            EngineConfig object with validated parameters.
        """
        if base_config is None:
            return cls(**data)

        merged = deep_merge(base_config.model_dump(), data)
        return cls(**merged)

    def override(self, **kwargs: Any) -> "EngineConfig":
        """Create a new config with overridden parameters.

        Args:
            **kwargs: Parameters to override in dot notation
                     e.g., tax__income_tax_rate=0.25.

        Returns:
            New EngineConfig object with overrides applied.
        """
        override_dict: Dict[str, Any] = {}
        for key, value in kwargs.items():
            parts = key.split("__")
            current = override_dict
            for part in parts[:-1]:
                if part not in current:
                    current[part] = {}
                current = current[part]
            current[parts[-1]] = value

        return EngineConfig.from_dict(override_dict, base_config=self)

    def to_yaml(self, path: Path) -> None:
        """Save configuration to YAML file.

        Args:
            path: Path where to save the configuration.
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(self.model_dump(), f, default_flow_style=False, sort_keys=False)

    def setup_logging(self) -> None:
        """Configure logging based on settings.

        Sets up logging handlers for console and/or file output on the
        ``statement_engine`` logger.
        """
        if not self.logging.enabled:
            return

        logger = logging.getLogger("statement_engine")
        logger.setLevel(getattr(logging, self.logging.level))
        logger.handlers.clear()

        formatter = logging.Formatter(self.logging.format)

        if self.logging.console_output:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(formatter)
            logger.addHandler(console_handler)

        if self.logging.log_file:
            log_path = Path(self.logging.log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path, encoding="utf-8")
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base.

    Args:
        base: Base dictionary to merge into.
        override: Override dictionary to merge from.

    Returns:
        Merged dictionary with overrides applied.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result

"""Configuration system using pydantic-settings with environment variable loading."""

from decimal import Decimal
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from flowfin.currency.rates import DEFAULT_EXCHANGE_RATES, ExchangeRateTable


class CurrencySettings(BaseSettings):
    """Exchange rates and display rules.

    ``rates`` is read from CURRENCY_RATES as a JSON object, e.g.
    CURRENCY_RATES='{"USD": "1", "EUR": "0.92"}'.
    """

    model_config = SettingsConfigDict(env_prefix="CURRENCY_")

    reference_currency: str = "USD"
    default_currency: str = "USD"  # last resort when neither tenant nor user picked one
    rates: dict[str, Decimal] = Field(default_factory=lambda: dict(DEFAULT_EXCHANGE_RATES))
    max_fraction_digits: int = 2
    min_fraction_digits: int = 0
    log_fallbacks: bool = True  # warn when an unknown code is read at rate 1

    def build_rate_table(self) -> ExchangeRateTable:
        """Validate the configured rates into an ExchangeRateTable.

        Raises:
            InvalidRateError: If any configured rate is zero or negative.
        """
        return ExchangeRateTable(
            self.rates,
            reference=self.reference_currency,
            log_fallbacks=self.log_fallbacks,
        )


class ReportSettings(BaseSettings):
    """Row limits for dashboard aggregations."""

    model_config = SettingsConfigDict(env_prefix="REPORTS_")

    top_projects_limit: int = 10
    top_leads_limit: int = 5
    recent_transactions_limit: int = 10


class DashboardSettings(BaseSettings):
    """Reporting API server configuration."""

    model_config = SettingsConfigDict(env_prefix="DASHBOARD_")

    host: str = "0.0.0.0"
    port: int = 8080


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"
    currency: CurrencySettings = CurrencySettings()
    reports: ReportSettings = ReportSettings()
    dashboard: DashboardSettings = DashboardSettings()

"""Tests for settings loading and rate table construction."""

from decimal import Decimal

import pytest

from flowfin.config import AppSettings, CurrencySettings, ReportSettings
from flowfin.currency.rates import DEFAULT_EXCHANGE_RATES
from flowfin.exceptions import InvalidRateError


def test_defaults() -> None:
    settings = CurrencySettings()
    assert settings.reference_currency == "USD"
    assert settings.default_currency == "USD"
    assert settings.rates == DEFAULT_EXCHANGE_RATES
    assert settings.max_fraction_digits == 2
    assert settings.min_fraction_digits == 0


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CURRENCY_DEFAULT_CURRENCY", "EUR")
    monkeypatch.setenv("CURRENCY_RATES", '{"USD": "1", "EUR": "0.9"}')
    monkeypatch.setenv("REPORTS_TOP_LEADS_LIMIT", "3")

    currency = CurrencySettings()
    assert currency.default_currency == "EUR"
    assert currency.rates == {"USD": Decimal("1"), "EUR": Decimal("0.9")}
    assert ReportSettings().top_leads_limit == 3


def test_log_format_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("LOG_FORMAT", raising=False)
    assert AppSettings().log_format == "console"
    monkeypatch.setenv("LOG_FORMAT", "json")
    assert AppSettings().log_format == "json"


def test_build_rate_table(mock_settings: AppSettings) -> None:
    table = mock_settings.currency.build_rate_table()
    assert table.rate("EUR") == Decimal("0.92")
    assert table.reference == "USD"
    assert "JPY" not in table


def test_build_rate_table_rejects_zero_rate() -> None:
    settings = CurrencySettings(rates={"USD": Decimal("1"), "EUR": Decimal("0")})
    with pytest.raises(InvalidRateError):
        settings.build_rate_table()

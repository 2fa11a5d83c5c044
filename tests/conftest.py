"""Shared test fixtures for flowfin."""

from decimal import Decimal

import pytest

from flowfin.config import AppSettings, CurrencySettings
from flowfin.currency.normalizer import CurrencyContext
from flowfin.currency.rates import ExchangeRateTable


@pytest.fixture
def rate_table() -> ExchangeRateTable:
    """Small deterministic table: USD 1, EUR 0.92, GBP 0.79."""
    return ExchangeRateTable({
        "USD": Decimal("1"),
        "EUR": Decimal("0.92"),
        "GBP": Decimal("0.79"),
    })


@pytest.fixture
def usd_context(rate_table: ExchangeRateTable) -> CurrencyContext:
    return CurrencyContext(target="USD", rates=rate_table)


@pytest.fixture
def eur_context(rate_table: ExchangeRateTable) -> CurrencyContext:
    return CurrencyContext(target="EUR", rates=rate_table)


@pytest.fixture
def mock_settings() -> AppSettings:
    """Return AppSettings with test defaults and the small rate table."""
    return AppSettings(
        log_level="DEBUG",
        currency=CurrencySettings(
            rates={"USD": Decimal("1"), "EUR": Decimal("0.92"), "GBP": Decimal("0.79")},
        ),
    )

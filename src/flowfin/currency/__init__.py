"""Currency layer -- exchange rates, amount validation, conversion, formatting and tenant preference."""

from flowfin.currency.amounts import coerce_amount, parse_amount
from flowfin.currency.catalogue import CURRENCIES, CurrencyInfo, currency_symbol, get_currency
from flowfin.currency.normalizer import (
    CurrencyContext,
    CurrencyNormalizer,
    convert,
    convert_decimal,
    format_amount,
)
from flowfin.currency.preference import (
    CurrencyPreference,
    InMemorySettingsFeed,
    SettingsFeed,
    UserProfile,
)
from flowfin.currency.rates import DEFAULT_EXCHANGE_RATES, ExchangeRateTable

__all__ = [
    "CURRENCIES",
    "DEFAULT_EXCHANGE_RATES",
    "CurrencyContext",
    "CurrencyInfo",
    "CurrencyNormalizer",
    "CurrencyPreference",
    "ExchangeRateTable",
    "InMemorySettingsFeed",
    "SettingsFeed",
    "UserProfile",
    "coerce_amount",
    "convert",
    "convert_decimal",
    "currency_symbol",
    "format_amount",
    "get_currency",
    "parse_amount",
]

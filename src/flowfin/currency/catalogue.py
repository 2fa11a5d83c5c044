"""Selectable currencies with their en-US display symbols.

Symbols follow the en-US locale: a code with no narrow symbol in that locale
is displayed as the code followed by a non-breaking space.
"""

from dataclasses import dataclass

NBSP = "\u00a0"


@dataclass(frozen=True)
class CurrencyInfo:
    """A currency offered in tenant settings."""

    code: str
    label: str
    symbol: str | None = None  # None = display the code itself

    @property
    def prefix(self) -> str:
        """Text placed before the digits when formatting an amount."""
        return self.symbol if self.symbol is not None else f"{self.code}{NBSP}"


CURRENCIES: tuple[CurrencyInfo, ...] = (
    CurrencyInfo("USD", "United States Dollar", "$"),
    CurrencyInfo("EUR", "Euro", "€"),
    CurrencyInfo("GBP", "British Pound Sterling", "£"),
    CurrencyInfo("JPY", "Japanese Yen", "¥"),
    CurrencyInfo("AUD", "Australian Dollar", "A$"),
    CurrencyInfo("CAD", "Canadian Dollar", "CA$"),
    CurrencyInfo("CHF", "Swiss Franc"),
    CurrencyInfo("CNY", "Chinese Yuan", "CN¥"),
    CurrencyInfo("INR", "Indian Rupee", "₹"),
    CurrencyInfo("NZD", "New Zealand Dollar", "NZ$"),
    CurrencyInfo("AED", "United Arab Emirates Dirham"),
    CurrencyInfo("BRL", "Brazilian Real", "R$"),
    CurrencyInfo("DKK", "Danish Krone"),
    CurrencyInfo("HKD", "Hong Kong Dollar", "HK$"),
    CurrencyInfo("IDR", "Indonesian Rupiah"),
    CurrencyInfo("ILS", "Israeli New Sheqel", "₪"),
    CurrencyInfo("KRW", "South Korean Won", "₩"),
    CurrencyInfo("MXN", "Mexican Peso", "MX$"),
    CurrencyInfo("MYR", "Malaysian Ringgit"),
    CurrencyInfo("NOK", "Norwegian Krone"),
    CurrencyInfo("PHP", "Philippine Peso", "₱"),
    CurrencyInfo("PLN", "Polish Zloty"),
    CurrencyInfo("RUB", "Russian Ruble"),
    CurrencyInfo("SAR", "Saudi Riyal"),
    CurrencyInfo("SEK", "Swedish Krona"),
    CurrencyInfo("SGD", "Singapore Dollar"),
    CurrencyInfo("THB", "Thai Baht"),
    CurrencyInfo("TRY", "Turkish Lira"),
    CurrencyInfo("TWD", "New Taiwan Dollar", "NT$"),
    CurrencyInfo("ZAR", "South African Rand"),
)

_BY_CODE: dict[str, CurrencyInfo] = {c.code: c for c in CURRENCIES}


def get_currency(code: str) -> CurrencyInfo | None:
    """Return catalogue info for a code, or None if it is not offered."""
    return _BY_CODE.get(code)


def currency_prefix(code: str) -> str:
    """Return the text that precedes a formatted amount in this currency."""
    info = _BY_CODE.get(code)
    if info is None:
        return f"{code}{NBSP}"
    return info.prefix


def currency_symbol(code: str) -> str:
    """Return the display symbol for a code, or the bare code when it has none."""
    return currency_prefix(code).strip(NBSP)

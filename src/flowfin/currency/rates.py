"""Static exchange-rate table anchored to a reference currency.

Rates are expressed as units of the currency per one unit of the reference
currency (USD = 1, EUR = 0.92 means 1 USD buys 0.92 EUR).

Unknown codes resolve to rate 1, i.e. they are treated as if they were the
reference currency. Reports built on top of this table depend on that
behavior, so it is kept and logged rather than rejected.
"""

from collections.abc import Iterator, Mapping
from decimal import Decimal, InvalidOperation

from flowfin.exceptions import InvalidRateError
from flowfin.logging import get_logger

logger = get_logger(__name__)

REFERENCE_CURRENCY = "USD"

DEFAULT_EXCHANGE_RATES: dict[str, Decimal] = {
    "USD": Decimal("1"),
    "EUR": Decimal("0.92"),
    "GBP": Decimal("0.79"),
    "INR": Decimal("83.5"),
    "AUD": Decimal("1.52"),
    "CAD": Decimal("1.36"),
    "SGD": Decimal("1.35"),
    "JPY": Decimal("151.5"),
}

FALLBACK_RATE = Decimal("1")


def _to_rate(code: str, raw: object) -> Decimal:
    """Parse a configured rate, rejecting anything that is not a positive finite number."""
    if isinstance(raw, bool):
        raise InvalidRateError(f"rate for {code} must be numeric, got {raw!r}")
    try:
        rate = raw if isinstance(raw, Decimal) else Decimal(str(raw))
    except (InvalidOperation, ValueError) as e:
        raise InvalidRateError(f"rate for {code} is not a number: {raw!r}") from e
    if not rate.is_finite() or rate <= 0:
        raise InvalidRateError(f"rate for {code} must be positive, got {raw!r}")
    return rate


class ExchangeRateTable(Mapping[str, Decimal]):
    """Immutable currency -> rate mapping relative to a reference currency.

    Args:
        rates: Mapping of ISO 4217 code to rate. Values may be Decimal, int,
            float or numeric strings.
        reference: The currency every rate is expressed against.
        log_fallbacks: Emit a warning whenever an unknown code falls back to
            rate 1.

    Raises:
        InvalidRateError: If any rate is zero, negative, or not a number.
    """

    def __init__(
        self,
        rates: Mapping[str, object] | None = None,
        reference: str = REFERENCE_CURRENCY,
        log_fallbacks: bool = True,
    ) -> None:
        source = DEFAULT_EXCHANGE_RATES if rates is None else rates
        self._rates: dict[str, Decimal] = {
            code: _to_rate(code, raw) for code, raw in source.items()
        }
        self._reference = reference
        self._log_fallbacks = log_fallbacks

        if self._rates.get(reference, FALLBACK_RATE) != FALLBACK_RATE:
            logger.warning(
                "reference_currency_rate_not_one",
                reference=reference,
                rate=str(self._rates[reference]),
            )

    @property
    def reference(self) -> str:
        return self._reference

    def __getitem__(self, code: str) -> Decimal:
        return self._rates[code]

    def __iter__(self) -> Iterator[str]:
        return iter(self._rates)

    def __len__(self) -> int:
        return len(self._rates)

    def __repr__(self) -> str:
        return f"ExchangeRateTable({self._rates!r}, reference={self._reference!r})"

    def rate(self, code: str) -> Decimal:
        """Return the rate for a code, or 1 when the code is not in the table."""
        rate = self._rates.get(code)
        if rate is None:
            if self._log_fallbacks:
                logger.warning("unknown_currency_rate_fallback", currency=code)
            return FALLBACK_RATE
        return rate

"""Currency conversion and display formatting.

Conversion goes through the reference currency of the rate table:

    amount_in_reference = amount / rate(source)
    result = amount_in_reference * rate(target)

When source and target are the same currency the amount is returned
untouched, so the common single-currency tenant never sees rounding drift.

The target currency is never read from ambient state. Callers pass a
CurrencyContext, or use CurrencyNormalizer, which takes a fresh context
snapshot from a CurrencyPreference on every call.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import TYPE_CHECKING

from flowfin.currency.amounts import ZERO, coerce_amount
from flowfin.currency.catalogue import currency_prefix, currency_symbol
from flowfin.currency.rates import REFERENCE_CURRENCY, ExchangeRateTable
from flowfin.logging import get_logger

if TYPE_CHECKING:
    from flowfin.currency.preference import CurrencyPreference

logger = get_logger(__name__)

DEFAULT_SOURCE_CURRENCY = REFERENCE_CURRENCY


@dataclass(frozen=True)
class CurrencyContext:
    """Conversion destination plus the rates used to reach it."""

    target: str
    rates: ExchangeRateTable
    max_fraction_digits: int = 2
    min_fraction_digits: int = 0

    def with_target(self, target: str) -> CurrencyContext:
        """Return a copy of this context converting into another currency."""
        return CurrencyContext(
            target=target,
            rates=self.rates,
            max_fraction_digits=self.max_fraction_digits,
            min_fraction_digits=self.min_fraction_digits,
        )


def convert_decimal(amount: Decimal, source: str, context: CurrencyContext) -> Decimal:
    """Convert an already-validated amount from ``source`` into the context target.

    A result too large for Decimal to represent reads as zero, like any
    other amount that cannot be converted.
    """
    if source == context.target:
        return amount
    try:
        with localcontext():
            amount_in_reference = amount / context.rates.rate(source)
            result = amount_in_reference * context.rates.rate(context.target)
        reason = None if result.is_finite() else "not finite"
    except ArithmeticError as e:
        reason = type(e).__name__
    if reason is not None:
        logger.warning(
            "conversion_coerced_to_zero",
            source=source,
            target=context.target,
            reason=reason,
        )
        return ZERO
    return result


def convert(
    amount: object,
    source: str | None,
    context: CurrencyContext,
    lenient: bool = False,
) -> Decimal:
    """Convert an amount tagged with its currency into the context target.

    Args:
        amount: Any value. None, NaN, booleans and non-numeric strings count
            as zero.
        source: Currency of ``amount``. None, empty or a non-string value
            means USD.
        context: Target currency and rate table.
        lenient: Strip symbols and grouping from string amounts ("$1,200").

    Returns:
        The converted amount. Never raises.
    """
    value = coerce_amount(amount, lenient=lenient)
    if source is not None and not isinstance(source, str):
        logger.warning("source_currency_ignored", source=repr(source))
        source = None
    return convert_decimal(value, source or DEFAULT_SOURCE_CURRENCY, context)


def _group_thousands(digits: str) -> str:
    """Insert commas every three digits from the right of an integer string."""
    return f"{Decimal(digits):,}"


def render(value: Decimal, context: CurrencyContext) -> str:
    """Render an amount already expressed in the context target currency.

    en-US conventions: currency prefix, comma grouping, at most
    ``max_fraction_digits`` decimals rounded half away from zero, trailing
    zeros dropped down to ``min_fraction_digits``.
    """
    quantum = Decimal(1).scaleb(-context.max_fraction_digits)
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the fraction digits
        ctx.prec = max(ctx.prec, value.adjusted() + context.max_fraction_digits + 2)
        rounded = value.quantize(quantum, rounding=ROUND_HALF_UP)
    sign = "-" if rounded < 0 else ""

    whole, _, fraction = f"{rounded.copy_abs():f}".partition(".")
    fraction = fraction.rstrip("0")
    if len(fraction) < context.min_fraction_digits:
        fraction = fraction.ljust(context.min_fraction_digits, "0")

    text = _group_thousands(whole)
    if fraction:
        text = f"{text}.{fraction}"
    return f"{sign}{currency_prefix(context.target)}{text}"


def format_amount(
    amount: object,
    source: str | None,
    context: CurrencyContext,
    lenient: bool = False,
) -> str:
    """Convert an amount into the context target and render it for display."""
    return render(convert(amount, source, context, lenient=lenient), context)


class CurrencyNormalizer:
    """Conversion facade bound to a tenant's reactive currency preference.

    Every call reads the preference's current target, so a settings change
    applies to the next call. Values already rendered are not recomputed;
    register a listener on the preference to re-render on change.

    Args:
        preference: Source of the tenant's target currency.
        rates: Rate table used for every conversion.
        max_fraction_digits: Maximum decimals shown by ``format``.
        min_fraction_digits: Minimum decimals shown by ``format``.
    """

    def __init__(
        self,
        preference: CurrencyPreference,
        rates: ExchangeRateTable,
        max_fraction_digits: int = 2,
        min_fraction_digits: int = 0,
    ) -> None:
        self._preference = preference
        self._rates = rates
        self._max_fraction_digits = max_fraction_digits
        self._min_fraction_digits = min_fraction_digits

    def current_target_currency(self) -> str:
        return self._preference.current_target_currency()

    def context(self) -> CurrencyContext:
        """Snapshot the current target currency into an immutable context."""
        return CurrencyContext(
            target=self.current_target_currency(),
            rates=self._rates,
            max_fraction_digits=self._max_fraction_digits,
            min_fraction_digits=self._min_fraction_digits,
        )

    def convert(self, amount: object, source: str | None = None) -> Decimal:
        return convert(amount, source, self.context())

    def format(self, amount: object, source: str | None = None) -> str:
        """Format an amount in the tenant's currency.

        Without ``source`` the amount is taken to be USD, matching records
        written before amounts carried a currency.
        """
        return format_amount(amount, source, self.context())

    def symbol(self) -> str:
        return currency_symbol(self.current_target_currency())

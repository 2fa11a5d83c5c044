"""Validation of loosely-typed monetary amounts.

Document records carry amounts as numbers, numeric strings, or nothing at
all. ``parse_amount`` is strict and raises InvalidAmountError; ``coerce_amount``
applies the dashboard policy of reading anything invalid as zero.
"""

import re
from decimal import Decimal, InvalidOperation

from flowfin.exceptions import InvalidAmountError
from flowfin.logging import get_logger

logger = get_logger(__name__)

ZERO = Decimal("0")

# Lenient mode keeps digits, the decimal point and minus signs ("$12,500.00" -> "12500.00")
_NON_NUMERIC = re.compile(r"[^0-9.\-]+")


def parse_amount(raw: object, lenient: bool = False) -> Decimal:
    """Read a monetary amount as a finite Decimal.

    Args:
        raw: int, float, Decimal or numeric string.
        lenient: Strip currency symbols, grouping separators and any other
            non-numeric characters from strings before parsing. The whole
            remaining text must be a number; a leading number followed by
            other digits or signs ("1-2", "1.2.3") is rejected rather than
            truncated to its prefix.

    Returns:
        The amount as Decimal. Ints convert exactly whatever their size;
        floats go through ``str()`` so 0.1 stays 0.1.

    Raises:
        InvalidAmountError: For None, booleans, unparseable strings, NaN and
            infinities.
    """
    if raw is None:
        raise InvalidAmountError(raw, "missing")
    if isinstance(raw, bool):
        raise InvalidAmountError(raw, "boolean is not an amount")

    if isinstance(raw, Decimal):
        value = raw
    elif isinstance(raw, int):
        value = Decimal(raw)
    elif isinstance(raw, float):
        value = Decimal(str(raw))
    elif isinstance(raw, str):
        text = _NON_NUMERIC.sub("", raw) if lenient else raw.strip()
        if not text:
            raise InvalidAmountError(raw, "empty")
        try:
            value = Decimal(text)
        except (InvalidOperation, ValueError) as e:
            raise InvalidAmountError(raw, "not numeric") from e
    else:
        raise InvalidAmountError(raw, f"unsupported type {type(raw).__name__}")

    if not value.is_finite():
        raise InvalidAmountError(raw, "not finite")
    return value


def coerce_amount(raw: object, lenient: bool = False) -> Decimal:
    """Parse an amount, reading anything invalid as zero.

    Missing amounts are common in legacy records and are logged at debug
    level; every other rejection is logged as a warning.
    """
    try:
        return parse_amount(raw, lenient=lenient)
    except InvalidAmountError as e:
        if e.reason == "missing":
            logger.debug("amount_missing_read_as_zero")
        else:
            logger.warning("amount_coerced_to_zero", raw=repr(raw), reason=e.reason)
        return ZERO

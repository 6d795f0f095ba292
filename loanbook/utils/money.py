"""Minor-unit and rate conversion utilities"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_EVEN, ROUND_HALF_UP
from typing import Union

ROUNDING_MODES = {
    "half_up": ROUND_HALF_UP,
    "half_even": ROUND_HALF_EVEN,
}

Number = Union[str, int, float, Decimal]


def to_decimal(value: Number) -> Decimal:
    """Convert to Decimal without binary float artefacts (0.1 stays 0.1)"""
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    elif isinstance(value, float):
        result = Decimal(repr(value))
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError(f"Not a number: {value!r}") from None
    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


def parse_minor_units(value: Number) -> int:
    """
    Parse an amount in minor currency units.

    Integral decimals such as "61104.0" are accepted; any fractional part is an error
    rather than being truncated.
    """
    amount = to_decimal(value)
    if amount != amount.to_integral_value():
        raise ValueError(f"Amount must be a whole number of minor units: {value!r}")
    return int(amount)


def parse_rate(value: Number) -> Decimal:
    """Parse a fraction in [0, 1]"""
    rate = to_decimal(value)
    if not Decimal(0) <= rate <= Decimal(1):
        raise ValueError(f"Rate must be between 0 and 1: {value!r}")
    return rate


def round_minor_units(amount: Decimal, mode: str = "half_up") -> int:
    """Round an exact amount to the nearest minor unit"""
    try:
        rounding = ROUNDING_MODES[mode]
    except KeyError:
        raise ValueError(f"Unknown rounding mode: {mode}") from None
    return int(amount.quantize(Decimal(1), rounding=rounding))

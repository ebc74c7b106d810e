"""Conversion of oracle prices to fixed-point fractions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..errors import LendingError
from ..fraction import BigFraction, Fraction

if TYPE_CHECKING:
    from .types import Price

_MAX_EXPONENT = 36
_POWERS_OF_TEN = tuple(10**exponent for exponent in range(_MAX_EXPONENT + 1))


def ten_pow(exponent: int) -> int:
    """Ten to the power exponent, for exponent between 0 and 36."""
    if isinstance(exponent, bool) or not isinstance(exponent, int):
        raise TypeError("exponent must be an integer")
    if not 0 <= exponent <= _MAX_EXPONENT:
        raise ValueError(f"no support for exponent: {exponent}")
    return _POWERS_OF_TEN[exponent]


def price_to_fraction(price: Price) -> Fraction:
    """value / 10**exp as a Fraction, rounded down."""
    decimal = ten_pow(price.exp)
    big = BigFraction.from_num(price.value) / decimal
    try:
        return big.to_fraction()
    except LendingError as error:
        raise OverflowError(
            "Failed to convert Price stored on BigFraction to Fraction"
        ) from error
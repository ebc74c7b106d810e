"""Unsigned 128-bit fixed-point numbers with 60 fractional bits."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction as _Rational
from typing import ClassVar

from .errors import LendingError, LendingErrorCode

_FRAC_NBITS = 60
_FRAC_MASK = (1 << _FRAC_NBITS) - 1
_U128_MAX = (1 << 128) - 1
_U256_MAX = (1 << 256) - 1
_U64_MAX = (1 << 64) - 1


def _checked_bits(bits: int) -> int:
    if not 0 <= bits <= _U128_MAX:
        raise OverflowError("value out of range for Fraction")
    return bits


def _require_int(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected an integer, got {type(value).__name__}")
    return value


@dataclass(frozen=True, order=True, slots=True, repr=False)
class Fraction:
    """Fixed-point value stored as its raw scaled bits (value * 2**60)."""

    bits: int

    FRAC_NBITS: ClassVar[int] = _FRAC_NBITS
    ZERO: ClassVar["Fraction"]
    ONE: ClassVar["Fraction"]
    MAX: ClassVar["Fraction"]

    def __post_init__(self) -> None:
        _checked_bits(_require_int(self.bits))

    @classmethod
    def from_bits(cls, bits: int) -> "Fraction":
        return cls(bits)

    @classmethod
    def from_num(cls, value: "Fraction | int | float | Decimal | _Rational") -> "Fraction":
        """Convert a number, rounding to the nearest representable value."""
        if isinstance(value, Fraction):
            return value
        if isinstance(value, bool):
            raise TypeError("booleans are not numbers here")
        if isinstance(value, int):
            return cls(_checked_bits(value << _FRAC_NBITS))
        if isinstance(value, (float, Decimal, _Rational)):
            exact = _Rational(value)
            return cls(_checked_bits(round(exact * (1 << _FRAC_NBITS))))
        raise TypeError(f"cannot convert {type(value).__name__} to Fraction")

    @classmethod
    def from_bps(cls, bps: "int | float | Decimal | Fraction") -> "Fraction":
        return cls.from_num(bps) / 10_000

    @classmethod
    def from_percent(cls, percent: "int | float | Decimal | Fraction") -> "Fraction":
        return cls.from_num(percent) / 100

    def to_bps(self) -> int:
        return (self * 10_000).to_round()

    def to_percent(self) -> int:
        return (self * 100).to_round()

    def __add__(self, other: object) -> "Fraction":
        if isinstance(other, (Fraction, int)) and not isinstance(other, bool):
            return Fraction(_checked_bits(self.bits + Fraction.from_num(other).bits))
        return NotImplemented

    __radd__ = __add__

    def __sub__(self, other: object) -> "Fraction":
        if isinstance(other, (Fraction, int)) and not isinstance(other, bool):
            return Fraction(_checked_bits(self.bits - Fraction.from_num(other).bits))
        return NotImplemented

    def __rsub__(self, other: object) -> "Fraction":
        if isinstance(other, int) and not isinstance(other, bool):
            return Fraction(_checked_bits(Fraction.from_num(other).bits - self.bits))
        return NotImplemented

    def __mul__(self, other: object) -> "Fraction":
        if isinstance(other, Fraction):
            return Fraction(_checked_bits((self.bits * other.bits) >> _FRAC_NBITS))
        if isinstance(other, int) and not isinstance(other, bool):
            return Fraction(_checked_bits(self.bits * other))
        return NotImplemented

    __rmul__ = __mul__

    def __truediv__(self, other: object) -> "Fraction":
        if isinstance(other, Fraction):
            if other.bits == 0:
                raise ZeroDivisionError("division by zero Fraction")
            return Fraction(_checked_bits((self.bits << _FRAC_NBITS) // other.bits))
        if isinstance(other, int) and not isinstance(other, bool):
            if other == 0:
                raise ZeroDivisionError("division by zero")
            return Fraction(_checked_bits(self.bits // other))
        return NotImplemented

    def checked_add(self, other: "Fraction | int") -> "Fraction | None":
        try:
            return self + other
        except OverflowError:
            return None

    def checked_sub(self, other: "Fraction | int") -> "Fraction | None":
        try:
            return self - other
        except OverflowError:
            return None

    def checked_mul(self, other: "Fraction | int") -> "Fraction | None":
        try:
            return self * other
        except OverflowError:
            return None

    def checked_pow(self, power: int) -> "Fraction | None":
        return pow_fraction(self, power)

    def abs_diff(self, other: "Fraction") -> "Fraction":
        return Fraction(abs(self.bits - other.bits))

    def mul_int_ratio(self, numerator: int, denominator: int) -> "Fraction":
        return self * _require_int(numerator) / _require_int(denominator)

    def full_mul_int_ratio(self, numerator: int, denominator: int) -> "Fraction":
        """Multiply then divide with a 256-bit intermediate."""
        numerator = _require_int(numerator)
        denominator = _require_int(denominator)
        if not 0 <= numerator <= _U256_MAX or not 0 <= denominator <= _U256_MAX:
            raise OverflowError("ratio operand out of 256-bit range")
        product = self.bits * numerator
        if product > _U256_MAX:
            raise OverflowError("multiplication overflow in 256 bits")
        result = product // denominator
        if result > _U128_MAX:
            raise OverflowError(
                "Denominator is not big enough, the result doesn't fit in a Fraction."
            )
        return Fraction(result)

    def div_ceil(self, denominator: "Fraction") -> "Fraction":
        """Divide, rounding the result up to the next representable value."""
        denom = denominator.bits
        if denom == 0:
            raise ZeroDivisionError("division by zero Fraction")
        result = ((self.bits << _FRAC_NBITS) + denom - 1) // denom
        if result > _U128_MAX:
            raise OverflowError("Overflow in div_ceil")
        return Fraction(result)

    def floor(self) -> "Fraction":
        return Fraction(self.bits & ~_FRAC_MASK)

    def ceil(self) -> "Fraction":
        floor = self.bits & ~_FRAC_MASK
        if floor != self.bits:
            floor += 1 << _FRAC_NBITS
        return Fraction(_checked_bits(floor))

    def round(self) -> "Fraction":
        """Round to the nearest integer, halves away from zero."""
        rounded = (self.bits + (1 << (_FRAC_NBITS - 1))) & ~_FRAC_MASK
        return Fraction(_checked_bits(rounded))

    def to_floor(self) -> int:
        return self.floor().bits >> _FRAC_NBITS

    def to_ceil(self) -> int:
        return self.ceil().bits >> _FRAC_NBITS

    def to_round(self) -> int:
        return self.round().bits >> _FRAC_NBITS

    def to_display(self) -> str:
        """Format with four decimal places."""
        round_comp = (1 << _FRAC_NBITS) // (10_000 * 2)
        scaled = self.bits + round_comp
        integer = scaled >> _FRAC_NBITS
        frac = scaled & _FRAC_MASK & _U64_MAX
        frac = ((frac >> 30) * 10_000) >> 30
        return f"{integer}.{frac:04d}"

    def __float__(self) -> float:
        return self.bits / (1 << _FRAC_NBITS)

    def __int__(self) -> int:
        return self.to_floor()

    def __str__(self) -> str:
        return self.to_display()

    def __repr__(self) -> str:
        return f"Fraction.from_bits({self.bits})"


Fraction.ZERO = Fraction(0)
Fraction.ONE = Fraction(1 << _FRAC_NBITS)
Fraction.MAX = Fraction(_U128_MAX)

FRACTION_ONE_SCALED = Fraction.ONE.bits

EPSILON = Fraction.from_bits(1_000_000)


def pow_fraction(fraction: Fraction, power: int) -> Fraction | None:
    """Raise to an integer power by squaring; None on overflow."""
    power = _require_int(power)
    if power < 0:
        raise ValueError("power must not be negative")
    if power == 0:
        return Fraction.ONE
    x = fraction
    y = Fraction.ONE
    n = power
    while n > 1:
        if n % 2 == 1:
            y = x.checked_mul(y)
            if y is None:
                return None
        x = x.checked_mul(x)
        if x is None:
            return None
        n //= 2
    return x.checked_mul(y)


def bps_u128_to_fraction(bps: int) -> Fraction:
    if bps == 10_000:
        return Fraction.ONE
    return Fraction.from_num(_require_int(bps)) / 10_000


def pct_u128_to_fraction(percent: int) -> Fraction:
    if percent == 100:
        return Fraction.ONE
    return Fraction.from_num(_require_int(percent)) / 100


def to_sf(value: "Fraction | int | float | Decimal | _Rational") -> int:
    """Scaled representation of a number."""
    return Fraction.from_num(value).bits


def from_sf(sf: int) -> Fraction:
    return Fraction.from_bits(sf)


def _checked_u256(value: int) -> int:
    if not 0 <= value <= _U256_MAX:
        raise OverflowError("value out of 256-bit range")
    return value


@dataclass(frozen=True, order=True, slots=True)
class BigFraction:
    """Fixed-point value with 60 fractional bits held in 256 bits."""

    value: int = 0

    def __post_init__(self) -> None:
        _checked_u256(_require_int(self.value))

    @classmethod
    def from_fraction(cls, fraction: "Fraction | int | float | Decimal") -> "BigFraction":
        return cls(Fraction.from_num(fraction).bits)

    @classmethod
    def from_num(cls, value: int) -> "BigFraction":
        value = _checked_u256(_require_int(value))
        return cls((value << _FRAC_NBITS) & _U256_MAX)

    def to_fraction(self) -> Fraction:
        if self.value > _U128_MAX:
            raise LendingError(LendingErrorCode.INTEGER_OVERFLOW)
        return Fraction(self.value)

    def to_limbs(self) -> tuple[int, int, int, int]:
        """Four little-endian 64-bit limbs."""
        return tuple((self.value >> (64 * i)) & _U64_MAX for i in range(4))  # type: ignore[return-value]

    @classmethod
    def from_limbs(cls, limbs: "tuple[int, ...] | list[int]") -> "BigFraction":
        limbs = tuple(limbs)
        if len(limbs) != 4:
            raise ValueError("expected exactly four limbs")
        value = 0
        for shift, limb in enumerate(limbs):
            if not 0 <= _require_int(limb) <= _U64_MAX:
                raise ValueError("limb out of 64-bit range")
            value |= limb << (64 * shift)
        return cls(value)

    def __add__(self, other: object) -> "BigFraction":
        if isinstance(other, BigFraction):
            return BigFraction(_checked_u256(self.value + other.value))
        return NotImplemented

    def __sub__(self, other: object) -> "BigFraction":
        if isinstance(other, BigFraction):
            return BigFraction(_checked_u256(self.value - other.value))
        return NotImplemented

    def __mul__(self, other: object) -> "BigFraction":
        if isinstance(other, BigFraction):
            return BigFraction(_checked_u256(self.value * other.value) >> _FRAC_NBITS)
        if isinstance(other, int) and not isinstance(other, bool):
            return BigFraction(_checked_u256(self.value * _checked_u256(other)))
        return NotImplemented

    __rmul__ = __mul__

    def __truediv__(self, other: object) -> "BigFraction":
        shifted = (self.value << _FRAC_NBITS) & _U256_MAX
        if isinstance(other, BigFraction):
            if other.value == 0:
                raise ZeroDivisionError("division by zero BigFraction")
            return BigFraction(shifted // other.value)
        if isinstance(other, Fraction):
            if other.bits == 0:
                raise ZeroDivisionError("division by zero Fraction")
            return BigFraction(shifted // other.bits)
        if isinstance(other, int) and not isinstance(other, bool):
            if other == 0:
                raise ZeroDivisionError("division by zero")
            return BigFraction(self.value // _checked_u256(other))
        return NotImplemented
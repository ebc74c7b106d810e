"""Oracle price values with a decimal exponent, and lazily loaded prices."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from ..fraction import Fraction
from .utils import ten_pow

_U32_MAX = (1 << 32) - 1
_U256_MAX = (1 << 256) - 1


@dataclass(frozen=True, slots=True)
class Price:
    """An unsigned integer price of `bits` width meaning value / 10**exp."""

    value: int
    exp: int
    bits: int = 64

    def __post_init__(self) -> None:
        for name in ("value", "exp", "bits"):
            item = getattr(self, name)
            if isinstance(item, bool) or not isinstance(item, int):
                raise TypeError(f"{name} must be an integer")
        if not 0 < self.bits <= 256:
            raise ValueError("bits must be between 1 and 256")
        if not 0 <= self.value < (1 << self.bits):
            raise ValueError(f"value does not fit in {self.bits} bits")
        if not 0 <= self.exp <= _U32_MAX:
            raise ValueError("exp out of 32-bit range")

    def to_adjusted_exp(self, target_exp: int) -> Price | None:
        """Rescale to another exponent; None if the value no longer fits."""
        if target_exp == self.exp:
            return self
        if self.exp > target_exp:
            value = self.value // ten_pow(self.exp - target_exp)
        else:
            value = self.value * ten_pow(target_exp - self.exp)
            if value > _U256_MAX:
                return None
        if value >= (1 << self.bits):
            return None
        return Price(value=value, exp=target_exp, bits=self.bits)

    def reduce_exp_lossy(self, target_exp: int) -> Price | None:
        """Lower the exponent to target_exp if it is above it, dropping digits."""
        if self.exp <= target_exp:
            return self
        return self.to_adjusted_exp(target_exp)

    def size_up(self, bits: int) -> Price:
        """The same price held in a wider integer."""
        if bits < self.bits:
            raise ValueError("cannot size a price down")
        return Price(value=self.value, exp=self.exp, bits=bits)


@dataclass(slots=True)
class TimestampedPrice:
    """A price whose value is computed on demand, with its timestamp."""

    price_load: Callable[[], Fraction]
    timestamp: int

    def load(self) -> Fraction:
        """Compute the price; raises LendingError if it cannot be produced."""
        return self.price_load()


@dataclass(slots=True)
class TimestampedPriceWithTwap:
    """A spot price and its optional time-weighted average."""

    price: TimestampedPrice
    twap: TimestampedPrice | None = None
"""Conversions between seconds, hours and days."""

from __future__ import annotations

from .consts import SECONDS_PER_DAY, SECONDS_PER_HOUR
from .fraction import Fraction

_U64_MAX = (1 << 64) - 1


def _checked_u64(value: int) -> int:
    if not 0 <= value <= _U64_MAX:
        raise OverflowError("value out of 64-bit range")
    return value


def to_days_fractional(secs: int) -> Fraction:
    """Seconds expressed as a fractional number of days."""
    return Fraction.from_num(_checked_u64(secs)) / SECONDS_PER_DAY


def from_days(days: int) -> int:
    """Whole days in seconds."""
    return _checked_u64(_checked_u64(days) * SECONDS_PER_DAY)


def from_hours(hours: int) -> int:
    """Whole hours in seconds."""
    return _checked_u64(_checked_u64(hours) * SECONDS_PER_HOUR)
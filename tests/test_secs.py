import pytest
from hypothesis import given
from hypothesis import strategies as st

from lendmath.consts import SECONDS_PER_DAY, SECONDS_PER_HOUR
from lendmath.fraction import Fraction
from lendmath.secs import from_days, from_hours, to_days_fractional


def test_single_units():
    assert from_days(1) == SECONDS_PER_DAY
    assert from_hours(1) == SECONDS_PER_HOUR
    assert from_hours(24) == from_days(1)


def test_overflow_rejected():
    with pytest.raises(OverflowError):
        from_days(1 << 60)
    with pytest.raises(OverflowError):
        from_hours(1 << 60)
    with pytest.raises(OverflowError):
        from_days(-1)


def test_one_day_is_one():
    assert to_days_fractional(SECONDS_PER_DAY) == Fraction.ONE
    assert to_days_fractional(0) == Fraction.ZERO


@given(st.integers(min_value=0, max_value=1 << 40))
def test_days_round_trip(days):
    assert to_days_fractional(from_days(days)) == Fraction.from_num(days)


@given(st.integers(min_value=0, max_value=1 << 40), st.integers(min_value=0, max_value=1 << 40))
def test_days_fractional_monotonic(a, b):
    low, high = sorted((a, b))
    assert to_days_fractional(low) <= to_days_fractional(high)
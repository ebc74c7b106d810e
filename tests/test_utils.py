from decimal import Decimal

import pytest
from hypothesis import given, strategies as st

from lendmath.fraction import Fraction
from lendmath.prices.types import Price
from lendmath.prices.utils import price_to_fraction, ten_pow


def test_ten_pow_bounds():
    assert ten_pow(0) == 1
    assert ten_pow(36) == 1_000_000_000_000_000_000_000_000_000_000_000_000


@pytest.mark.parametrize("exponent", [-1, 37])
def test_ten_pow_unsupported(exponent):
    with pytest.raises(ValueError):
        ten_pow(exponent)


@given(st.integers(min_value=0, max_value=35))
def test_ten_pow_steps_by_ten(exponent):
    assert ten_pow(exponent + 1) == ten_pow(exponent) * 10


def test_integer_price():
    assert price_to_fraction(Price(5, 0)) == Fraction.from_num(5)


def test_decimal_price():
    assert price_to_fraction(Price(15, 1)) == Fraction.from_num(Decimal("1.5"))


@given(st.integers(min_value=0, max_value=(1 << 64) - 1), st.integers(min_value=0, max_value=18))
def test_price_rounds_down_within_one_step(value, exp):
    fraction = price_to_fraction(Price(value, exp))
    scaled_back = fraction * ten_pow(exp)
    whole = Fraction.from_num(value)
    assert scaled_back <= whole
    assert whole.bits - scaled_back.bits < ten_pow(exp)


def test_wide_price_converts():
    price = Price(1 << 60, 0, bits=128)
    assert price_to_fraction(price) == Fraction.from_num(1 << 60)


def test_too_large_price_overflows():
    with pytest.raises(OverflowError):
        price_to_fraction(Price(1 << 100, 0, bits=128))
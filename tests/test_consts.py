import pytest
from hypothesis import given
from hypothesis import strategies as st

from lendmath.consts import (
    CPI_WHITELISTED_ACCOUNTS,
    EXPONENT_CORE_ID_MAINNET,
    EXPONENT_INTEGRATION_ID_MAINNET,
    FULL_BPS,
    MIN_NET_VALUE_IN_OBLIGATION,
    NULL_PUBKEY,
    SECONDS_PER_DAY,
    SLOTS_PER_DAY,
    SLOTS_PER_SECOND,
    CpiWhitelistedAccount,
    maybe_null_pk,
    ten_pow,
)
from lendmath.fraction import EPSILON, Fraction


def test_ten_pow_bounds():
    assert ten_pow(0) == 1
    assert ten_pow(19) == 10_000_000_000_000_000_000
    with pytest.raises(ValueError):
        ten_pow(20)
    with pytest.raises(ValueError):
        ten_pow(-1)


@given(st.integers(min_value=0, max_value=18))
def test_ten_pow_steps_by_ten(n):
    assert ten_pow(n + 1) == ten_pow(n) * 10


def test_time_constants_are_consistent():
    assert ten_pow(4) == FULL_BPS
    assert SLOTS_PER_DAY == SLOTS_PER_SECOND * SECONDS_PER_DAY
    assert Fraction.from_bps(FULL_BPS) == Fraction.from_num(1)


def test_null_pubkey_layout():
    assert maybe_null_pk(NULL_PUBKEY) is None
    altered = NULL_PUBKEY[:-1] + b"\x01"
    assert maybe_null_pk(altered) == altered
    assert maybe_null_pk(bytes([11, 193, 238]) + NULL_PUBKEY[3:]) is None


def test_maybe_null_pk():
    assert maybe_null_pk(bytes(32)) is None
    assert maybe_null_pk(NULL_PUBKEY) is None
    key = bytes(range(32))
    assert maybe_null_pk(key) == key


def test_whitelist_contents():
    assert len(CPI_WHITELISTED_ACCOUNTS) == 16
    ids = [account.program_id for account in CPI_WHITELISTED_ACCOUNTS]
    assert all(len(program_id) == 32 for program_id in ids)
    assert len(set(ids)) == len(ids)
    levels = {account.program_id: account.whitelist_level for account in CPI_WHITELISTED_ACCOUNTS}
    assert levels[EXPONENT_INTEGRATION_ID_MAINNET] == 2
    assert levels[EXPONENT_CORE_ID_MAINNET] == 3
    assert CpiWhitelistedAccount(EXPONENT_CORE_ID_MAINNET, 3) in CPI_WHITELISTED_ACCOUNTS


def test_min_net_value_is_one_millionth():
    scaled = MIN_NET_VALUE_IN_OBLIGATION * Fraction.from_num(1_000_000)
    assert scaled.abs_diff(Fraction.from_num(1)) <= EPSILON
    assert MIN_NET_VALUE_IN_OBLIGATION > Fraction.from_num(0)
import pytest

from lendmath.errors import LendingError, LendingErrorCode


def test_default_message_comes_from_code():
    err = LendingError(LendingErrorCode.MATH_OVERFLOW)
    assert err.code is LendingErrorCode.MATH_OVERFLOW
    assert err.message == "Math overflow"
    assert str(err) == err.message


def test_custom_message_is_kept():
    err = LendingError(LendingErrorCode.PRICE_TOO_OLD, "price is stale")
    assert err.message == "price is stale"
    assert str(err) == "price is stale"


def test_code_given_by_name():
    err = LendingError("INVALID_FLAG")
    assert err.code is LendingErrorCode.INVALID_FLAG


def test_unknown_code_name_rejected():
    with pytest.raises(KeyError):
        LendingError("NOT_A_CODE")


def test_raised_and_caught_with_code():
    err = LendingError(LendingErrorCode.PRICE_IS_ZERO)
    with pytest.raises(LendingError) as info:
        raise err
    assert info.value is err
    assert info.value.code is LendingErrorCode.PRICE_IS_ZERO
    assert info.value.message == LendingErrorCode.PRICE_IS_ZERO.description


def test_description_matches_message_for_every_code():
    for code in LendingErrorCode:
        assert LendingError(code).message == code.description
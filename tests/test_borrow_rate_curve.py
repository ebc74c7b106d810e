from decimal import Decimal

import pytest
from hypothesis import given, strategies as st

from lendmath.borrow_rate_curve import (
    MAX_UTILIZATION_RATE_BPS,
    BorrowRateCurve,
    CurvePoint,
    CurveSegment,
)
from lendmath.errors import LendingError, LendingErrorCode
from lendmath.fraction import EPSILON, Fraction


def _linear_curve():
    return BorrowRateCurve.from_points(
        [CurvePoint(0, 0), CurvePoint(MAX_UTILIZATION_RATE_BPS, MAX_UTILIZATION_RATE_BPS)]
    )


def test_max_utilization_is_full_bps():
    curve = BorrowRateCurve.new_flat(0)
    assert curve.to_points()[-1].utilization_rate_bps == 10_000
    assert curve.points[-1].utilization_rate_bps == MAX_UTILIZATION_RATE_BPS


def test_from_points_pads_with_last_point():
    last = CurvePoint(MAX_UTILIZATION_RATE_BPS, 900)
    curve = BorrowRateCurve.from_points([CurvePoint(0, 100), CurvePoint(5000, 300), last])
    assert len(curve.points) == 11
    assert curve.points[3:] == (last,) * 8


def test_to_points_round_trip():
    points = [CurvePoint(0, 100), CurvePoint(4000, 200), CurvePoint(MAX_UTILIZATION_RATE_BPS, 700)]
    assert BorrowRateCurve.from_points(points).to_points() == points


def test_from_points_with_eleven_points():
    points = [CurvePoint(i * 1000, i * 10) for i in range(11)]
    curve = BorrowRateCurve.from_points(points)
    assert curve.to_points() == points


@pytest.mark.parametrize(
    "points",
    [
        [CurvePoint(MAX_UTILIZATION_RATE_BPS, 0)],
        [CurvePoint(i * 900, 0) for i in range(11)] + [CurvePoint(MAX_UTILIZATION_RATE_BPS, 0)],
        [CurvePoint(0, 0), CurvePoint(5000, 0)],
        [CurvePoint(100, 0), CurvePoint(MAX_UTILIZATION_RATE_BPS, 0)],
        [CurvePoint(0, 0), CurvePoint(6000, 0), CurvePoint(5000, 0), CurvePoint(MAX_UTILIZATION_RATE_BPS, 0)],
        [CurvePoint(0, 500), CurvePoint(MAX_UTILIZATION_RATE_BPS, 100)],
    ],
)
def test_from_points_rejects_invalid(points):
    with pytest.raises(LendingError) as info:
        BorrowRateCurve.from_points(points)
    assert info.value.code is LendingErrorCode.INVALID_BORROW_RATE_CURVE_POINT


def test_validate_rejects_lower_utilization_after_max():
    points = (
        CurvePoint(0, 0),
        CurvePoint(MAX_UTILIZATION_RATE_BPS, 100),
        CurvePoint(5000, 100),
    ) + (CurvePoint(MAX_UTILIZATION_RATE_BPS, 100),) * 8
    with pytest.raises(LendingError) as info:
        BorrowRateCurve(points).validate()
    assert info.value.code is LendingErrorCode.INVALID_BORROW_RATE_CURVE_POINT


def test_curve_needs_eleven_points():
    with pytest.raises(ValueError):
        BorrowRateCurve((CurvePoint(0, 0), CurvePoint(MAX_UTILIZATION_RATE_BPS, 0)))


def test_curve_point_rejects_negative():
    with pytest.raises(ValueError):
        CurvePoint(-1, 0)


@pytest.mark.parametrize("rate_bps", [0, 250, 10_000])
def test_flat_curve_is_constant(rate_bps):
    curve = BorrowRateCurve.new_flat(rate_bps)
    for utilization in (Fraction.ZERO, Fraction.from_percent(33), Fraction.ONE):
        assert curve.get_borrow_rate(utilization) == Fraction.from_bps(rate_bps)


def test_linear_curve_interpolates_exactly():
    utilization = Fraction.from_num(Decimal("0.37"))
    assert _linear_curve().get_borrow_rate(utilization) == utilization


@given(st.integers(min_value=0, max_value=Fraction.ONE.bits))
def test_linear_curve_tracks_utilization(bits):
    utilization = Fraction.from_bits(bits)
    rate = _linear_curve().get_borrow_rate(utilization)
    assert rate.abs_diff(utilization) <= Fraction.from_bps(1)


def test_utilization_above_one_is_capped():
    curve = BorrowRateCurve.from_legacy_parameters(80, 0, 10, 100)
    assert curve.get_borrow_rate(Fraction.from_num(3)) == curve.get_borrow_rate(Fraction.ONE)


def test_legacy_three_point_curve():
    curve = BorrowRateCurve.from_legacy_parameters(80, 2, 10, 100)
    assert len(curve.to_points()) == 3
    assert curve.get_borrow_rate(Fraction.ZERO) == Fraction.from_percent(2)
    assert curve.get_borrow_rate(Fraction.from_percent(80)) == Fraction.from_percent(10)
    assert curve.get_borrow_rate(Fraction.ONE) == Fraction.from_percent(100)


def test_legacy_zero_optimal_utilization():
    curve = BorrowRateCurve.from_legacy_parameters(0, 5, 10, 20)
    assert len(curve.to_points()) == 2
    assert curve.get_borrow_rate(Fraction.ZERO) == Fraction.from_percent(10)
    assert curve.get_borrow_rate(Fraction.ONE) == Fraction.from_percent(20)


def test_legacy_full_optimal_utilization():
    curve = BorrowRateCurve.from_legacy_parameters(100, 5, 30, 90)
    assert curve.get_borrow_rate(Fraction.ZERO) == Fraction.from_percent(5)
    assert curve.get_borrow_rate(Fraction.ONE) == Fraction.from_percent(30)


def test_legacy_decreasing_rates_rejected():
    with pytest.raises(LendingError) as info:
        BorrowRateCurve.from_legacy_parameters(50, 40, 10, 100)
    assert info.value.code is LendingErrorCode.INVALID_BORROW_RATE_CURVE_POINT


def test_legacy_out_of_range_rejected():
    with pytest.raises(ValueError):
        BorrowRateCurve.from_legacy_parameters(50, 0, 10, 256)


def test_rates_are_non_decreasing():
    curve = BorrowRateCurve.from_points(
        [CurvePoint(0, 100), CurvePoint(3000, 400), CurvePoint(8000, 1500), CurvePoint(MAX_UTILIZATION_RATE_BPS, 9000)]
    )
    rates = [curve.get_borrow_rate(Fraction.from_bps(bps)) for bps in range(0, 10_001, 125)]
    assert rates == sorted(rates)


def test_segment_keeps_start_and_reaches_end():
    start = CurvePoint(1000, 100)
    end = CurvePoint(3000, 500)
    segment = CurveSegment.from_points(start, end)
    assert segment.start_point == start
    assert segment.get_borrow_rate(Fraction.from_bps(1000)) == Fraction.from_bps(100)
    assert segment.get_borrow_rate(Fraction.from_bps(3000)).abs_diff(Fraction.from_bps(500)) <= EPSILON


@pytest.mark.parametrize(
    "start,end",
    [
        (CurvePoint(1000, 500), CurvePoint(3000, 100)),
        (CurvePoint(3000, 100), CurvePoint(3000, 500)),
        (CurvePoint(3000, 100), CurvePoint(1000, 500)),
    ],
)
def test_segment_rejects_bad_points(start, end):
    with pytest.raises(LendingError) as info:
        CurveSegment.from_points(start, end)
    assert info.value.code is LendingErrorCode.INVALID_BORROW_RATE_CURVE_POINT


def test_segment_rejects_utilization_below_start():
    segment = CurveSegment.from_points(CurvePoint(5000, 100), CurvePoint(MAX_UTILIZATION_RATE_BPS, 500))
    with pytest.raises(LendingError) as info:
        segment.get_borrow_rate(Fraction.from_bps(1000))
    assert info.value.code is LendingErrorCode.INVALID_UTILIZATION_RATE
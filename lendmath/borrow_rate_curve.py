"""Piecewise-linear borrow rate curve keyed by utilization rate."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .consts import FULL_BPS
from .errors import LendingError, LendingErrorCode
from .fraction import Fraction

MAX_UTILIZATION_RATE_BPS = FULL_BPS
CURVE_POINT_COUNT = 11

_U32_MAX = (1 << 32) - 1


def _invalid_point(message: str) -> LendingError:
    return LendingError(LendingErrorCode.INVALID_BORROW_RATE_CURVE_POINT, message)


def _check_u32(name: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an integer")
    if not 0 <= value <= _U32_MAX:
        raise ValueError(f"{name} out of 32-bit range: {value}")


@dataclass(frozen=True, slots=True)
class CurvePoint:
    """One point of the curve: utilization and borrow rate, both in bps."""

    utilization_rate_bps: int
    borrow_rate_bps: int

    def __post_init__(self) -> None:
        _check_u32("utilization_rate_bps", self.utilization_rate_bps)
        _check_u32("borrow_rate_bps", self.borrow_rate_bps)


@dataclass(frozen=True, slots=True)
class CurveSegment:
    """A linear piece of the curve between two consecutive points."""

    slope_nom: int
    slope_denom: int
    start_point: CurvePoint

    @classmethod
    def from_points(cls, start: CurvePoint, end: CurvePoint) -> "CurveSegment":
        slope_nom = end.borrow_rate_bps - start.borrow_rate_bps
        if slope_nom < 0:
            raise _invalid_point("Borrow rate must be ever growing in the curve")
        if end.utilization_rate_bps <= start.utilization_rate_bps:
            raise _invalid_point("Utilization rate must be ever growing in the curve")
        slope_denom = end.utilization_rate_bps - start.utilization_rate_bps
        return cls(slope_nom=slope_nom, slope_denom=slope_denom, start_point=start)

    def get_borrow_rate(self, utilization_rate: Fraction) -> Fraction:
        """Interpolate the borrow rate at a utilization rate within the segment."""
        start_utilization_rate = Fraction.from_bps(self.start_point.utilization_rate_bps)
        coef = utilization_rate.checked_sub(start_utilization_rate)
        if coef is None:
            raise LendingError(LendingErrorCode.INVALID_UTILIZATION_RATE)
        base_rate = coef * self.slope_nom / self.slope_denom
        offset = Fraction.from_bps(self.start_point.borrow_rate_bps)
        return base_rate + offset


@dataclass(frozen=True, slots=True)
class BorrowRateCurve:
    """Eleven curve points; unused trailing slots repeat the last point."""

    points: tuple[CurvePoint, ...]

    def __post_init__(self) -> None:
        points = tuple(self.points)
        if len(points) != CURVE_POINT_COUNT:
            raise ValueError(f"a curve holds exactly {CURVE_POINT_COUNT} points")
        if not all(isinstance(point, CurvePoint) for point in points):
            raise TypeError("curve points must be CurvePoint instances")
        object.__setattr__(self, "points", points)

    def validate(self) -> None:
        """Raise LendingError unless the points form a valid curve."""
        points = self.points
        if points[0].utilization_rate_bps != 0:
            raise _invalid_point(
                "First point of borrowing rate curve must have an utilization rate of 0"
            )
        if points[-1].utilization_rate_bps != MAX_UTILIZATION_RATE_BPS:
            raise _invalid_point(
                "Last point of borrowing rate curve must have an utilization rate of 1"
            )
        last = points[0]
        for point in points[1:]:
            if last.utilization_rate_bps == MAX_UTILIZATION_RATE_BPS:
                if point.utilization_rate_bps != MAX_UTILIZATION_RATE_BPS:
                    raise _invalid_point(
                        "Last point of borrowing rate curve must have an utilization rate of 1 "
                        "but lower utilization rate found after last point"
                    )
            elif point.utilization_rate_bps <= last.utilization_rate_bps:
                raise _invalid_point(
                    "Borrowing rate curve points must be sorted by utilization rate"
                )
            if point.borrow_rate_bps < last.borrow_rate_bps:
                raise _invalid_point("Borrowing rate must growing in the curve")
            last = point

    @classmethod
    def from_points(cls, points: Iterable[CurvePoint]) -> "BorrowRateCurve":
        """Build and validate a curve from 2 to 11 points."""
        given = list(points)
        if len(given) < 2:
            raise _invalid_point("Borrowing rate curve must have at least 2 points")
        if len(given) > CURVE_POINT_COUNT:
            raise _invalid_point("Borrowing rate curve must have at most 11 points")
        last = given[-1]
        if last.utilization_rate_bps != MAX_UTILIZATION_RATE_BPS:
            raise _invalid_point(
                "Last point of borrowing rate curve must have an utilization rate of 1"
            )
        padded = given + [last] * (CURVE_POINT_COUNT - len(given))
        curve = cls(tuple(padded))
        curve.validate()
        return curve

    @classmethod
    def new_flat(cls, borrow_rate_bps: int) -> "BorrowRateCurve":
        """A curve with the same borrow rate at every utilization."""
        return cls.from_points(
            [
                CurvePoint(0, borrow_rate_bps),
                CurvePoint(MAX_UTILIZATION_RATE_BPS, borrow_rate_bps),
            ]
        )

    @classmethod
    def from_legacy_parameters(
        cls,
        optimal_utilization_rate_pct: int,
        base_rate_pct: int,
        optimal_rate_pct: int,
        max_rate_pct: int,
    ) -> "BorrowRateCurve":
        """Build a curve from the older base/optimal/max percentage settings."""
        for name, value in (
            ("optimal_utilization_rate_pct", optimal_utilization_rate_pct),
            ("base_rate_pct", base_rate_pct),
            ("optimal_rate_pct", optimal_rate_pct),
            ("max_rate_pct", max_rate_pct),
        ):
            if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 255:
                raise ValueError(f"{name} must be an integer between 0 and 255")
        optimal_utilization_rate = optimal_utilization_rate_pct * 100
        base_rate = base_rate_pct * 100
        optimal_rate = optimal_rate_pct * 100
        max_rate = max_rate_pct * 100

        if optimal_utilization_rate == 0:
            points = [
                CurvePoint(0, optimal_rate),
                CurvePoint(MAX_UTILIZATION_RATE_BPS, max_rate),
            ]
        elif optimal_utilization_rate == MAX_UTILIZATION_RATE_BPS:
            points = [
                CurvePoint(0, base_rate),
                CurvePoint(MAX_UTILIZATION_RATE_BPS, optimal_rate),
            ]
        else:
            points = [
                CurvePoint(0, base_rate),
                CurvePoint(optimal_utilization_rate, optimal_rate),
                CurvePoint(MAX_UTILIZATION_RATE_BPS, max_rate),
            ]
        return cls.from_points(points)

    def get_borrow_rate(self, utilization_rate: Fraction) -> Fraction:
        """Borrow rate for a utilization rate; rates above 100% are capped."""
        if utilization_rate > Fraction.ONE:
            utilization_rate = Fraction.ONE
        utilization_rate_bps = utilization_rate.to_bps()

        window = next(
            (
                (first, second)
                for first, second in zip(self.points, self.points[1:])
                if first.utilization_rate_bps
                <= utilization_rate_bps
                <= second.utilization_rate_bps
            ),
            None,
        )
        if window is None:
            raise _invalid_point("Utilization rate is not covered by the borrowing rate curve")
        start, end = window
        if utilization_rate_bps == start.utilization_rate_bps:
            return Fraction.from_bps(start.borrow_rate_bps)
        if utilization_rate_bps == end.utilization_rate_bps:
            return Fraction.from_bps(end.borrow_rate_bps)
        return CurveSegment.from_points(start, end).get_borrow_rate(utilization_rate)

    def to_points(self) -> list[CurvePoint]:
        """The meaningful points, up to and including the first at 100% utilization."""
        points: list[CurvePoint] = []
        for point in self.points:
            points.append(point)
            if point.utilization_rate_bps == MAX_UTILIZATION_RATE_BPS:
                break
        return points
"""Small input validation helpers."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import TypeVar

from .errors import LendingError, LendingErrorCode

L = TypeVar("L")
R = TypeVar("R")


class LengthMismatchError(ValueError):
    """Two sequences that had to be of equal length were not."""


def validate_numerical_bool(value: int) -> bool:
    """Accept 0 or 1 as a flag and return it as a bool."""
    if value not in (0, 1) or isinstance(value, bool):
        raise LendingError(LendingErrorCode.INVALID_FLAG)
    return value == 1


_MISSING = object()


def zip_and_validate_same_length(lefts: Iterable[L], rights: Iterable[R]) -> Iterator[tuple[L, R]]:
    """Pair items up, raising LengthMismatchError if one side runs out first."""
    left_iter = iter(lefts)
    right_iter = iter(rights)
    while True:
        left = next(left_iter, _MISSING)
        right = next(right_iter, _MISSING)
        if left is _MISSING and right is _MISSING:
            return
        if left is _MISSING or right is _MISSING:
            raise LengthMismatchError("iterables have different lengths")
        yield left, right
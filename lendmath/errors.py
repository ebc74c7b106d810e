"""Error type raised by the lending math routines."""

from __future__ import annotations

import enum


class LendingErrorCode(enum.Enum):
    """Reasons a lending computation or check can fail."""

    INVALID_FLAG = enum.auto()
    INTEGER_OVERFLOW = enum.auto()
    MATH_OVERFLOW = enum.auto()
    INVALID_BORROW_RATE_CURVE_POINT = enum.auto()
    INVALID_UTILIZATION_RATE = enum.auto()
    PRICE_TOO_OLD = enum.auto()
    PRICE_TOO_DIVERGENT_FROM_TWAP = enum.auto()
    PRICE_IS_LOWER_THAN_HEURISTIC = enum.auto()
    PRICE_IS_BIGGER_THAN_HEURISTIC = enum.auto()
    PRICE_NOT_VALID = enum.auto()
    PRICE_IS_ZERO = enum.auto()
    PRICE_CONFIDENCE_TOO_WIDE = enum.auto()
    NO_PRICE_FOUND = enum.auto()
    SWITCHBOARD_V2_ERROR = enum.auto()
    INVALID_ORACLE_CONFIG = enum.auto()
    COULD_NOT_DESERIALIZE_SCOPE = enum.auto()
    INVALID_ACCOUNT_INPUT = enum.auto()
    GLOBAL_EMERGENCY_MODE = enum.auto()
    UNSUPPORTED_TOKEN_EXTENSION = enum.auto()
    INVALID_TOKEN_ACCOUNT = enum.auto()
    INCORRECT_INSTRUCTION_IN_POSITION = enum.auto()
    CPI_DISABLED = enum.auto()
    FARM_ACCOUNTS_MISSING = enum.auto()

    @property
    def description(self) -> str:
        """Human readable form of the code name."""
        return self.name.replace("_", " ").capitalize()


class LendingError(Exception):
    """A failed lending check, carrying the code that identifies it."""

    def __init__(self, code: LendingErrorCode | str, message: str | None = None) -> None:
        if isinstance(code, str):
            code = LendingErrorCode[code]
        self.code = code
        self.message = message if message is not None else code.description
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"LendingError({self.code.name}, {self.message!r})"
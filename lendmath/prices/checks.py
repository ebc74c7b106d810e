"""Validation of loaded oracle prices: age, TWAP divergence and heuristics."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field

from ..consts import FULL_BPS
from ..errors import LendingError, LendingErrorCode
from ..fraction import Fraction
from .types import Price, TimestampedPriceWithTwap
from .utils import price_to_fraction

logger = logging.getLogger(__name__)

MAX_CONFIDENCE_PERCENTAGE = 2
CONFIDENCE_FACTOR = 100 // MAX_CONFIDENCE_PERCENTAGE


class PriceStatusFlags(enum.Flag):
    """Checks a price has passed."""

    PRICE_LOADED = 1
    PRICE_AGE_CHECKED = 2
    TWAP_CHECKED = 4
    TWAP_AGE_CHECKED = 8
    HEURISTIC_CHECKED = 16
    PRICE_USAGE_ALLOWED = 32


@dataclass(frozen=True, slots=True)
class PriceHeuristic:
    """Sanity bounds lower / 10**exp and upper / 10**exp; zero disables a bound."""

    lower: int = 0
    upper: int = 0
    exp: int = 0


@dataclass(frozen=True, slots=True)
class PriceValidationSettings:
    """Per-token settings that govern how a price is validated."""

    symbol: str = ""
    max_age_price_seconds: int = 0
    max_age_twap_seconds: int = 0
    max_twap_divergence_bps: int = 0
    twap_enabled: bool = False
    heuristic: PriceHeuristic = field(default_factory=PriceHeuristic)
    block_price_usage: bool = False


@dataclass(frozen=True, slots=True)
class GetPriceResult:
    """A loaded price, its timestamp and the checks it passed."""

    price: Fraction
    timestamp: int
    status: PriceStatusFlags


def check_price_age(price_timestamp: int, max_age_seconds: int, current_timestamp: int) -> int:
    """Return the price's age in seconds; raise if it is older than allowed."""
    age_seconds = max(0, current_timestamp - price_timestamp)
    if age_seconds > max_age_seconds:
        logger.info("Price is too old age=%d max_age=%d", age_seconds, max_age_seconds)
        raise LendingError(LendingErrorCode.PRICE_TOO_OLD)
    return age_seconds


def is_within_tolerance(px: Fraction, twap: Fraction, acceptable_tolerance_bps: int) -> bool:
    """Whether px and twap differ by strictly less than the tolerance, relative to px."""
    abs_diff = px.abs_diff(twap)
    diff_bps_scaled = abs_diff * FULL_BPS
    tolerance_scaled = px * acceptable_tolerance_bps
    return diff_bps_scaled < tolerance_scaled


def check_twap_in_tolerance(price: Fraction, twap: Fraction, tolerance_bps: int) -> None:
    """Raise if the price is too far from its TWAP."""
    if not is_within_tolerance(price, twap, tolerance_bps):
        logger.info(
            "Price is too far from TWAP price=%s twap=%s tolerance_bps=%d",
            price,
            twap,
            tolerance_bps,
        )
        raise LendingError(LendingErrorCode.PRICE_TOO_DIVERGENT_FROM_TWAP)


def check_price_heuristics(token_price: Fraction, heuristic: PriceHeuristic) -> None:
    """Raise if the price falls outside the configured heuristic bounds."""
    if heuristic.lower > 0:
        lower = price_to_fraction(Price(value=heuristic.lower, exp=heuristic.exp))
        if token_price < lower:
            raise LendingError(LendingErrorCode.PRICE_IS_LOWER_THAN_HEURISTIC)
    if heuristic.upper > 0:
        upper = price_to_fraction(Price(value=heuristic.upper, exp=heuristic.exp))
        if upper < token_price:
            raise LendingError(LendingErrorCode.PRICE_IS_BIGGER_THAN_HEURISTIC)


def get_validated_price(
    price_and_twap: TimestampedPriceWithTwap,
    settings: PriceValidationSettings,
    unix_timestamp: int,
) -> GetPriceResult | None:
    """Load a price and record which checks it passes; None if it cannot be loaded."""
    if isinstance(unix_timestamp, bool) or not isinstance(unix_timestamp, int):
        raise TypeError("unix_timestamp must be an integer")
    if unix_timestamp < 0:
        raise ValueError("unix_timestamp must not be negative")

    price, twap = price_and_twap.price, price_and_twap.twap
    label = settings.symbol
    status = PriceStatusFlags(0)

    try:
        price_dec = price.load()
    except LendingError as error:
        logger.info("Price is not available token=[%s], %r", label, error)
        return None
    status |= PriceStatusFlags.PRICE_LOADED

    try:
        check_price_age(price.timestamp, settings.max_age_price_seconds, unix_timestamp)
        status |= PriceStatusFlags.PRICE_AGE_CHECKED
    except LendingError as error:
        logger.info("Price is too old token=[%s], %r", label, error)

    if settings.twap_enabled:
        if twap is not None:
            try:
                check_price_age(twap.timestamp, settings.max_age_twap_seconds, unix_timestamp)
                status |= PriceStatusFlags.TWAP_AGE_CHECKED
            except LendingError as error:
                logger.info("Price twap is too old token=[%s], %r", label, error)
            try:
                twap_dec = twap.load()
                check_twap_in_tolerance(price_dec, twap_dec, settings.max_twap_divergence_bps)
                status |= PriceStatusFlags.TWAP_CHECKED
            except LendingError as error:
                logger.info("Price twap check failed token=[%s]: %r", label, error)
        else:
            logger.info("Price twap is not available but required, token=[%s]", label)
    else:
        status |= PriceStatusFlags.TWAP_CHECKED | PriceStatusFlags.TWAP_AGE_CHECKED

    try:
        check_price_heuristics(price_dec, settings.heuristic)
        status |= PriceStatusFlags.HEURISTIC_CHECKED
    except LendingError as error:
        logger.info("Price heuristic check failed token=[%s]: %r", label, error)

    if not settings.block_price_usage:
        status |= PriceStatusFlags.PRICE_USAGE_ALLOWED

    return GetPriceResult(price=price_dec, timestamp=price.timestamp, status=status)
"""Prices taken from a Switchboard pull feed result."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..consts import NULL_PUBKEY
from ..errors import LendingError, LendingErrorCode
from ..fraction import Fraction
from .checks import CONFIDENCE_FACTOR
from .types import Price, TimestampedPrice, TimestampedPriceWithTwap
from .utils import price_to_fraction

logger = logging.getLogger(__name__)

DEFAULT_MS_PER_SLOT = 400

_U128_MAX = (1 << 128) - 1


@dataclass(frozen=True, slots=True)
class SwitchboardFeed:
    """The latest result of a feed: value and standard deviation as mantissa/scale."""

    slot: int
    value_mantissa: int | None
    value_scale: int
    std_dev_mantissa: int | None
    std_dev_scale: int
    key: bytes = bytes(32)


def _math_overflow() -> LendingError:
    return LendingError(LendingErrorCode.MATH_OVERFLOW)


def validate_switchboard_confidence(
    price_mantissa: int,
    price_scale: int,
    stdev_mantissa: int,
    stdev_scale: int,
    oracle_confidence_factor: int,
) -> None:
    """Raise unless stdev * factor, brought to the price's scale, stays below the price."""
    scale_diff = abs(price_scale - stdev_scale)
    scaling_factor = 10**scale_diff
    if scaling_factor > _U128_MAX:
        raise _math_overflow()
    stdev_scaled = stdev_mantissa * oracle_confidence_factor
    if stdev_scaled > _U128_MAX:
        raise _math_overflow()
    if price_scale >= stdev_scale:
        stdev_scaled *= scaling_factor
        if stdev_scaled > _U128_MAX:
            raise _math_overflow()
    else:
        stdev_scaled //= scaling_factor
    if stdev_scaled >= price_mantissa:
        logger.info(
            "Validation of confidence interval for switchboard feed failed. "
            "Price mantissa: %d, Price scale: %d, stdev mantissa: %d, stdev_scale: %d",
            price_mantissa,
            price_scale,
            stdev_mantissa,
            stdev_scale,
        )
        raise LendingError(LendingErrorCode.PRICE_CONFIDENCE_TOO_WIDE)


def get_switchboard_price(
    feed: SwitchboardFeed, clock_slot: int, unix_timestamp: int
) -> TimestampedPrice:
    """A lazily validated price, timestamped by the slots elapsed since its update."""
    if feed.key == NULL_PUBKEY:
        raise LendingError(LendingErrorCode.NO_PRICE_FOUND)

    elapsed_slots = max(0, clock_slot - feed.slot)
    timestamp = max(0, max(0, unix_timestamp) - elapsed_slots * DEFAULT_MS_PER_SLOT // 1000)

    if feed.value_mantissa is None:
        raise LendingError(LendingErrorCode.SWITCHBOARD_V2_ERROR)
    if feed.value_mantissa <= 0:
        logger.info("Switchboard oracle price is zero or negative which is not allowed")
        raise LendingError(LendingErrorCode.PRICE_IS_ZERO)
    price_mantissa = feed.value_mantissa
    price_scale = feed.value_scale

    if feed.std_dev_mantissa is None:
        raise LendingError(LendingErrorCode.SWITCHBOARD_V2_ERROR)
    if feed.std_dev_mantissa < 0:
        logger.info("Switchboard standard deviation is negative")
        raise LendingError(LendingErrorCode.SWITCHBOARD_V2_ERROR)
    stdev_mantissa = feed.std_dev_mantissa
    stdev_scale = feed.std_dev_scale

    def load() -> Fraction:
        validate_switchboard_confidence(
            price_mantissa, price_scale, stdev_mantissa, stdev_scale, CONFIDENCE_FACTOR
        )
        return price_to_fraction(Price(value=price_mantissa, exp=price_scale, bits=128))

    return TimestampedPrice(load, timestamp)


def get_switchboard_price_and_twap(
    feed: SwitchboardFeed,
    twap_feed: SwitchboardFeed | None,
    clock_slot: int,
    unix_timestamp: int,
) -> TimestampedPriceWithTwap:
    """The feed's price, and the TWAP feed's price when one is given."""
    price = get_switchboard_price(feed, clock_slot, unix_timestamp)
    twap = (
        get_switchboard_price(twap_feed, clock_slot, unix_timestamp)
        if twap_feed is not None
        else None
    )
    return TimestampedPriceWithTwap(price=price, twap=twap)
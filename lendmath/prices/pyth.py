"""Prices taken from a Pyth price update message."""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass

from ..errors import LendingError, LendingErrorCode
from .checks import CONFIDENCE_FACTOR
from .types import Price, TimestampedPrice, TimestampedPriceWithTwap
from .utils import price_to_fraction

logger = logging.getLogger(__name__)

_U64_MAX = (1 << 64) - 1


def _as_u64(value: int, name: str) -> int:
    if not 0 <= value <= _U64_MAX:
        raise ValueError(f"{name} out of unsigned 64-bit range: {value}")
    return value


@dataclass(frozen=True, slots=True)
class PythPrice:
    """A signed price with confidence, meaning price * 10**exponent."""

    price: int
    conf: int
    exponent: int
    publish_time: int


@dataclass(frozen=True, slots=True)
class PriceFeedMessage:
    """The spot and EMA prices of one feed."""

    price: int
    conf: int
    exponent: int
    publish_time: int
    ema_price: int
    ema_conf: int
    prev_publish_time: int = 0
    feed_id: bytes = bytes(32)


def validate_pyth_confidence(pyth_price: PythPrice, oracle_confidence_factor: int) -> None:
    """Raise unless conf * factor stays within the price."""
    price = _as_u64(pyth_price.price, "price")
    if price == 0:
        raise LendingError(LendingErrorCode.PRICE_IS_ZERO)
    scaled_conf = pyth_price.conf * oracle_confidence_factor
    if scaled_conf > _U64_MAX:
        raise OverflowError("confidence scaling overflowed 64 bits")
    if scaled_conf > price:
        logger.info(
            "Confidence interval check failed on pyth account %d %d %d",
            pyth_price.conf,
            price,
            oracle_confidence_factor,
        )
        raise LendingError(LendingErrorCode.PRICE_CONFIDENCE_TOO_WIDE)


def timestamped_price_from_pyth(pyth_price: PythPrice) -> TimestampedPrice:
    """A lazily converted price stamped with its publish time."""
    price = Price(value=_as_u64(pyth_price.price, "price"), exp=abs(pyth_price.exponent))
    timestamp = _as_u64(pyth_price.publish_time, "publish_time")
    return TimestampedPrice(functools.partial(price_to_fraction, price), timestamp)


def split_price_and_twap(price_feed: PriceFeedMessage) -> tuple[PythPrice, PythPrice]:
    """The spot price and the EMA price, which serves as the TWAP."""
    price = PythPrice(
        price=price_feed.price,
        conf=price_feed.conf,
        exponent=price_feed.exponent,
        publish_time=price_feed.publish_time,
    )
    twap = PythPrice(
        price=price_feed.ema_price,
        conf=price_feed.ema_conf,
        exponent=price_feed.exponent,
        publish_time=price_feed.publish_time,
    )
    return price, twap


def get_pyth_price_and_twap(
    price_feed: PriceFeedMessage, verification_full: bool
) -> TimestampedPriceWithTwap:
    """Validate a fully verified update and return its price and TWAP."""
    if not verification_full:
        raise LendingError(LendingErrorCode.PRICE_NOT_VALID)
    price, twap = split_price_and_twap(price_feed)
    validate_pyth_confidence(price, CONFIDENCE_FACTOR)
    validate_pyth_confidence(twap, CONFIDENCE_FACTOR)
    return TimestampedPriceWithTwap(
        price=timestamped_price_from_pyth(price),
        twap=timestamped_price_from_pyth(twap),
    )
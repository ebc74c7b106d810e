"""Choice of the freshest oracle price and its validation."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..errors import LendingError, LendingErrorCode
from .checks import GetPriceResult, PriceValidationSettings, get_validated_price
from .types import TimestampedPriceWithTwap

logger = logging.getLogger(__name__)


def most_recent_price(
    candidates: Iterable[TimestampedPriceWithTwap | None],
) -> TimestampedPriceWithTwap:
    """The candidate with the latest price timestamp; earlier ones win ties."""
    best: TimestampedPriceWithTwap | None = None
    for candidate in candidates:
        if candidate is None:
            continue
        if best is None or candidate.price.timestamp > best.price.timestamp:
            best = candidate
    if best is None:
        logger.info("No price feed available")
        raise LendingError(LendingErrorCode.PRICE_NOT_VALID, "No price feed available")
    return best


def get_price(
    candidates: Iterable[TimestampedPriceWithTwap | None],
    settings: PriceValidationSettings,
    unix_timestamp: int,
) -> GetPriceResult | None:
    """Validate the most recent of the available prices."""
    return get_validated_price(most_recent_price(candidates), settings, unix_timestamp)
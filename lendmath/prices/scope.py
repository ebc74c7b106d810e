"""Prices from a Scope price table, optionally chained through conversions."""

from __future__ import annotations

import functools
import itertools
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from ..consts import MAX_PRICE_DECIMALS_U256, TARGET_PRICE_DECIMALS
from ..errors import LendingError, LendingErrorCode
from ..fraction import Fraction
from .types import Price, TimestampedPrice, TimestampedPriceWithTwap
from .utils import price_to_fraction

logger = logging.getLogger(__name__)

_U256_MAX = (1 << 256) - 1
_CHAIN_LENGTH = 4


@dataclass(frozen=True, slots=True)
class ScopePrice:
    """One entry of the price table: value / 10**exp at a unix timestamp."""

    value: int
    exp: int
    unix_timestamp: int


def get_base_price(scope_prices: Sequence[ScopePrice], token: int) -> tuple[Price, int] | None:
    """The price and timestamp stored under token, or None if it is out of range."""
    if not 0 <= token < len(scope_prices):
        return None
    entry = scope_prices[token]
    return Price(value=entry.value, exp=entry.exp), entry.unix_timestamp


def get_price_usd(
    scope_prices: Sequence[ScopePrice], tokens_chain: Sequence[int]
) -> TimestampedPrice:
    """The product of the chained prices, stamped with the oldest of their timestamps."""
    chain = tuple(tokens_chain)
    if len(chain) != _CHAIN_LENGTH:
        raise ValueError(f"a conversion chain holds exactly {_CHAIN_LENGTH} ids")
    if all(token == 0 for token in chain):
        logger.info("Scope chain is not initialized properly")
        raise LendingError(LendingErrorCode.PRICE_NOT_VALID)

    resolved = list(
        itertools.takewhile(
            lambda entry: entry is not None,
            (get_base_price(scope_prices, token) for token in chain),
        )
    )
    if not resolved:
        logger.info("Scope chain is empty")
        raise LendingError(LendingErrorCode.NO_PRICE_FOUND)

    if len(resolved) == 1:
        price, timestamp = resolved[0]
        return TimestampedPrice(functools.partial(price_to_fraction, price), timestamp)

    oldest_timestamp = min(timestamp for _, timestamp in resolved)
    prices = [price.size_up(256) for price, _ in resolved]

    def load() -> Fraction:
        acc = Price(value=1, exp=0, bits=256)
        for price in prices:
            if acc.exp + price.exp > MAX_PRICE_DECIMALS_U256:
                reduced_acc = acc.reduce_exp_lossy(TARGET_PRICE_DECIMALS)
                reduced_price = price.reduce_exp_lossy(TARGET_PRICE_DECIMALS)
                if reduced_acc is None or reduced_price is None:
                    raise LendingError(LendingErrorCode.MATH_OVERFLOW)
                acc, price = reduced_acc, reduced_price
            value = acc.value * price.value
            if value > _U256_MAX:
                raise LendingError(LendingErrorCode.MATH_OVERFLOW)
            acc = Price(value=value, exp=acc.exp + price.exp, bits=256)
        return price_to_fraction(acc)

    return TimestampedPrice(load, oldest_timestamp)


def get_scope_price_and_twap(
    scope_prices: Sequence[ScopePrice],
    price_chain: Sequence[int],
    twap_chain: Sequence[int] | None = None,
) -> TimestampedPriceWithTwap:
    """The chained price, and the TWAP chain's price when it resolves."""
    price = get_price_usd(scope_prices, price_chain)
    twap = None
    if twap_chain is not None:
        try:
            twap = get_price_usd(scope_prices, twap_chain)
        except LendingError as error:
            logger.info("No valid twap found for scope price, error: %r", error)
    return TimestampedPriceWithTwap(price=price, twap=twap)
"""
Price-feed validation kernel.

This module is intentionally small and pure:
- The functional core decides freshness/validity and normalizes precision.
- The imperative shell (a price-feed collaborator) supplies round data and the
  current block timestamp.

Every price that leaves this module is an 18-decimal fixed-point integer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


PRICE_DECIMALS = 18
ORACLE_TIMEOUT_SECONDS = 3 * 60 * 60


class OracleError(Exception):
    """Raised when a feed cannot provide a usable price."""


class StalePriceError(OracleError):
    def __init__(self, updated_at: int, now: int, timeout: int) -> None:
        self.updated_at = updated_at
        self.now = now
        self.timeout = timeout
        super().__init__(f"stale price: updated_at={updated_at} now={now} timeout={timeout}s")


class InvalidPriceError(OracleError):
    def __init__(self, answer: int) -> None:
        self.answer = answer
        super().__init__(f"invalid price answer: {answer}")


@dataclass(frozen=True)
class RoundData:
    """One aggregator round, as returned by `latest_round_data()`."""

    round_id: int
    answer: int
    started_at: int
    updated_at: int
    answered_in_round: int


@dataclass(frozen=True)
class PriceQuote:
    """A validated price for one collateral token, normalized to 18 decimals."""

    token: str
    price: int
    decimals: int
    observed_at: int

    def __post_init__(self) -> None:
        if self.price <= 0:
            raise ValueError(f"price must be positive: {self.price}")
        if self.decimals != PRICE_DECIMALS:
            raise ValueError(f"quotes are {PRICE_DECIMALS}-decimal: {self.decimals}")


class PriceFeed(Protocol):
    """Read-only interface of an external aggregator."""

    def decimals(self) -> int: ...

    def latest_round_data(self) -> RoundData: ...


def is_fresh(updated_at: int, now: int, timeout: int = ORACLE_TIMEOUT_SECONDS) -> bool:
    """Return True if a round updated at `updated_at` is usable at `now`."""
    if now < 0:
        raise ValueError(f"now must be non-negative: {now}")
    if updated_at == 0 or updated_at > now:
        return False
    return (now - updated_at) <= timeout


def additional_feed_precision(feed_decimals: int) -> int:
    """Multiplier taking a feed answer to 18 decimals (1e10 for 8-decimal feeds)."""
    if feed_decimals < 0:
        raise ValueError(f"feed decimals must be non-negative: {feed_decimals}")
    if feed_decimals > PRICE_DECIMALS:
        return 1
    return 10 ** (PRICE_DECIMALS - feed_decimals)


def normalize_price(answer: int, feed_decimals: int) -> int:
    """Scale a raw feed answer to 18 decimals, truncating extra precision."""
    if feed_decimals > PRICE_DECIMALS:
        return answer // 10 ** (feed_decimals - PRICE_DECIMALS)
    return answer * additional_feed_precision(feed_decimals)


def stale_check_latest_round_data(
    feed: PriceFeed,
    now: int,
    timeout: int = ORACLE_TIMEOUT_SECONDS,
) -> RoundData:
    """Fetch the latest round, refusing stale rounds and non-positive answers."""
    rd = feed.latest_round_data()
    if not is_fresh(rd.updated_at, now, timeout):
        raise StalePriceError(rd.updated_at, now, timeout)
    if rd.answer <= 0:
        raise InvalidPriceError(rd.answer)
    return rd


def read_price(
    token: str,
    feed: PriceFeed,
    now: int,
    timeout: int = ORACLE_TIMEOUT_SECONDS,
) -> PriceQuote:
    """Validated, normalized quote for `token` from `feed` at block time `now`."""
    rd = stale_check_latest_round_data(feed, now, timeout)
    price = normalize_price(rd.answer, feed.decimals())
    if price <= 0:
        # A high-precision feed can truncate a tiny positive answer to zero.
        raise InvalidPriceError(rd.answer)
    return PriceQuote(token=token, price=price, decimals=PRICE_DECIMALS, observed_at=rd.updated_at)

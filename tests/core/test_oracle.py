"""Tests for src/core/oracle.py — freshness, normalization, validated quotes."""

from dataclasses import dataclass

import pytest

from src.core.oracle import (
    ORACLE_TIMEOUT_SECONDS,
    InvalidPriceError,
    OracleError,
    PriceQuote,
    RoundData,
    StalePriceError,
    additional_feed_precision,
    is_fresh,
    normalize_price,
    read_price,
    stale_check_latest_round_data,
)


@dataclass
class _StaticFeed:
    feed_decimals: int
    round: RoundData

    def decimals(self) -> int:
        return self.feed_decimals

    def latest_round_data(self) -> RoundData:
        return self.round


def _feed(answer: int, updated_at: int = 100, decimals: int = 8) -> _StaticFeed:
    return _StaticFeed(decimals, RoundData(1, answer, updated_at, updated_at, 1))


class TestTimeout:
    def test_three_hours(self):
        assert ORACLE_TIMEOUT_SECONDS == 10_800


class TestIsFresh:
    def test_just_updated(self):
        assert is_fresh(100, 100)

    def test_at_timeout(self):
        assert is_fresh(100, 100 + ORACLE_TIMEOUT_SECONDS)

    def test_past_timeout(self):
        assert not is_fresh(100, 101 + ORACLE_TIMEOUT_SECONDS)

    def test_never_updated(self):
        assert not is_fresh(0, 100)

    def test_from_the_future(self):
        assert not is_fresh(200, 100)

    def test_custom_timeout(self):
        assert is_fresh(100, 160, timeout=60)
        assert not is_fresh(100, 161, timeout=60)

    def test_negative_now_rejected(self):
        with pytest.raises(ValueError):
            is_fresh(0, -1)


class TestNormalization:
    def test_eight_decimal_feed(self):
        assert additional_feed_precision(8) == 10**10
        assert normalize_price(2000 * 10**8, 8) == 2000 * 10**18

    def test_eighteen_decimal_feed(self):
        assert additional_feed_precision(18) == 1
        assert normalize_price(5, 18) == 5

    def test_more_than_eighteen_decimals_truncates(self):
        assert normalize_price(2000 * 10**20, 20) == 2000 * 10**18
        assert normalize_price(99, 20) == 0

    def test_negative_decimals_rejected(self):
        with pytest.raises(ValueError):
            additional_feed_precision(-1)


class TestStaleCheck:
    def test_returns_round(self):
        feed = _feed(2000 * 10**8)
        assert stale_check_latest_round_data(feed, 150).answer == 2000 * 10**8

    def test_stale(self):
        with pytest.raises(StalePriceError) as exc:
            stale_check_latest_round_data(_feed(1, updated_at=100), 100 + ORACLE_TIMEOUT_SECONDS + 1)
        assert exc.value.updated_at == 100
        assert exc.value.timeout == ORACLE_TIMEOUT_SECONDS

    @pytest.mark.parametrize("answer", [0, -1])
    def test_non_positive_answer(self, answer):
        with pytest.raises(InvalidPriceError):
            stale_check_latest_round_data(_feed(answer), 100)

    def test_errors_share_base(self):
        assert issubclass(StalePriceError, OracleError)
        assert issubclass(InvalidPriceError, OracleError)


class TestReadPrice:
    def test_quote(self):
        quote = read_price("0xweth", _feed(2000 * 10**8, updated_at=90), 100)
        assert quote == PriceQuote(token="0xweth", price=2000 * 10**18, decimals=18, observed_at=90)

    def test_truncated_to_zero(self):
        with pytest.raises(InvalidPriceError):
            read_price("0xdust", _feed(99, decimals=20), 100)

    def test_quote_rejects_non_positive_price(self):
        with pytest.raises(ValueError):
            PriceQuote(token="0xweth", price=0, decimals=18, observed_at=1)

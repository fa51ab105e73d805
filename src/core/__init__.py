"""
Core stablecoin algorithms
"""

from .oracle import (
    ORACLE_TIMEOUT_SECONDS,
    InvalidPriceError,
    OracleError,
    PriceFeed,
    PriceQuote,
    RoundData,
    StalePriceError,
    is_fresh,
    normalize_price,
    read_price,
    stale_check_latest_round_data,
)
from .dsc import DSCEngine, calculate_health_factor, check_all

__all__ = [
    "ORACLE_TIMEOUT_SECONDS",
    "InvalidPriceError",
    "OracleError",
    "PriceFeed",
    "PriceQuote",
    "RoundData",
    "StalePriceError",
    "is_fresh",
    "normalize_price",
    "read_price",
    "stale_check_latest_round_data",
    "DSCEngine",
    "calculate_health_factor",
    "check_all",
]

"""Pure fixed-point arithmetic for the stablecoin engine.

Every function is stateless and operates on plain Python ints. Prices are
18-decimal (see `src/core/oracle.py`); token amounts are in the token's own
decimals; USD values and debt are 18-decimal.

Rounding is always Python's `//` on non-negative operands (round down). Value
conversions therefore never overstate collateral, and token amounts computed
from a USD figure never overpay.
"""

from __future__ import annotations

# Protocol constants
PRECISION: int = 10**18
LIQUIDATION_THRESHOLD: int = 50  # 200% overcollateralized
LIQUIDATION_PRECISION: int = 100
LIQUIDATION_BONUS: int = 10  # 10% bonus to liquidators
MIN_HEALTH_FACTOR: int = 10**18
MAX_HEALTH_FACTOR: int = 2**256 - 1


# -- Value conversion --------------------------------------------------------

def usd_value(amount: int, price: int, token_decimals: int = 18) -> int:
    """USD value (18 decimals) of `amount` token units at 18-decimal `price`."""
    return (amount * price) // 10**token_decimals


def token_amount_from_usd(usd_amount: int, price: int, token_decimals: int = 18) -> int:
    """Token units bought by `usd_amount` (18 decimals) at 18-decimal `price`."""
    if price <= 0:
        raise ValueError(f"price must be positive: {price}")
    return (usd_amount * 10**token_decimals) // price


# -- Health factor -----------------------------------------------------------

def collateral_adjusted_for_threshold(collateral_value_in_usd: int) -> int:
    """Portion of nominal collateral value that counts toward solvency."""
    return (collateral_value_in_usd * LIQUIDATION_THRESHOLD) // LIQUIDATION_PRECISION


def calculate_health_factor(total_dsc_minted: int, collateral_value_in_usd: int) -> int:
    """Health factor in 1e18 fixed point; MAX_HEALTH_FACTOR when there is no debt."""
    if total_dsc_minted == 0:
        return MAX_HEALTH_FACTOR
    return (collateral_adjusted_for_threshold(collateral_value_in_usd) * PRECISION) // total_dsc_minted


def is_healthy(health_factor: int) -> bool:
    return health_factor >= MIN_HEALTH_FACTOR


# -- Liquidation -------------------------------------------------------------

def liquidation_bonus(token_amount: int) -> int:
    """Collateral paid to the liquidator on top of the debt-equivalent amount."""
    return (token_amount * LIQUIDATION_BONUS) // LIQUIDATION_PRECISION

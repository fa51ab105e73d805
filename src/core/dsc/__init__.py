"""`dsc`: overcollateralized stablecoin engine.

Users deposit listed collateral, mint DSC against it up to a 200%
collateralization floor, and anyone may liquidate an account whose health
factor drops below 1.0 in exchange for a 10% collateral bonus.

- integer-only fixed-point arithmetic (`math.py`),
- every public operation is all-or-nothing (`Chain.transaction()`),
- structured exceptions carrying the offending values (`errors.py`).

Public API:
- `DSCEngine(chain, collateral_tokens, price_feeds, dsc)`
- `calculate_health_factor(total_dsc_minted, collateral_value_in_usd) -> int`
- `check_all(engine) -> list[str]`
"""

from .engine import DSCEngine
from .errors import (
    BreaksHealthFactorError,
    DSCEngineError,
    HealthFactorNotImprovedError,
    HealthFactorOkError,
    InsufficientBalanceError,
    InvalidInputError,
    MintFailedError,
    NeedsMoreThanZeroError,
    TokenAddressesAndPriceFeedAddressesMustBeSameLengthError,
    TransferFailedError,
    UnsupportedAssetError,
)
from .invariants import check_all
from .math import (
    LIQUIDATION_BONUS,
    LIQUIDATION_PRECISION,
    LIQUIDATION_THRESHOLD,
    MAX_HEALTH_FACTOR,
    MIN_HEALTH_FACTOR,
    PRECISION,
    calculate_health_factor,
)
from .types import AccountInformation, AccountState, CollateralAsset, EngineEvent, Event

__all__ = [
    "DSCEngine",
    "check_all",
    "calculate_health_factor",
    "PRECISION",
    "LIQUIDATION_THRESHOLD",
    "LIQUIDATION_PRECISION",
    "LIQUIDATION_BONUS",
    "MIN_HEALTH_FACTOR",
    "MAX_HEALTH_FACTOR",
    "AccountInformation",
    "AccountState",
    "CollateralAsset",
    "EngineEvent",
    "Event",
    "DSCEngineError",
    "InvalidInputError",
    "NeedsMoreThanZeroError",
    "TokenAddressesAndPriceFeedAddressesMustBeSameLengthError",
    "UnsupportedAssetError",
    "TransferFailedError",
    "MintFailedError",
    "InsufficientBalanceError",
    "BreaksHealthFactorError",
    "HealthFactorOkError",
    "HealthFactorNotImprovedError",
]

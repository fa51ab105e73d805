"""Data types for the stablecoin engine.

Units/conventions:
- token amounts are integer units in the token's own decimals,
- `*_usd` values, debt and health factors are 18-decimal fixed point,
- addresses are `0x`-prefixed hex strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..oracle import PriceFeed


@unique
class Event(Enum):
    COLLATERAL_DEPOSITED = "CollateralDeposited"
    COLLATERAL_REDEEMED = "CollateralRedeemed"
    DSC_MINTED = "DscMinted"
    DSC_BURNED = "DscBurned"
    LIQUIDATED = "Liquidated"


@unique
class AccountState(Enum):
    """Informal position lifecycle of one account."""
    EMPTY = "empty"
    COLLATERALIZED = "collateralized"
    LEVERAGED = "leveraged"
    UNDERCOLLATERALIZED = "undercollateralized"


@dataclass(frozen=True)
class CollateralAsset:
    """A listed collateral token and the feed that prices it."""

    token: str
    price_feed: "PriceFeed"
    decimals: int = 18

    def __post_init__(self) -> None:
        if not self.token:
            raise ValueError("collateral token address must be non-empty")
        if self.decimals < 0:
            raise ValueError(f"decimals must be non-negative: {self.decimals}")


@dataclass(frozen=True)
class AccountInformation:
    total_dsc_minted: int
    collateral_value_in_usd: int


@dataclass(frozen=True)
class EngineEvent:
    """A committed state change.

    `user` is the account whose ledger changed; `counterparty` is the other side
    (redeem destination, burn payer, liquidator) when there is one.
    """

    event: Event
    user: str
    amount: int
    token: str = ""
    counterparty: str = ""

"""Exception types for the stablecoin engine.

Every engine operation either commits or raises one of these; the enclosing
`Chain.transaction()` has already rolled the ledgers back by the time the
caller sees the exception.
"""

from __future__ import annotations


class DSCEngineError(Exception):
    """Base class for all engine rejections."""


class InvalidInputError(DSCEngineError):
    """A parameter or construction argument is outside its domain."""


class NeedsMoreThanZeroError(InvalidInputError):
    def __init__(self, name: str = "amount") -> None:
        self.name = name
        super().__init__(f"{name} must be more than zero")


class TokenAddressesAndPriceFeedAddressesMustBeSameLengthError(InvalidInputError):
    def __init__(self, tokens: int, feeds: int) -> None:
        self.tokens = tokens
        self.feeds = feeds
        super().__init__(f"{tokens} collateral tokens but {feeds} price feeds")


class UnsupportedAssetError(DSCEngineError):
    """The token is not in the engine's fixed collateral list."""

    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(f"token not allowed as collateral: {token}")


class TransferFailedError(DSCEngineError):
    """A token transfer returned False or raised."""


class MintFailedError(DSCEngineError):
    """The stablecoin refused to mint."""


class InsufficientBalanceError(DSCEngineError):
    """A redeem or burn asks for more than the ledger entry holds."""

    def __init__(self, requested: int, available: int) -> None:
        self.requested = requested
        self.available = available
        super().__init__(f"requested {requested} but only {available} available")


class BreaksHealthFactorError(DSCEngineError):
    """The operation would leave the account below MIN_HEALTH_FACTOR."""

    def __init__(self, health_factor: int) -> None:
        self.health_factor = health_factor
        super().__init__(f"health factor broken: {health_factor}")


class HealthFactorOkError(DSCEngineError):
    """Liquidation target is not below MIN_HEALTH_FACTOR."""

    def __init__(self, health_factor: int) -> None:
        self.health_factor = health_factor
        super().__init__(f"health factor is ok: {health_factor}")


class HealthFactorNotImprovedError(DSCEngineError):
    """Liquidation did not strictly raise the target's health factor."""

    def __init__(self, starting: int, ending: int) -> None:
        self.starting = starting
        self.ending = ending
        super().__init__(f"health factor not improved: {starting} -> {ending}")

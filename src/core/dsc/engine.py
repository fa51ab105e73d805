"""Stablecoin engine: collateral ledger, debt ledger, health factor, liquidation.

``DSCEngine`` owns two ledgers (collateral per (user, token), debt per user) and
drives the external token and price-feed collaborators. Every public mutating
method:

1. Validates inputs (checks).
2. Updates the ledgers and records events (effects).
3. Calls token collaborators (interactions).
4. Re-evaluates the health factor of the affected account where the operation
   could lower it, raising ``BreaksHealthFactorError`` if it fell below
   ``MIN_HEALTH_FACTOR``.

All of this runs inside ``Chain.transaction()``: if any step raises, every
ledger and token balance is restored and the exception reaches the caller.
Events are published only when the outermost transaction commits.

Prices are read from the feeds on every evaluation; nothing is cached.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from types import MappingProxyType
from typing import Iterator, Mapping, Protocol, Sequence

from ...state.balances import Address
from ...state.chain import Chain
from ..oracle import ORACLE_TIMEOUT_SECONDS, PriceFeed, PriceQuote, additional_feed_precision, read_price
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
from .math import (
    LIQUIDATION_BONUS,
    LIQUIDATION_PRECISION,
    LIQUIDATION_THRESHOLD,
    MIN_HEALTH_FACTOR,
    PRECISION,
    calculate_health_factor,
    is_healthy,
    liquidation_bonus,
    token_amount_from_usd,
    usd_value,
)
from .types import AccountInformation, AccountState, CollateralAsset, EngineEvent, Event

logger = logging.getLogger(__name__)


class CollateralToken(Protocol):
    address: Address
    decimals: int

    def balance_of(self, holder: Address) -> int: ...

    def transfer(self, sender: Address, to: Address, amount: int) -> bool: ...

    def transfer_from(self, spender: Address, owner: Address, to: Address, amount: int) -> bool: ...


class StableCoin(CollateralToken, Protocol):
    def total_supply(self) -> int: ...

    def mint(self, caller: Address, to: Address, amount: int) -> bool: ...

    def burn(self, caller: Address, amount: int) -> None: ...


class DSCEngine:
    """Overcollateralized debt engine for one stablecoin and a fixed collateral list."""

    def __init__(
        self,
        chain: Chain,
        collateral_tokens: Sequence[CollateralToken],
        price_feeds: Sequence[PriceFeed],
        dsc: StableCoin,
        *,
        address: Address | None = None,
        oracle_timeout: int = ORACLE_TIMEOUT_SECONDS,
    ) -> None:
        if len(collateral_tokens) != len(price_feeds):
            raise TokenAddressesAndPriceFeedAddressesMustBeSameLengthError(
                len(collateral_tokens), len(price_feeds),
            )
        if not collateral_tokens:
            raise InvalidInputError("at least one collateral token is required")
        if oracle_timeout <= 0:
            raise InvalidInputError(f"oracle_timeout must be positive: {oracle_timeout}")

        assets: dict[Address, CollateralAsset] = {}
        tokens: dict[Address, CollateralToken] = {}
        for token, feed in zip(collateral_tokens, price_feeds):
            if token.address in assets:
                raise InvalidInputError(f"duplicate collateral token: {token.address}")
            assets[token.address] = CollateralAsset(token=token.address, price_feed=feed, decimals=token.decimals)
            tokens[token.address] = token

        self.chain = chain
        self.address = address or chain.new_address("DSCEngine")
        self.oracle_timeout = oracle_timeout
        self._assets: Mapping[Address, CollateralAsset] = MappingProxyType(assets)
        self._tokens: Mapping[Address, CollateralToken] = MappingProxyType(tokens)
        self._dsc = dsc
        self._collateral = chain.new_table("engine.collateral")
        self._debt = chain.new_table("engine.debt")
        self._events: list[EngineEvent] = []
        self._pending: list[EngineEvent] = []

    # ------------------------------------------------------------------
    # Transactions / events
    # ------------------------------------------------------------------

    @contextmanager
    def _atomic(self) -> Iterator[None]:
        mark = len(self._pending)
        try:
            with self.chain.transaction():
                yield
        except Exception:
            del self._pending[mark:]
            raise
        if not self.chain.in_transaction:
            self._events.extend(self._pending)
            self._pending.clear()

    def _emit(self, event: Event, user: Address, amount: int, token: Address = "", counterparty: Address = "") -> None:
        self._pending.append(EngineEvent(event=event, user=user, amount=amount, token=token, counterparty=counterparty))

    @property
    def events(self) -> tuple[EngineEvent, ...]:
        """Committed events, oldest first."""
        return tuple(self._events)

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    @staticmethod
    def _require_more_than_zero(amount: int, name: str = "amount") -> None:
        if amount <= 0:
            raise NeedsMoreThanZeroError(name)

    def _require_allowed_token(self, token: Address) -> CollateralAsset:
        asset = self._assets.get(token)
        if asset is None:
            raise UnsupportedAssetError(token)
        return asset

    # ------------------------------------------------------------------
    # Position operations
    # ------------------------------------------------------------------

    def deposit_collateral_and_mint_dsc(
        self, user: Address, token: Address, amount_collateral: int, amount_dsc_to_mint: int,
    ) -> None:
        """Deposit collateral and mint against it in one transaction."""
        with self._atomic():
            self._deposit_collateral(user, token, amount_collateral)
            self._mint_dsc(user, amount_dsc_to_mint)
        logger.info(
            "deposited %d of %s and minted %d DSC for %s",
            amount_collateral, token, amount_dsc_to_mint, user,
        )

    def deposit_collateral(self, user: Address, token: Address, amount: int) -> None:
        with self._atomic():
            self._deposit_collateral(user, token, amount)
        logger.info("deposited %d of %s for %s", amount, token, user)

    def redeem_collateral_and_burn_dsc(
        self, user: Address, token: Address, amount_collateral: int, amount_dsc_to_burn: int,
    ) -> None:
        """Burn DSC, then redeem collateral, in one transaction."""
        with self._atomic():
            self._burn_dsc(amount_dsc_to_burn, on_behalf_of=user, dsc_from=user)
            self._redeem_collateral(token, amount_collateral, from_user=user, to=user)
            self._revert_if_health_factor_is_broken(user)
        logger.info(
            "burned %d DSC and redeemed %d of %s for %s",
            amount_dsc_to_burn, amount_collateral, token, user,
        )

    def redeem_collateral(self, user: Address, token: Address, amount: int) -> None:
        with self._atomic():
            self._redeem_collateral(token, amount, from_user=user, to=user)
            self._revert_if_health_factor_is_broken(user)
        logger.info("redeemed %d of %s for %s", amount, token, user)

    def mint_dsc(self, user: Address, amount: int) -> None:
        with self._atomic():
            self._mint_dsc(user, amount)
        logger.info("minted %d DSC for %s", amount, user)

    def burn_dsc(self, user: Address, amount: int) -> None:
        """Repay debt with DSC the user has approved to the engine.

        Never health-checked: lowering debt can only raise the factor.
        """
        with self._atomic():
            self._burn_dsc(amount, on_behalf_of=user, dsc_from=user)
        logger.info("burned %d DSC for %s", amount, user)

    # ------------------------------------------------------------------
    # Liquidation
    # ------------------------------------------------------------------

    def liquidate(self, liquidator: Address, collateral: Address, user: Address, debt_to_cover: int) -> int:
        """Repay `debt_to_cover` of `user`'s debt and seize collateral plus a bonus.

        Returns the amount of `collateral` transferred to the liquidator.
        No cap is applied to the seizure: if the bonus-inflated amount exceeds
        what `user` holds in `collateral`, the liquidation fails with
        ``InsufficientBalanceError``. A `debt_to_cover` too small to buy one
        unit of `collateral` fails with ``NeedsMoreThanZeroError``.
        """
        with self._atomic():
            self._require_more_than_zero(debt_to_cover, "debt_to_cover")
            self._require_allowed_token(collateral)

            starting_user_health_factor = self._health_factor(user)
            if is_healthy(starting_user_health_factor):
                raise HealthFactorOkError(starting_user_health_factor)

            token_amount_from_debt_covered = self.get_token_amount_from_usd(collateral, debt_to_cover)
            bonus_collateral = liquidation_bonus(token_amount_from_debt_covered)
            total_collateral_to_redeem = token_amount_from_debt_covered + bonus_collateral
            self._require_more_than_zero(total_collateral_to_redeem, "collateral_to_seize")

            self._redeem_collateral(collateral, total_collateral_to_redeem, from_user=user, to=liquidator)
            self._burn_dsc(debt_to_cover, on_behalf_of=user, dsc_from=liquidator)

            ending_user_health_factor = self._health_factor(user)
            if ending_user_health_factor <= starting_user_health_factor:
                raise HealthFactorNotImprovedError(starting_user_health_factor, ending_user_health_factor)
            self._revert_if_health_factor_is_broken(liquidator)
            self._emit(Event.LIQUIDATED, user, debt_to_cover, token=collateral, counterparty=liquidator)

        logger.info(
            "liquidated %s: %s covered %d DSC, seized %d of %s",
            user, liquidator, debt_to_cover, total_collateral_to_redeem, collateral,
        )
        return total_collateral_to_redeem

    # ------------------------------------------------------------------
    # Ledger primitives (call only inside _atomic)
    # ------------------------------------------------------------------

    def _deposit_collateral(self, user: Address, token: Address, amount: int) -> None:
        self._require_more_than_zero(amount, "amount_collateral")
        self._require_allowed_token(token)

        self._collateral.add(user, token, amount)
        self._emit(Event.COLLATERAL_DEPOSITED, user, amount, token=token)

        self._call_transfer(
            lambda: self._tokens[token].transfer_from(self.address, user, self.address, amount),
            f"transfer of {amount} {token} from {user}",
        )

    def _redeem_collateral(self, token: Address, amount: int, *, from_user: Address, to: Address) -> None:
        self._require_more_than_zero(amount, "amount_collateral")
        self._require_allowed_token(token)

        available = self._collateral.get(from_user, token)
        if amount > available:
            raise InsufficientBalanceError(amount, available)
        self._collateral.subtract(from_user, token, amount)
        self._emit(Event.COLLATERAL_REDEEMED, from_user, amount, token=token, counterparty=to)

        self._call_transfer(
            lambda: self._tokens[token].transfer(self.address, to, amount),
            f"transfer of {amount} {token} to {to}",
        )

    def _mint_dsc(self, user: Address, amount: int) -> None:
        self._require_more_than_zero(amount, "amount_dsc_to_mint")

        self._debt.add(user, self._dsc.address, amount)
        self._revert_if_health_factor_is_broken(user)
        self._emit(Event.DSC_MINTED, user, amount, token=self._dsc.address)

        try:
            minted = self._dsc.mint(self.address, user, amount)
        except DSCEngineError:
            raise
        except Exception as exc:
            raise MintFailedError(f"mint of {amount} DSC to {user} reverted: {exc}") from exc
        if not minted:
            raise MintFailedError(f"mint of {amount} DSC to {user} refused")

    def _burn_dsc(self, amount: int, *, on_behalf_of: Address, dsc_from: Address) -> None:
        self._require_more_than_zero(amount, "amount_dsc_to_burn")

        owed = self._debt.get(on_behalf_of, self._dsc.address)
        if amount > owed:
            raise InsufficientBalanceError(amount, owed)
        self._debt.subtract(on_behalf_of, self._dsc.address, amount)
        self._emit(Event.DSC_BURNED, on_behalf_of, amount, token=self._dsc.address, counterparty=dsc_from)

        self._call_transfer(
            lambda: self._dsc.transfer_from(self.address, dsc_from, self.address, amount),
            f"transfer of {amount} DSC from {dsc_from}",
        )
        self._dsc.burn(self.address, amount)

    @staticmethod
    def _call_transfer(call, what: str) -> None:
        # Engine errors raised by a reentrant call bubble up unchanged.
        try:
            ok = call()
        except DSCEngineError:
            raise
        except Exception as exc:
            raise TransferFailedError(f"{what} reverted: {exc}") from exc
        if not ok:
            raise TransferFailedError(f"{what} returned false")

    # ------------------------------------------------------------------
    # Health factor
    # ------------------------------------------------------------------

    def _get_account_information(self, user: Address) -> AccountInformation:
        return AccountInformation(
            total_dsc_minted=self._debt.get(user, self._dsc.address),
            collateral_value_in_usd=self.get_account_collateral_value(user),
        )

    def _health_factor(self, user: Address) -> int:
        info = self._get_account_information(user)
        return calculate_health_factor(info.total_dsc_minted, info.collateral_value_in_usd)

    def _revert_if_health_factor_is_broken(self, user: Address) -> None:
        health_factor = self._health_factor(user)
        if not is_healthy(health_factor):
            raise BreaksHealthFactorError(health_factor)

    # ------------------------------------------------------------------
    # Prices
    # ------------------------------------------------------------------

    def _quote(self, asset: CollateralAsset) -> PriceQuote:
        return read_price(asset.token, asset.price_feed, self.chain.timestamp, self.oracle_timeout)

    def get_price(self, token: Address) -> PriceQuote:
        return self._quote(self._require_allowed_token(token))

    def get_usd_value(self, token: Address, amount: int) -> int:
        asset = self._require_allowed_token(token)
        return usd_value(amount, self._quote(asset).price, asset.decimals)

    def get_token_amount_from_usd(self, token: Address, usd_amount_in_wei: int) -> int:
        asset = self._require_allowed_token(token)
        return token_amount_from_usd(usd_amount_in_wei, self._quote(asset).price, asset.decimals)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def get_account_collateral_value(self, user: Address) -> int:
        """USD value of everything `user` has deposited.

        Tokens the user holds none of contribute zero without consulting their
        feed.
        """
        total_collateral_value_in_usd = 0
        for token, asset in self._assets.items():
            amount = self._collateral.get(user, token)
            if amount == 0:
                continue
            total_collateral_value_in_usd += usd_value(amount, self._quote(asset).price, asset.decimals)
        return total_collateral_value_in_usd

    def get_account_information(self, user: Address) -> AccountInformation:
        return self._get_account_information(user)

    def get_health_factor(self, user: Address) -> int:
        return self._health_factor(user)

    @staticmethod
    def calculate_health_factor(total_dsc_minted: int, collateral_value_in_usd: int) -> int:
        return calculate_health_factor(total_dsc_minted, collateral_value_in_usd)

    def account_state(self, user: Address) -> AccountState:
        has_collateral = any(self._collateral.get(user, token) for token in self._assets)
        debt = self._debt.get(user, self._dsc.address)
        if debt == 0:
            return AccountState.COLLATERALIZED if has_collateral else AccountState.EMPTY
        if is_healthy(self._health_factor(user)):
            return AccountState.LEVERAGED
        return AccountState.UNDERCOLLATERALIZED

    def get_collateral_balance_of_user(self, user: Address, token: Address) -> int:
        return self._collateral.get(user, token)

    def get_total_collateral(self, token: Address) -> int:
        """Sum of all users' deposits of `token`."""
        return self._collateral.total(token)

    def get_dsc_minted(self, user: Address) -> int:
        return self._debt.get(user, self._dsc.address)

    def get_total_dsc_minted(self) -> int:
        return self._debt.total(self._dsc.address)

    def get_collateral_tokens(self) -> list[Address]:
        return list(self._assets)

    def get_collateral_token(self, token: Address) -> CollateralToken:
        return self._tokens[self._require_allowed_token(token).token]

    def get_collateral_token_price_feed(self, token: Address) -> PriceFeed:
        return self._require_allowed_token(token).price_feed

    def get_dsc(self) -> Address:
        return self._dsc.address

    @property
    def dsc(self) -> StableCoin:
        return self._dsc

    def get_additional_feed_precision(self, token: Address) -> int:
        return additional_feed_precision(self._require_allowed_token(token).price_feed.decimals())

    @staticmethod
    def get_precision() -> int:
        return PRECISION

    @staticmethod
    def get_liquidation_threshold() -> int:
        return LIQUIDATION_THRESHOLD

    @staticmethod
    def get_liquidation_bonus() -> int:
        return LIQUIDATION_BONUS

    @staticmethod
    def get_liquidation_precision() -> int:
        return LIQUIDATION_PRECISION

    @staticmethod
    def get_min_health_factor() -> int:
        return MIN_HEALTH_FACTOR

    def __repr__(self) -> str:
        return f"DSCEngine({self.address}, {len(self._assets)} collateral tokens)"

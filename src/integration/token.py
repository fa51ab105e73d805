"""
In-process fungible tokens.

These are the engine's external collaborators: a plain ERC-20-shaped ledger for
collateral, a faucet variant for local networks and tests, and the
owner-gated stablecoin the engine mints and burns.

All balances and allowances are `BalanceTable`s registered with the `Chain`, so
a failed engine transaction rolls token movements back with everything else.
Calls take the acting address explicitly (`sender`, `spender`, `caller`) in
place of an implicit message sender.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..state.balances import ZERO_ADDRESS, Address
from ..state.chain import Chain

logger = logging.getLogger(__name__)


class TokenError(Exception):
    """Base class for token-level rejections."""


class InvalidReceiverError(TokenError):
    def __init__(self, receiver: Address) -> None:
        self.receiver = receiver
        super().__init__(f"invalid receiver: {receiver}")


class InsufficientTokenBalanceError(TokenError):
    def __init__(self, holder: Address, balance: int, needed: int) -> None:
        self.holder = holder
        self.balance = balance
        self.needed = needed
        super().__init__(f"{holder} has {balance}, needs {needed}")


class InsufficientAllowanceError(TokenError):
    def __init__(self, owner: Address, spender: Address, allowance: int, needed: int) -> None:
        self.owner = owner
        self.spender = spender
        self.allowance = allowance
        self.needed = needed
        super().__init__(f"{spender} may spend {allowance} of {owner}, needs {needed}")


class NotOwnerError(TokenError):
    def __init__(self, caller: Address) -> None:
        self.caller = caller
        super().__init__(f"caller is not the owner: {caller}")


class MustBeMoreThanZeroError(TokenError):
    def __init__(self) -> None:
        super().__init__("amount must be more than zero")


class BurnAmountExceedsBalanceError(TokenError):
    def __init__(self, balance: int, amount: int) -> None:
        self.balance = balance
        self.amount = amount
        super().__init__(f"burn amount {amount} exceeds balance {balance}")


class ERC20Token:
    """Fungible token ledger with allowances."""

    def __init__(
        self,
        chain: Chain,
        name: str,
        symbol: str,
        decimals: int = 18,
        address: Optional[Address] = None,
    ) -> None:
        if decimals < 0:
            raise ValueError(f"decimals must be non-negative: {decimals}")
        self.chain = chain
        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self.address = address or chain.new_address(symbol)
        self._balances = chain.new_table(f"{symbol}.balances")
        self._allowances = chain.new_table(f"{symbol}.allowances")

    # -- Views ---------------------------------------------------------------

    def balance_of(self, holder: Address) -> int:
        return self._balances.get(holder, self.address)

    def total_supply(self) -> int:
        return self._balances.total(self.address)

    def allowance(self, owner: Address, spender: Address) -> int:
        return self._allowances.get(owner, spender)

    # -- Mutations -----------------------------------------------------------

    def approve(self, owner: Address, spender: Address, amount: int) -> bool:
        if spender == ZERO_ADDRESS:
            raise InvalidReceiverError(spender)
        self._allowances.set(owner, spender, amount)
        return True

    def transfer(self, sender: Address, to: Address, amount: int) -> bool:
        self._move(sender, to, amount)
        return True

    def transfer_from(self, spender: Address, owner: Address, to: Address, amount: int) -> bool:
        allowed = self.allowance(owner, spender)
        if allowed < amount:
            raise InsufficientAllowanceError(owner, spender, allowed, amount)
        self._allowances.set(owner, spender, allowed - amount)
        self._move(owner, to, amount)
        return True

    def _move(self, sender: Address, to: Address, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"amount must be non-negative: {amount}")
        if to == ZERO_ADDRESS:
            raise InvalidReceiverError(to)
        balance = self.balance_of(sender)
        if balance < amount:
            raise InsufficientTokenBalanceError(sender, balance, amount)
        self._balances.subtract(sender, self.address, amount)
        self._balances.add(to, self.address, amount)

    def _mint(self, to: Address, amount: int) -> None:
        if to == ZERO_ADDRESS:
            raise InvalidReceiverError(to)
        self._balances.add(to, self.address, amount)

    def _burn(self, holder: Address, amount: int) -> None:
        balance = self.balance_of(holder)
        if balance < amount:
            raise InsufficientTokenBalanceError(holder, balance, amount)
        self._balances.subtract(holder, self.address, amount)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.symbol}, {self.address})"


class MockERC20(ERC20Token):
    """Collateral token with an open faucet, for local networks and tests."""

    def mint(self, to: Address, amount: int) -> None:
        self._mint(to, amount)


class DecentralizedStableCoin(ERC20Token):
    """The pegged asset. Only the owner (the engine, once deployed) may mint or burn."""

    def __init__(self, chain: Chain, owner: Address, address: Optional[Address] = None) -> None:
        super().__init__(chain, "DecentralizedStableCoin", "DSC", 18, address)
        self.owner = owner

    def _only_owner(self, caller: Address) -> None:
        if caller != self.owner:
            raise NotOwnerError(caller)

    def transfer_ownership(self, caller: Address, new_owner: Address) -> None:
        self._only_owner(caller)
        if new_owner == ZERO_ADDRESS:
            raise InvalidReceiverError(new_owner)
        logger.info("DSC ownership %s -> %s", self.owner, new_owner)
        self.owner = new_owner

    def mint(self, caller: Address, to: Address, amount: int) -> bool:
        self._only_owner(caller)
        if to == ZERO_ADDRESS:
            raise InvalidReceiverError(to)
        if amount <= 0:
            raise MustBeMoreThanZeroError()
        self._mint(to, amount)
        return True

    def burn(self, caller: Address, amount: int) -> None:
        """Burn `amount` from the caller's own balance."""
        self._only_owner(caller)
        if amount <= 0:
            raise MustBeMoreThanZeroError()
        balance = self.balance_of(caller)
        if balance < amount:
            raise BurnAmountExceedsBalanceError(balance, amount)
        self._burn(caller, amount)

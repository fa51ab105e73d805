"""
Keyed integer ledger used for every balance in the system.

Implements BalanceTable[Address, Key] -> Amount. The same table shape backs
token balances (holder, token), token allowances (owner, spender), engine
collateral (user, token) and engine debt (user, dsc).
"""

from typing import Dict, Iterator, Tuple


# Type aliases
Address = str  # 20-byte hex string (0x...)
Amount = int  # Non-negative integer (arbitrary precision)
Key = Tuple[Address, Address]

ZERO_ADDRESS = "0x" + "00" * 20


class BalanceTable:
    """
    Sparse mapping (holder, key) -> amount with non-negative entries.

    Tables never hand out their backing dict; `snapshot()` returns a copy and
    `restore()` replaces the contents wholesale, which is how `Chain` rolls a
    failed transaction back.
    """

    def __init__(self, name: str = ""):
        self.name = name
        self._balances: Dict[Key, Amount] = {}

    def get(self, holder: Address, key: Address) -> Amount:
        """Get amount for (holder, key). Returns 0 if not found."""
        return self._balances.get((holder, key), 0)

    def set(self, holder: Address, key: Address, amount: Amount) -> None:
        """
        Set amount for (holder, key).

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError(f"Balance cannot be negative: {amount}")
        if amount == 0:
            self._balances.pop((holder, key), None)
        else:
            self._balances[(holder, key)] = amount

    def add(self, holder: Address, key: Address, delta: Amount) -> None:
        """
        Add a non-negative delta to the entry.

        Raises:
            ValueError: If delta is negative
        """
        if delta < 0:
            raise ValueError(f"Delta must be non-negative: {delta}")
        self.set(holder, key, self.get(holder, key) + delta)

    def subtract(self, holder: Address, key: Address, delta: Amount) -> None:
        """
        Subtract a non-negative delta from the entry.

        Callers that need a domain error check the balance first; this method
        only protects the table from ever holding a negative amount.

        Raises:
            ValueError: If delta is negative or exceeds the current amount
        """
        if delta < 0:
            raise ValueError(f"Delta must be non-negative: {delta}")
        current = self.get(holder, key)
        if delta > current:
            raise ValueError(f"Insufficient balance: {current} - {delta} < 0")
        self.set(holder, key, current - delta)

    def total(self, key: Address) -> Amount:
        """Sum of all entries for `key` across holders."""
        return sum(amount for (_, k), amount in self._balances.items() if k == key)

    def holders(self, key: Address) -> Dict[Address, Amount]:
        """All non-zero entries for `key`, as holder -> amount."""
        return {h: amount for (h, k), amount in self._balances.items() if k == key}

    def snapshot(self) -> Dict[Key, Amount]:
        return dict(self._balances)

    def restore(self, snapshot: Dict[Key, Amount]) -> None:
        self._balances = dict(snapshot)

    def __iter__(self) -> Iterator[Tuple[Key, Amount]]:
        # Sorted so callers never depend on insertion order.
        return iter(sorted(self._balances.items()))

    def __len__(self) -> int:
        return len(self._balances)

    def __repr__(self) -> str:
        return f"BalanceTable({self.name!r}, {len(self._balances)} entries)"

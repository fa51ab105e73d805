"""
Serialized execution environment.

`Chain` owns every `BalanceTable` in a deployment and runs state-changing calls
as transactions: either the whole call commits, or every registered table is
restored to its pre-call contents and the exception propagates.

Transactions nest. A reentrant call opens an inner transaction; if the inner
call fails and the outer caller catches the error, only the inner effects are
undone.
"""

from __future__ import annotations

import hashlib
import logging
from contextlib import contextmanager
from typing import Dict, Iterator, List

from .balances import Address, Amount, BalanceTable, Key

logger = logging.getLogger(__name__)


class Chain:
    """Block clock, address allocator and journal for registered tables."""

    def __init__(self, timestamp: int = 1, chain_id: int = 31337) -> None:
        if timestamp < 0:
            raise ValueError(f"timestamp must be non-negative: {timestamp}")
        self.timestamp = timestamp
        self.chain_id = chain_id
        self._tables: List[BalanceTable] = []
        self._nonce = 0
        self._depth = 0

    # -- Addresses -----------------------------------------------------------

    def new_address(self, label: str = "") -> Address:
        """Allocate a fresh, deterministic 20-byte address."""
        self._nonce += 1
        digest = hashlib.sha256(f"{self.chain_id}:{self._nonce}:{label}".encode("utf-8")).hexdigest()
        return "0x" + digest[:40]

    # -- Clock ---------------------------------------------------------------

    def warp(self, seconds: int) -> int:
        """Advance the block timestamp by `seconds`. Returns the new timestamp."""
        if seconds < 0:
            raise ValueError(f"cannot move time backwards: {seconds}")
        self.timestamp += seconds
        return self.timestamp

    # -- Journal -------------------------------------------------------------

    def new_table(self, name: str = "") -> BalanceTable:
        table = BalanceTable(name)
        self._tables.append(table)
        return table

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Run the enclosed block atomically against all registered tables."""
        snapshots: List[Dict[Key, Amount]] = [t.snapshot() for t in self._tables]
        self._depth += 1
        try:
            yield
        except Exception as exc:
            # Tables created inside the block are left alone; they were empty before it.
            for table, snap in zip(self._tables, snapshots):
                table.restore(snap)
            logger.debug("transaction rolled back at depth %d: %r", self._depth, exc)
            raise
        finally:
            self._depth -= 1

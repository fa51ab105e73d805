"""
In-process price aggregator.

Stands in for an external USD price feed on local networks and in tests. Rounds
are stamped with the chain's block timestamp, so advancing the chain with
`Chain.warp()` ages the price exactly like a real feed that stopped updating.
"""

from __future__ import annotations

from typing import Dict, Optional

from ..core.oracle import RoundData
from ..state.balances import Address
from ..state.chain import Chain


class MockPriceFeed:
    """Aggregator with a settable answer. Satisfies `src.core.oracle.PriceFeed`."""

    version = 4

    def __init__(
        self,
        chain: Chain,
        decimals: int,
        initial_answer: int,
        description: str = "",
        address: Optional[Address] = None,
    ) -> None:
        self.chain = chain
        self.description = description
        self.address = address or chain.new_address(f"feed:{description}")
        self._decimals = decimals
        self._rounds: Dict[int, RoundData] = {}
        self._latest_round = 0
        self.update_answer(initial_answer)

    def decimals(self) -> int:
        return self._decimals

    def update_answer(self, answer: int) -> RoundData:
        """Publish `answer` as a new round at the current block time."""
        now = self.chain.timestamp
        return self.update_round_data(self._latest_round + 1, answer, now, now)

    def update_round_data(self, round_id: int, answer: int, updated_at: int, started_at: int) -> RoundData:
        rd = RoundData(
            round_id=round_id,
            answer=answer,
            started_at=started_at,
            updated_at=updated_at,
            answered_in_round=round_id,
        )
        self._rounds[round_id] = rd
        self._latest_round = round_id
        return rd

    def latest_round_data(self) -> RoundData:
        return self._rounds[self._latest_round]

    def get_round_data(self, round_id: int) -> RoundData:
        return self._rounds[round_id]

    def latest_answer(self) -> int:
        return self.latest_round_data().answer

    def __repr__(self) -> str:
        return f"MockPriceFeed({self.description!r}, decimals={self._decimals}, answer={self.latest_answer()})"

"""
Deployment bootstrap.

Builds a complete local deployment from a `NetworkConfig`: one faucet token and
one price feed per listed collateral, the stablecoin, and the engine, then
hands stablecoin ownership to the engine so nothing else can mint or burn.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from ..core.dsc import DSCEngine
from ..state.balances import Address
from ..state.chain import Chain
from .network_config import NetworkConfig, load_network_config
from .price_feed import MockPriceFeed
from .token import DecentralizedStableCoin, MockERC20

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Deployment:
    chain: Chain
    deployer: Address
    dsc: DecentralizedStableCoin
    engine: DSCEngine
    tokens: Dict[str, MockERC20]
    feeds: Dict[str, MockPriceFeed]
    config: NetworkConfig

    def token(self, symbol: str) -> MockERC20:
        return self.tokens[symbol]

    def feed(self, symbol: str) -> MockPriceFeed:
        return self.feeds[symbol]


def deploy_dsc_engine(
    config: NetworkConfig,
    chain: Optional[Chain] = None,
    deployer: Optional[Address] = None,
) -> Deployment:
    """Deploy collaborators and the engine for `config` onto `chain`."""
    if chain is None:
        chain = Chain(chain_id=config.chain_id)
    if deployer is None:
        deployer = chain.new_address("deployer")

    tokens: Dict[str, MockERC20] = {}
    feeds: Dict[str, MockPriceFeed] = {}
    for c in config.collateral:
        token = MockERC20(chain, c.name or c.symbol, c.symbol, c.decimals)
        if c.initial_balance:
            token.mint(deployer, c.initial_balance)
        tokens[c.symbol] = token
        feeds[c.symbol] = MockPriceFeed(chain, c.feed_decimals, c.initial_price, description=f"{c.symbol} / USD")

    dsc = DecentralizedStableCoin(chain, owner=deployer)
    engine = DSCEngine(
        chain,
        list(tokens.values()),
        list(feeds.values()),
        dsc,
        oracle_timeout=config.oracle_timeout_seconds,
    )
    dsc.transfer_ownership(deployer, engine.address)

    logger.info(
        "deployed DSCEngine %s on %s with collateral %s",
        engine.address, config.name, ", ".join(tokens),
    )
    return Deployment(
        chain=chain,
        deployer=deployer,
        dsc=dsc,
        engine=engine,
        tokens=tokens,
        feeds=feeds,
        config=config,
    )


def deploy_network(name: Optional[str] = None, config_path: Optional[str] = None) -> Deployment:
    """Load the named network from YAML and deploy it onto a fresh chain."""
    return deploy_dsc_engine(load_network_config(name, config_path))

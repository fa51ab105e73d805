"""Shared test fixtures: a fresh local deployment and funded accounts."""
from __future__ import annotations

import pytest

from src.core.dsc import DSCEngine
from src.integration.deploy import Deployment, deploy_dsc_engine
from src.integration.network_config import load_network_config
from src.integration.price_feed import MockPriceFeed
from src.integration.token import DecentralizedStableCoin, MockERC20
from src.state.chain import Chain

ETHER = 10**18
ETH_USD_PRICE = 2000 * 10**8
BTC_USD_PRICE = 1000 * 10**8
AMOUNT_COLLATERAL = 10 * ETHER
STARTING_ERC20_BALANCE = 10 * ETHER
AMOUNT_TO_MINT = 100 * ETHER


# ---------------------------------------------------------------------------
# Deployment fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def deployment(monkeypatch) -> Deployment:
    monkeypatch.delenv("DSC_NETWORK", raising=False)
    return deploy_dsc_engine(load_network_config("anvil"))


@pytest.fixture()
def chain(deployment) -> Chain:
    return deployment.chain


@pytest.fixture()
def engine(deployment) -> DSCEngine:
    return deployment.engine


@pytest.fixture()
def dsc(deployment) -> DecentralizedStableCoin:
    return deployment.dsc


@pytest.fixture()
def weth(deployment) -> MockERC20:
    return deployment.token("WETH")


@pytest.fixture()
def wbtc(deployment) -> MockERC20:
    return deployment.token("WBTC")


@pytest.fixture()
def eth_usd_feed(deployment) -> MockPriceFeed:
    return deployment.feed("WETH")


@pytest.fixture()
def btc_usd_feed(deployment) -> MockPriceFeed:
    return deployment.feed("WBTC")


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


@pytest.fixture()
def user(chain, weth, wbtc) -> str:
    """An account holding STARTING_ERC20_BALANCE of each collateral token."""
    address = chain.new_address("user")
    weth.mint(address, STARTING_ERC20_BALANCE)
    wbtc.mint(address, STARTING_ERC20_BALANCE)
    return address


@pytest.fixture()
def liquidator(chain, weth) -> str:
    address = chain.new_address("liquidator")
    weth.mint(address, 2 * STARTING_ERC20_BALANCE)
    return address


@pytest.fixture()
def deposited(engine, weth, user) -> str:
    """`user` with AMOUNT_COLLATERAL WETH deposited and no debt."""
    weth.approve(user, engine.address, AMOUNT_COLLATERAL)
    engine.deposit_collateral(user, weth.address, AMOUNT_COLLATERAL)
    return user


@pytest.fixture()
def deposited_and_minted(engine, weth, user) -> str:
    """`user` with AMOUNT_COLLATERAL WETH deposited and AMOUNT_TO_MINT DSC minted."""
    weth.approve(user, engine.address, AMOUNT_COLLATERAL)
    engine.deposit_collateral_and_mint_dsc(user, weth.address, AMOUNT_COLLATERAL, AMOUNT_TO_MINT)
    return user


# ---------------------------------------------------------------------------
# Bare wiring for constructor tests
# ---------------------------------------------------------------------------


@pytest.fixture()
def bare_chain() -> Chain:
    return Chain()


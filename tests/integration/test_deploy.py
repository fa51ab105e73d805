"""Tests for src/integration/deploy.py."""

import pytest

from src.core.dsc import check_all
from src.core.oracle import StalePriceError
from src.integration.deploy import deploy_dsc_engine, deploy_network
from src.integration.network_config import CollateralConfig, NetworkConfig
from src.integration.token import NotOwnerError
from src.state.chain import Chain

E18 = 10**18


class TestDeployNetwork:
    def test_anvil_wiring(self, deployment):
        engine = deployment.engine
        assert engine.get_collateral_tokens() == [deployment.token("WETH").address, deployment.token("WBTC").address]
        assert engine.get_collateral_token_price_feed(deployment.token("WETH").address) is deployment.feed("WETH")
        assert engine.get_dsc() == deployment.dsc.address
        assert engine.oracle_timeout == 10_800
        assert deployment.feed("WETH").description == "WETH / USD"

    def test_engine_owns_stablecoin(self, deployment):
        assert deployment.dsc.owner == deployment.engine.address
        with pytest.raises(NotOwnerError):
            deployment.dsc.mint(deployment.deployer, deployment.deployer, 1)

    def test_deployer_funded(self, deployment):
        assert deployment.token("WETH").balance_of(deployment.deployer) == 1000 * E18

    def test_invariants_hold(self, deployment):
        assert check_all(deployment.engine) == []

    def test_eight_decimal_collateral(self, monkeypatch):
        monkeypatch.delenv("DSC_NETWORK", raising=False)
        d = deploy_network("anvil-8dec-btc")
        wbtc = d.token("WBTC")
        assert wbtc.decimals == 8
        # One whole WBTC at $60,000.
        assert d.engine.get_usd_value(wbtc.address, 10**8) == 60_000 * E18
        assert d.engine.get_token_amount_from_usd(wbtc.address, 60_000 * E18) == 10**8


class TestDeployDscEngine:
    def test_onto_existing_chain(self):
        chain = Chain(timestamp=500)
        deployer = chain.new_address("me")
        cfg = NetworkConfig(
            name="custom",
            oracle_timeout_seconds=60,
            collateral=(CollateralConfig(symbol="ABC", decimals=6, initial_price=5 * 10**8),),
        )
        d = deploy_dsc_engine(cfg, chain=chain, deployer=deployer)
        assert d.chain is chain
        assert d.deployer == deployer
        assert d.token("ABC").total_supply() == 0
        assert d.feed("ABC").latest_round_data().updated_at == 500
        assert d.engine.get_usd_value(d.token("ABC").address, 10**6) == 5 * E18

        chain.warp(61)
        with pytest.raises(StalePriceError):
            d.engine.get_price(d.token("ABC").address)

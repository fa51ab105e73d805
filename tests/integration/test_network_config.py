"""Unit tests for network config loading, env interpolation, and validation."""
from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from src.integration.network_config import (
    DEFAULT_NETWORK,
    CollateralConfig,
    ConfigError,
    NetworkConfig,
    _interpolate_env,
    default_config_path,
    list_networks,
    load_network_config,
)


def _write(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "networks.yaml"
    path.write_text(textwrap.dedent(body), encoding="utf-8")
    return path


MINIMAL = """\
networks:
  local:
    chain_id: 1337
    oracle_timeout_seconds: 60
    collateral:
      - symbol: WETH
        initial_price: 200000000000
"""


class TestInterpolateEnv:
    def test_simple_substitution(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ETH_PRICE", "123")
        assert _interpolate_env("${ETH_PRICE}") == "123"

    def test_missing_var_becomes_empty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NONEXISTENT_VAR_XYZ", raising=False)
        assert _interpolate_env("${NONEXISTENT_VAR_XYZ}") == ""

    def test_nested(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SYM", "WETH")
        assert _interpolate_env({"c": [{"symbol": "${SYM}"}], "n": 1}) == {"c": [{"symbol": "WETH"}], "n": 1}


class TestBundledConfig:
    def test_default_path_exists(self) -> None:
        assert default_config_path().is_file()

    def test_lists_networks(self) -> None:
        assert list_networks() == ["anvil", "anvil-8dec-btc"]

    def test_anvil(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("DSC_NETWORK", raising=False)
        cfg = load_network_config()
        assert cfg.name == DEFAULT_NETWORK == "anvil"
        assert cfg.oracle_timeout_seconds == 10_800
        assert cfg.collateral[0] == CollateralConfig(
            symbol="WETH",
            name="Wrapped Ether",
            decimals=18,
            feed_decimals=8,
            initial_price=2000 * 10**8,
            initial_balance=1000 * 10**18,
        )

    def test_network_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DSC_NETWORK", "anvil-8dec-btc")
        cfg = load_network_config()
        assert cfg.name == "anvil-8dec-btc"
        assert cfg.collateral[1].decimals == 8


class TestLoadNetworkConfig:
    def test_minimal_file(self, tmp_path: Path) -> None:
        cfg = load_network_config("local", _write(tmp_path, MINIMAL))
        assert isinstance(cfg, NetworkConfig)
        assert cfg.chain_id == 1337
        assert cfg.oracle_timeout_seconds == 60
        assert cfg.collateral == (CollateralConfig(symbol="WETH", initial_price=2000 * 10**8),)

    def test_env_interpolation_in_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("WETH_PRICE", "150000000000")
        path = _write(tmp_path, """\
            networks:
              local:
                collateral:
                  - symbol: WETH
                    initial_price: ${WETH_PRICE}
            """)
        assert load_network_config("local", path).collateral[0].initial_price == 1500 * 10**8

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_network_config("local", tmp_path / "nonexistent.yaml")

    def test_unknown_network(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="unknown network"):
            load_network_config("mainnet", _write(tmp_path, MINIMAL))

    def test_no_networks(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError):
            list_networks(_write(tmp_path, "networks: {}\n"))

    def test_top_level_not_mapping(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError):
            list_networks(_write(tmp_path, "- a\n- b\n"))

    def test_non_integer_value(self, tmp_path: Path) -> None:
        path = _write(tmp_path, """\
            networks:
              local:
                collateral:
                  - symbol: WETH
                    initial_price: lots
            """)
        with pytest.raises(ConfigError, match="initial_price"):
            load_network_config("local", path)

    def test_boolean_is_not_an_integer(self, tmp_path: Path) -> None:
        path = _write(tmp_path, """\
            networks:
              local:
                chain_id: true
                collateral:
                  - symbol: WETH
                    initial_price: 1
            """)
        with pytest.raises(ConfigError, match="chain_id"):
            load_network_config("local", path)


class TestValidation:
    @pytest.mark.parametrize(
        "collateral",
        [
            "[]",
            "[{initial_price: 1}]",
            "[{symbol: WETH, initial_price: 0}]",
            "[{symbol: WETH, initial_price: 1}, {symbol: WETH, initial_price: 1}]",
            "[{symbol: WETH, initial_price: 1, decimals: -1}]",
            "[{symbol: WETH, initial_price: 1, initial_balance: -5}]",
            "[not-a-mapping]",
        ],
    )
    def test_rejected_collateral(self, tmp_path: Path, collateral: str) -> None:
        path = _write(tmp_path, f"networks:\n  local:\n    collateral: {collateral}\n")
        with pytest.raises(ConfigError):
            load_network_config("local", path)

    def test_non_positive_timeout(self, tmp_path: Path) -> None:
        path = _write(tmp_path, """\
            networks:
              local:
                oracle_timeout_seconds: 0
                collateral:
                  - symbol: WETH
                    initial_price: 1
            """)
        with pytest.raises(ConfigError, match="oracle_timeout_seconds"):
            load_network_config("local", path)

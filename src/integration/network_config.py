"""Network configuration loader: reads networks.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from ..core.oracle import ORACLE_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

DEFAULT_NETWORK = "anvil"
NETWORK_ENV_VAR = "DSC_NETWORK"


class ConfigError(ValueError):
    """The configuration file is missing, malformed, or inconsistent."""


# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CollateralConfig:
    symbol: str
    name: str = ""
    decimals: int = 18
    feed_decimals: int = 8
    initial_price: int = 0
    initial_balance: int = 0


@dataclass(frozen=True)
class NetworkConfig:
    name: str
    chain_id: int = 31337
    oracle_timeout_seconds: int = ORACLE_TIMEOUT_SECONDS
    collateral: tuple[CollateralConfig, ...] = ()


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML -> dataclass builders
# ---------------------------------------------------------------------------


def _as_int(raw: dict[str, Any], key: str, default: int) -> int:
    value = raw.get(key, default)
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{key} must be an integer, got {value!r}") from exc


def _build_collateral(raw: list[dict[str, Any]]) -> tuple[CollateralConfig, ...]:
    assets: list[CollateralConfig] = []
    for c in raw:
        if not isinstance(c, dict):
            raise ConfigError(f"collateral entries must be mappings, got {c!r}")
        assets.append(
            CollateralConfig(
                symbol=str(c.get("symbol", "")),
                name=str(c.get("name", "")),
                decimals=_as_int(c, "decimals", 18),
                feed_decimals=_as_int(c, "feed_decimals", 8),
                initial_price=_as_int(c, "initial_price", 0),
                initial_balance=_as_int(c, "initial_balance", 0),
            )
        )
    return tuple(assets)


def _build_network(name: str, raw: dict[str, Any]) -> NetworkConfig:
    if not isinstance(raw, dict):
        raise ConfigError(f"network {name!r} must be a mapping")
    return NetworkConfig(
        name=name,
        chain_id=_as_int(raw, "chain_id", 31337),
        oracle_timeout_seconds=_as_int(raw, "oracle_timeout_seconds", ORACLE_TIMEOUT_SECONDS),
        collateral=_build_collateral(raw.get("collateral", []) or []),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def default_config_path() -> Path:
    # src/integration/network_config.py -> src/integration/networks.yaml
    return Path(__file__).resolve().parent / "networks.yaml"


def _load_raw(config_path: str | Path | None) -> dict[str, Any]:
    load_dotenv()

    path = Path(config_path) if config_path is not None else default_config_path()
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"{path}: top level must be a mapping")

    networks = raw.get("networks")
    if not isinstance(networks, dict) or not networks:
        raise ConfigError(f"{path}: no networks defined")
    return _interpolate_env(networks)


def list_networks(config_path: str | Path | None = None) -> list[str]:
    return sorted(_load_raw(config_path))


def load_network_config(name: str | None = None, config_path: str | Path | None = None) -> NetworkConfig:
    """Load and validate one network's configuration.

    Args:
        name: Network name. Defaults to ``$DSC_NETWORK`` or ``anvil``.
        config_path: Path to a networks YAML file. Defaults to the
            ``networks.yaml`` shipped beside this module.
    """
    networks = _load_raw(config_path)
    if name is None:
        name = os.environ.get(NETWORK_ENV_VAR) or DEFAULT_NETWORK
    if name not in networks:
        raise ConfigError(f"unknown network {name!r}; configured: {', '.join(sorted(networks))}")

    cfg = _build_network(name, networks[name] or {})
    _validate(cfg)
    logger.info("Network config %r loaded (%d collateral tokens)", name, len(cfg.collateral))
    return cfg


def _validate(cfg: NetworkConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.collateral:
        raise ConfigError(f"network {cfg.name!r} lists no collateral")
    if cfg.oracle_timeout_seconds <= 0:
        raise ConfigError(f"network {cfg.name!r}: oracle_timeout_seconds must be positive")

    seen: set[str] = set()
    for c in cfg.collateral:
        if not c.symbol:
            raise ConfigError(f"network {cfg.name!r}: collateral entry without a symbol")
        if c.symbol in seen:
            raise ConfigError(f"network {cfg.name!r}: duplicate collateral {c.symbol!r}")
        seen.add(c.symbol)
        if c.initial_price <= 0:
            raise ConfigError(f"collateral {c.symbol!r}: initial_price must be positive")
        if c.decimals < 0 or c.feed_decimals < 0:
            raise ConfigError(f"collateral {c.symbol!r}: decimals must be non-negative")
        if c.initial_balance < 0:
            raise ConfigError(f"collateral {c.symbol!r}: initial_balance must be non-negative")

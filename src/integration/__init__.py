"""
Collaborators and deployment bootstrap for the stablecoin engine
"""

from .deploy import Deployment, deploy_dsc_engine, deploy_network
from .network_config import CollateralConfig, ConfigError, NetworkConfig, list_networks, load_network_config
from .price_feed import MockPriceFeed
from .token import DecentralizedStableCoin, ERC20Token, MockERC20, TokenError

__all__ = [
    "Deployment",
    "deploy_dsc_engine",
    "deploy_network",
    "CollateralConfig",
    "ConfigError",
    "NetworkConfig",
    "list_networks",
    "load_network_config",
    "MockPriceFeed",
    "DecentralizedStableCoin",
    "ERC20Token",
    "MockERC20",
    "TokenError",
]

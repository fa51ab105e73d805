"""
State management for the stablecoin engine
"""

from .balances import ZERO_ADDRESS, Address, Amount, BalanceTable
from .chain import Chain

__all__ = [
    "ZERO_ADDRESS",
    "Address",
    "Amount",
    "BalanceTable",
    "Chain",
]

"""
State tables for the reward engine
"""

from .acl import AllowList
from .balances import BalanceTable
from .clock import BlockClock
from .participants import ParticipantTable

__all__ = [
    "AllowList",
    "BalanceTable",
    "BlockClock",
    "ParticipantTable",
]

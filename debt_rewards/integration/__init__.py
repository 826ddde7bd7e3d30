"""
Integration shell: vault, reward sources, and the serialized rewards engine.
"""

from .config import EngineConfig, config_from_mapping, load_config
from .dripper import Checkpointable, LinearDripper, RewardSource
from .rewards_engine import RewardsEngine
from .structured_logging import configure_logging, log_event
from .vault import CustodianVault

__all__ = [
    "Checkpointable",
    "CustodianVault",
    "EngineConfig",
    "LinearDripper",
    "RewardSource",
    "RewardsEngine",
    "config_from_mapping",
    "configure_logging",
    "load_config",
    "log_event",
]

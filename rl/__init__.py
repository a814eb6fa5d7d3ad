"""Reinforcement Learning module for the marble race.

This module provides a Gymnasium-compatible environment for training
RL agents to play one seat of the marble race with action masking.

Key components:
- MarbleRaceEnv: Core Gymnasium environment
- ObservationEncoder / ActionMapping / ActionMaskGenerator: tensor interfaces
- RewardCalculator: shaped per-step rewards
- PolicyStrategy: puts a policy in a seat next to the rule-based tiers
"""

from .config import (
    ObservationConfig,
    ActionSpaceConfig,
    RewardConfig,
    DEFAULT_OBS_CONFIG,
    DEFAULT_ACTION_CONFIG,
    DEFAULT_REWARD_CONFIG,
)
from .observation import ObservationEncoder
from .action_space import ActionMapping
from .action_masking import ActionMaskGenerator
from .reward import RewardCalculator, StepRewardInfo
from .marble_env import MarbleRaceEnv, make_marble_env
from .policy_strategy import PolicyStrategy, RandomMaskedPolicy

__all__ = [
    # Configuration
    "ObservationConfig",
    "ActionSpaceConfig",
    "RewardConfig",
    "DEFAULT_OBS_CONFIG",
    "DEFAULT_ACTION_CONFIG",
    "DEFAULT_REWARD_CONFIG",
    # Observation encoding
    "ObservationEncoder",
    # Action space
    "ActionMapping",
    # Action masking
    "ActionMaskGenerator",
    # Reward
    "RewardCalculator",
    "StepRewardInfo",
    # Environment
    "MarbleRaceEnv",
    "make_marble_env",
    # Policy seats
    "PolicyStrategy",
    "RandomMaskedPolicy",
]

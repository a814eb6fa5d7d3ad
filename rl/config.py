"""Configuration constants for the marble race RL environment.

This module defines all configuration values for observation encoding,
action space sizing, and reward shaping.
"""

from dataclasses import dataclass
from typing import ClassVar

from core.constants import (
    NUM_SEATS,
    MARBLES_PER_PLAYER,
    EXTENDED_HAND_SIZE,
    Rank,
    Zone,
)


@dataclass(frozen=True)
class ObservationConfig:
    """Configuration for observation tensor dimensions.

    All dimensions are fixed by the game rules, so observations have the
    same size on every track.
    """

    # Game dimensions
    NUM_SEATS: int = NUM_SEATS
    MARBLES_PER_PLAYER: int = MARBLES_PER_PLAYER
    MAX_HAND_SIZE: int = EXTENDED_HAND_SIZE

    # Categorical dimensions
    ZONES: int = len(Zone)  # home, track, safe
    RANKS: int = len(Rank)

    # Normalization caps for the turn counters
    MAX_LOOPS: int = 50
    MAX_ROUNDS: int = 300

    # Feature dimensions per component
    MARBLE_FEATURE_DIM: ClassVar[int] = 4  # zone one-hot (3) + progress (1)
    HAND_FEATURE_DIM: ClassVar[int] = 14  # rank counts (13) + hand size (1)
    GLOBAL_FEATURE_DIM: ClassVar[int] = 10  # starting seat (4) + hand sizes (4) + loop, round

    @property
    def marble_features_size(self) -> int:
        """Total size of marble features tensor."""
        return self.NUM_SEATS * self.MARBLES_PER_PLAYER * self.MARBLE_FEATURE_DIM

    @property
    def hand_features_size(self) -> int:
        """Total size of hand features tensor."""
        return self.HAND_FEATURE_DIM

    @property
    def global_features_size(self) -> int:
        """Total size of global state tensor."""
        return self.GLOBAL_FEATURE_DIM

    @property
    def total_observation_dim(self) -> int:
        """Total dimension of the flat observation tensor."""
        return (
            self.marble_features_size
            + self.hand_features_size
            + self.global_features_size
        )


@dataclass(frozen=True)
class ActionSpaceConfig:
    """Configuration for the discrete action space.

    Each hand slot owns a block of choices: advance marble 0-3, enter a
    marble from Home, or decline the move (still spending the card).
    """

    MAX_HAND_SIZE: int = EXTENDED_HAND_SIZE
    MARBLES_PER_PLAYER: int = MARBLES_PER_PLAYER

    @property
    def enter_choice(self) -> int:
        """Choice offset of ENTER within a slot block."""
        return self.MARBLES_PER_PLAYER

    @property
    def decline_choice(self) -> int:
        """Choice offset of declining within a slot block."""
        return self.enter_choice + 1

    @property
    def choices_per_slot(self) -> int:
        """Number of choices per hand slot."""
        return self.decline_choice + 1

    @property
    def total_actions(self) -> int:
        """Total number of discrete actions."""
        return self.MAX_HAND_SIZE * self.choices_per_slot


@dataclass
class RewardConfig:
    """Configuration for reward calculation.

    Default values reward race progress lightly and the final result
    heavily.
    """

    # Shaping rewards
    progress_reward: float = 0.01  # per step of race progress
    safe_zone_reward: float = 0.1  # per marble reaching its safe zone
    capture_reward: float = 0.2  # per opponent marble sent Home
    captured_penalty: float = -0.2  # per own marble sent Home

    # Terminal rewards
    win_reward: float = 1.0
    loss_penalty: float = -1.0

    # Penalties
    invalid_action_penalty: float = -1.0


# Default configuration instances
DEFAULT_OBS_CONFIG = ObservationConfig()
DEFAULT_ACTION_CONFIG = ActionSpaceConfig()
DEFAULT_REWARD_CONFIG = RewardConfig()

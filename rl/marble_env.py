"""Gymnasium environment for the marble race.

Provides a single-agent, turn-based interface for RL training with:
- One learning seat; the other three seats are played by strategies
- Observations from the learning seat's perspective
- Action masking for legal move enforcement
- An action_masks() method for maskable policy implementations
"""

from __future__ import annotations

import logging
from typing import Optional, Any, Sequence, Tuple, SupportsFloat, Union

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from core.config import GameConfig
from core.constants import NUM_SEATS, SkillLevel
from core.game_state import GameState
from engine.events import RecordingSink
from engine.game_engine import GameEngine
from engine.strategies import Strategy, create_strategy

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
from .reward import RewardCalculator

logger = logging.getLogger(__name__)

OpponentSpec = Union[Strategy, SkillLevel, str]


class MarbleRaceEnv(gym.Env):
    """Gymnasium environment for the marble race.

    This environment implements a single-agent, turn-based interface where:
    - The agent plays one seat; opponents and the teammate use strategies
    - Each step plays one card from the agent's hand and resolves its move
    - Other seats' turns run automatically between agent steps
    - Action masking ensures only legal actions are sampled

    Attributes:
        observation_space: Box space for flat observation tensor.
        action_space: Discrete space for all possible actions.
        metadata: Environment metadata including render modes.
    """

    metadata = {"render_modes": ["human", "ansi"], "render_fps": 1}

    def __init__(
        self,
        learning_seat: int = 0,
        opponents: Optional[Sequence[OpponentSpec]] = None,
        config: Optional[GameConfig] = None,
        render_mode: Optional[str] = None,
        obs_config: ObservationConfig = DEFAULT_OBS_CONFIG,
        action_config: ActionSpaceConfig = DEFAULT_ACTION_CONFIG,
        reward_config: RewardConfig = DEFAULT_REWARD_CONFIG,
        max_steps: int = 1000,
    ):
        """Initialize the marble race environment.

        Args:
            learning_seat: Seat (0-3) controlled by the agent.
            opponents: Strategies (or skill levels) for the other three seats
                in seat order. Defaults to the normal tier everywhere.
            config: Optional custom track. Uses the default track if None.
            render_mode: Rendering mode ("human", "ansi", or None).
            obs_config: Observation encoding configuration.
            action_config: Action space configuration.
            reward_config: Reward calculation configuration.
            max_steps: Agent steps before an episode is truncated.

        Raises:
            ValueError: If the seat or the number of opponents is wrong.
        """
        super().__init__()

        if not 0 <= learning_seat < NUM_SEATS:
            raise ValueError(f"Learning seat must be in 0..{NUM_SEATS - 1}, got {learning_seat}")
        if opponents is None:
            opponents = [SkillLevel.NORMAL] * (NUM_SEATS - 1)
        if len(opponents) != NUM_SEATS - 1:
            raise ValueError(f"Expected {NUM_SEATS - 1} opponents, got {len(opponents)}")

        self.learning_seat = learning_seat
        self.render_mode = render_mode
        self._config = config
        self._max_steps = max_steps

        other_seats = [s for s in range(NUM_SEATS) if s != learning_seat]
        self._strategies: dict[int, Strategy] = {
            seat: spec if isinstance(spec, Strategy) else create_strategy(spec)
            for seat, spec in zip(other_seats, opponents)
        }

        # Configuration
        self._obs_config = obs_config
        self._action_config = action_config
        self._reward_config = reward_config

        # Core components
        self._engine: Optional[GameEngine] = None
        self._recorder = RecordingSink()
        self._obs_encoder = ObservationEncoder(obs_config)
        self._action_mapping = ActionMapping(action_config)
        self._mask_generator = ActionMaskGenerator(self._action_mapping, action_config)
        self._reward_calculator = RewardCalculator(reward_config)

        # State tracking
        self._step_count: int = 0

        # Define spaces
        self.observation_space = spaces.Box(
            low=0.0,
            high=1.0,
            shape=(obs_config.total_observation_dim,),
            dtype=np.float32,
        )
        self.action_space = spaces.Discrete(action_config.total_actions)

    @property
    def strategies(self) -> dict[int, Strategy]:
        """Strategies playing the seats other than the learning seat."""
        return dict(self._strategies)

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[dict] = None,
    ) -> Tuple[np.ndarray, dict]:
        """Reset the environment to a new game.

        Args:
            seed: Random seed for reproducibility.
            options: Optional {"starting_seat": int}.

        Returns:
            Tuple of (observation, info).
        """
        super().reset(seed=seed)
        options = options or {}

        # Derive the deck seed from the env RNG so vectorized copies differ
        game_seed = int(self.np_random.integers(0, 2**31 - 1))

        self._engine = GameEngine(self._config, sinks=[self._recorder])
        self._engine.reset(seed=game_seed, starting_seat=options.get("starting_seat", 0))
        self._recorder.clear()
        self._step_count = 0

        self._advance_to_learner()

        return self._get_observation(), self._build_info()

    def step(
        self,
        action: int,
    ) -> Tuple[np.ndarray, SupportsFloat, bool, bool, dict]:
        """Play one card for the learning seat, then run the other seats.

        Args:
            action: Flat action index (0 to total_actions-1).

        Returns:
            Tuple of (observation, reward, terminated, truncated, info).
        """
        if self._engine is None:
            raise RuntimeError("Environment not initialized. Call reset() first.")

        self._step_count += 1
        engine = self._engine

        if engine.is_game_over() or not self._mask_generator.is_action_valid(action, self.action_masks()):
            # Invalid action - return penalty without touching the game
            info = self._build_info()
            info["invalid_action"] = True
            terminated = engine.is_game_over()
            return (
                self._get_observation(),
                self._reward_config.invalid_action_penalty,
                terminated,
                False,
                info,
            )

        prev_state = engine.state.clone()
        self._recorder.clear()

        view = engine.player_view(self.learning_seat)
        card, intent = self._action_mapping.index_to_action(int(action), view)
        engine.play_card(card)
        move = engine.apply_move(intent)
        if not engine.is_game_over():
            engine.next_turn()

        self._advance_to_learner()

        terminated = engine.is_game_over()
        truncated = not terminated and self._step_count >= self._max_steps
        if truncated:
            logger.debug("Episode truncated after %d steps", self._step_count)

        reward_info = self._reward_calculator.compute_reward_detailed(
            state=engine.state,
            prev_state=prev_state,
            seat=self.learning_seat,
            done=terminated,
            events=self._recorder.events,
        )

        info = self._build_info()
        info["card"] = str(card)
        info["move_applied"] = move.applied
        info["reward_breakdown"] = reward_info.__dict__

        return self._get_observation(), float(reward_info.total), terminated, truncated, info

    def _advance_to_learner(self) -> None:
        """Play the other seats' turns until the learning seat must act."""
        engine = self._engine
        if engine is None:
            return

        max_iterations = 100  # Safety limit
        for _ in range(max_iterations):
            if engine.is_game_over():
                return
            seat = engine.state.turn.current_player_idx
            if seat == self.learning_seat:
                if engine.state.get_player(seat).has_cards():
                    return
                engine.next_turn()
            else:
                engine.play_turn(self._strategies[seat])

        raise RuntimeError(
            f"Seat {self.learning_seat} did not get a turn within {max_iterations} turns"
        )

    def action_masks(self) -> np.ndarray:
        """Get action mask for maskable policies.

        Returns:
            Boolean array of shape (total_actions,) where True = valid action.
        """
        if self._engine is None:
            # Return all-invalid mask if not initialized
            return np.zeros(self._action_config.total_actions, dtype=np.bool_)

        view = self._engine.player_view(self.learning_seat)
        return self._mask_generator.generate_mask(view, game_over=self._engine.is_game_over())

    def _get_observation(self) -> np.ndarray:
        """Get observation tensor for the learning seat."""
        if self._engine is None:
            return np.zeros(self._obs_config.total_observation_dim, dtype=np.float32)
        return self._obs_encoder.encode(self._engine.state, self.learning_seat)

    def _build_info(self) -> dict[str, Any]:
        """Build info dictionary with game metadata."""
        if self._engine is None:
            return {}

        state = self._engine.state
        topology = state.topology
        return {
            "phase": state.phase.value,
            "loop": state.turn.loop_count,
            "round": state.turn.round_count,
            "current_player": state.turn.current_player_idx,
            "valid_action_count": int(np.sum(self.action_masks())),
            "progress": {
                p.seat: sum(
                    max(topology.progress(p.seat, m.zone, m.position), 0)
                    for m in state.registry.marbles_of(p.seat)
                )
                for p in state.players
            },
            "winning_team": state.turn.winning_team,
        }

    def render(self) -> Optional[str]:
        """Render the current state.

        Returns:
            String representation if render_mode is "ansi", None otherwise.
        """
        if self._engine is None:
            return None

        if self.render_mode == "human":
            print(self._engine.state)
            return None
        elif self.render_mode == "ansi":
            return str(self._engine.state)
        return None

    def close(self) -> None:
        """Clean up environment resources."""
        self._engine = None

    # -------------------------------------------------------------------------
    # Additional utility methods
    # -------------------------------------------------------------------------

    def get_state(self) -> Optional[GameState]:
        """Get the current game state (for debugging/visualization)."""
        if self._engine is None:
            return None
        return self._engine.state

    @property
    def engine(self) -> Optional[GameEngine]:
        return self._engine


def make_marble_env(
    learning_seat: int = 0,
    render_mode: Optional[str] = None,
    **kwargs,
) -> MarbleRaceEnv:
    """Factory function to create a MarbleRaceEnv.

    Args:
        learning_seat: Seat controlled by the agent.
        render_mode: Rendering mode.
        **kwargs: Additional arguments passed to MarbleRaceEnv.

    Returns:
        Configured MarbleRaceEnv instance.
    """
    return MarbleRaceEnv(learning_seat=learning_seat, render_mode=render_mode, **kwargs)

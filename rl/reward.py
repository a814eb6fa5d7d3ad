"""Reward calculation for the marble race RL environment.

Reward structure:
- +0.01 per step of race progress made by the learner's marbles
- +0.1 per learner marble reaching its safe zone
- +0.2 per opponent marble the learner sends Home
- -0.2 per learner marble sent Home by anyone
- Terminal: +1.0 if the learner's team wins, -1.0 if the other team wins
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, TYPE_CHECKING

from core.constants import Zone
from engine.events import GameEvent, MarbleMoved, MarbleCaptured
from .config import RewardConfig, DEFAULT_REWARD_CONFIG

if TYPE_CHECKING:
    from core.game_state import GameState


@dataclass
class StepRewardInfo:
    """Detailed breakdown of rewards for a single step.

    Useful for debugging and understanding agent behavior.
    """
    progress_reward: float = 0.0
    safe_zone_reward: float = 0.0
    capture_reward: float = 0.0
    captured_penalty: float = 0.0
    terminal_reward: float = 0.0

    @property
    def total(self) -> float:
        """Total reward for this step."""
        return (
            self.progress_reward
            + self.safe_zone_reward
            + self.capture_reward
            + self.captured_penalty
            + self.terminal_reward
        )


class RewardCalculator:
    """Calculates rewards for RL training.

    Compares the learner's marbles before and after a step, and reads the
    events emitted in between to attribute captures to their mover.
    """

    def __init__(self, config: RewardConfig = DEFAULT_REWARD_CONFIG):
        """Initialize the reward calculator.

        Args:
            config: Reward configuration with reward values.
        """
        self.config = config

    def compute_reward(
        self,
        state: "GameState",
        prev_state: "GameState",
        seat: int,
        done: bool,
        events: Optional[Sequence[GameEvent]] = None,
    ) -> float:
        """Compute reward for a seat after a step.

        Args:
            state: Current game state after the step.
            prev_state: Game state before the step.
            seat: The learning seat.
            done: Whether the game has ended.
            events: Events emitted during the step, in order.

        Returns:
            Total reward for this step.
        """
        return self.compute_reward_detailed(state, prev_state, seat, done, events).total

    def compute_reward_detailed(
        self,
        state: "GameState",
        prev_state: "GameState",
        seat: int,
        done: bool,
        events: Optional[Sequence[GameEvent]] = None,
    ) -> StepRewardInfo:
        """Compute detailed reward breakdown for a seat.

        Args:
            state: Current game state after the step.
            prev_state: Game state before the step.
            seat: The learning seat.
            done: Whether the game has ended.
            events: Events emitted during the step, in order.

        Returns:
            StepRewardInfo with detailed reward breakdown.
        """
        info = StepRewardInfo()
        info.progress_reward = self._compute_progress_reward(state, prev_state, seat)
        info.safe_zone_reward = self._compute_safe_zone_reward(state, prev_state, seat)

        if events:
            captures, captured = self._count_captures(state, seat, events)
            info.capture_reward = captures * self.config.capture_reward
            info.captured_penalty = captured * self.config.captured_penalty

        if done:
            info.terminal_reward = self._compute_terminal_reward(state, seat)

        return info

    def _compute_progress_reward(
        self,
        state: "GameState",
        prev_state: "GameState",
        seat: int,
    ) -> float:
        """Reward forward progress; marbles sent Home are left to the capture penalty."""
        topology = state.topology
        delta = 0
        for marble in state.registry.marbles_of(seat):
            if marble.is_home():
                continue
            before = prev_state.registry.get(seat, marble.index)
            now = topology.progress(seat, marble.zone, marble.position)
            prev = topology.progress(seat, before.zone, before.position)
            delta += now - max(prev, 0)
        return delta * self.config.progress_reward

    def _compute_safe_zone_reward(
        self,
        state: "GameState",
        prev_state: "GameState",
        seat: int,
    ) -> float:
        now = sum(1 for m in state.registry.marbles_of(seat) if m.zone == Zone.SAFE)
        prev = sum(1 for m in prev_state.registry.marbles_of(seat) if m.zone == Zone.SAFE)
        if now > prev:
            return (now - prev) * self.config.safe_zone_reward
        return 0.0

    def _count_captures(
        self,
        state: "GameState",
        seat: int,
        events: Sequence[GameEvent],
    ) -> tuple[int, int]:
        """Count opponent marbles the seat captured and its own marbles lost.

        A MarbleCaptured event is attributed to the most recent MarbleMoved.
        """
        teammates = set(state.topology.teammates(seat))
        captures = 0
        captured = 0
        mover: Optional[int] = None
        for event in events:
            if isinstance(event, MarbleMoved):
                mover = event.seat
            elif isinstance(event, MarbleCaptured):
                if event.seat == seat:
                    captured += 1
                elif mover == seat and event.seat not in teammates:
                    captures += 1
        return captures, captured

    def _compute_terminal_reward(self, state: "GameState", seat: int) -> float:
        """Win/loss reward from the learner's team perspective.

        A game that ended without a winner scores zero.
        """
        winner = state.turn.winning_team
        if winner is None:
            return 0.0
        if winner == state.topology.team_of(seat):
            return self.config.win_reward
        return self.config.loss_penalty

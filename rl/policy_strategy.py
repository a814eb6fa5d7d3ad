"""Strategies driven by a policy over the flat action space.

Lets a trained (or random) policy take a seat in a GameDriver game next
to the rule-based tiers.
"""

from __future__ import annotations

from typing import Any, Callable, ClassVar, Optional, TYPE_CHECKING

import numpy as np

from core.cards import Card
from core.constants import SkillLevel
from engine.strategies.base import Strategy
from .config import ActionSpaceConfig, DEFAULT_ACTION_CONFIG, ObservationConfig, DEFAULT_OBS_CONFIG
from .observation import ObservationEncoder
from .action_space import ActionMapping
from .action_masking import ActionMaskGenerator

if TYPE_CHECKING:
    from engine.game_engine import MoveIntent
    from engine.strategies.view import PlayerView


PolicyFn = Callable[[np.ndarray, np.ndarray], int]


class RandomMaskedPolicy:
    """Uniformly random policy over the legal actions."""

    def __init__(self, seed: Optional[int] = None):
        self._rng = np.random.default_rng(seed)

    def __call__(self, obs: np.ndarray, mask: np.ndarray) -> int:
        return int(self._rng.choice(np.flatnonzero(mask)))


class PolicyStrategy(Strategy):
    """Seat strategy that asks a policy for one joint (card, move) action.

    The policy picks the card and the move together in choose_card();
    choose_move() hands back the move decided there.
    """

    skill_level: ClassVar[SkillLevel] = SkillLevel.PRO

    def __init__(
        self,
        policy: PolicyFn,
        obs_config: ObservationConfig = DEFAULT_OBS_CONFIG,
        action_config: ActionSpaceConfig = DEFAULT_ACTION_CONFIG,
        name: str = "policy",
    ):
        """Initialize the policy strategy.

        Args:
            policy: Callable mapping (observation, action mask) to an action index.
            obs_config: Observation encoding configuration.
            action_config: Action space configuration.
            name: Display name.
        """
        self.policy = policy
        self._name = name
        self._encoder = ObservationEncoder(obs_config)
        self._mapping = ActionMapping(action_config)
        self._mask_generator = ActionMaskGenerator(self._mapping, action_config)
        self._pending: Optional[tuple[Card, Optional[MoveIntent]]] = None

    @classmethod
    def from_model(cls, model: Any, deterministic: bool = True, **kwargs) -> "PolicyStrategy":
        """Wrap a model exposing predict(obs, action_masks=..., deterministic=...)."""

        def policy(obs: np.ndarray, mask: np.ndarray) -> int:
            action, _ = model.predict(obs, action_masks=mask, deterministic=deterministic)
            return int(action)

        return cls(policy, **kwargs)

    @property
    def name(self) -> str:
        return self._name

    def choose_card(self, view: PlayerView) -> Card:
        obs = self._encoder.encode_view(view)
        mask = self._mask_generator.generate_mask(view)

        action = int(self.policy(obs, mask))
        if not self._mask_generator.is_action_valid(action, mask):
            raise RuntimeError(f"Policy chose masked action {action} for seat {view.seat}")

        self._pending = self._mapping.index_to_action(action, view)
        return self._pending[0]

    def choose_move(self, view: PlayerView, card: Card) -> Optional[MoveIntent]:
        if self._pending is None or self._pending[0] != card:
            raise RuntimeError(f"No move decided for {card}; choose_card() must come first")
        _, intent = self._pending
        self._pending = None
        return intent

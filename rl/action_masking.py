"""Action masking for the marble race RL environment.

Generates boolean masks indicating which actions are legal for a seat.
Maskable policies use them to ensure only legal actions are sampled.
"""

from __future__ import annotations

import numpy as np
from typing import TYPE_CHECKING

from .config import ActionSpaceConfig, DEFAULT_ACTION_CONFIG

if TYPE_CHECKING:
    from engine.strategies.view import PlayerView
    from .action_space import ActionMapping


class ActionMaskGenerator:
    """Generates action masks from the engine's legal moves.

    The mask is a boolean array of shape (total_actions,) where True
    indicates the action at that index is valid. Declining is legal for
    every held card, so a seat holding cards always has an action.
    """

    def __init__(
        self,
        action_mapping: "ActionMapping",
        config: ActionSpaceConfig = DEFAULT_ACTION_CONFIG,
    ):
        self.action_mapping = action_mapping
        self.config = config

    def generate_mask(self, view: "PlayerView", game_over: bool = False) -> np.ndarray:
        """Generate boolean mask for the seat behind a view.

        Args:
            view: The acting seat's view.
            game_over: Whether the game has already been decided.

        Returns:
            Boolean numpy array of shape (total_actions,) where True = valid.

        Raises:
            RuntimeError: If the seat holds no cards in a running game, or
                the engine offers a move the action space cannot express.
        """
        mask = np.zeros(self.config.total_actions, dtype=np.bool_)

        if not game_over:
            for slot, card in enumerate(view.hand[: self.config.MAX_HAND_SIZE]):
                mask[self.action_mapping.action_to_index(slot, None)] = True
                for intent in view.valid_moves(card):
                    try:
                        idx = self.action_mapping.action_to_index(slot, intent)
                    except ValueError as e:
                        raise RuntimeError(
                            f"Legal move {intent} has no ActionMapping entry.\n"
                            "The action space is inconsistent with the game engine."
                        ) from e
                    mask[idx] = True

        if not mask.any():
            if game_over:
                # Terminal state: allow declining slot 0 so the policy has a legal action
                mask[self.action_mapping.action_to_index(0, None)] = True
            else:
                raise RuntimeError(
                    f"Seat {view.seat} has no cards to act with in a running game."
                )

        return mask

    def get_valid_action_indices(self, mask: np.ndarray) -> np.ndarray:
        return np.where(mask)[0]

    def mask_to_logits_mask(self, mask: np.ndarray) -> np.ndarray:
        """Convert boolean mask to logits mask.

        Valid actions → 0.0
        Invalid actions → -1e8
        """
        logits_mask = np.full(mask.shape, -1e8, dtype=np.float32)
        logits_mask[mask] = 0.0
        return logits_mask

    def count_valid_actions(self, mask: np.ndarray) -> int:
        return int(mask.sum())

    def is_action_valid(self, action_idx: int, mask: np.ndarray) -> bool:
        return 0 <= action_idx < len(mask) and bool(mask[action_idx])

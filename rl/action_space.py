"""Action space mapping for the marble race RL environment.

Provides bidirectional mapping between flat action indices (for neural networks)
and (card, move) pairs (for the game engine).
"""

from __future__ import annotations

from typing import Optional, TYPE_CHECKING

from core.cards import Card
from core.constants import MoveKind
from engine.game_engine import MoveIntent
from .config import ActionSpaceConfig, DEFAULT_ACTION_CONFIG

if TYPE_CHECKING:
    from engine.strategies.view import PlayerView


class ActionMapping:
    """Bidirectional mapping between flat action indices and turn decisions.

    An index names a hand slot and a choice within it:

        index = slot * choices_per_slot + choice

    where choice 0-3 advances that marble, the enter choice brings the
    lowest-index Home marble onto the base and the decline choice spends
    the card without moving.
    """

    def __init__(self, config: ActionSpaceConfig = DEFAULT_ACTION_CONFIG):
        self.config = config

    def index_to_action(
        self, action_idx: int, view: PlayerView
    ) -> tuple[Card, Optional[MoveIntent]]:
        """Convert flat action index to the card to play and its move.

        Args:
            action_idx: Flat action index (0 to total_actions-1).
            view: The acting seat's view (needed for its hand and marbles).

        Returns:
            Tuple of (card, intent); intent is None for a declined move.

        Raises:
            ValueError: If the index is out of range, names an empty hand
                slot or asks to enter with no marble at Home.
        """
        if not (0 <= action_idx < self.config.total_actions):
            raise ValueError(f"Action index {action_idx} out of range")

        slot, choice = divmod(action_idx, self.config.choices_per_slot)
        hand = view.hand
        if slot >= len(hand):
            raise ValueError(f"Hand slot {slot} is empty (hand holds {len(hand)} cards)")
        card = hand[slot]

        if choice == self.config.decline_choice:
            return card, None

        if choice == self.config.enter_choice:
            home = [m.index for m in view.own_marbles() if m.is_home()]
            if not home:
                raise ValueError(f"Seat {view.seat} has no marble at Home to enter")
            return card, MoveIntent(MoveKind.ENTER, min(home))

        return card, MoveIntent(MoveKind.ADVANCE, choice)

    def action_to_index(self, slot: int, intent: Optional[MoveIntent]) -> int:
        """Convert a hand slot and move to a flat action index.

        Args:
            slot: Position of the card in the hand.
            intent: The move, or None to decline.

        Returns:
            Flat action index.

        Raises:
            ValueError: If the slot or marble index is out of range.
        """
        if not (0 <= slot < self.config.MAX_HAND_SIZE):
            raise ValueError(f"Hand slot {slot} out of range")

        if intent is None:
            choice = self.config.decline_choice
        elif intent.kind == MoveKind.ENTER:
            choice = self.config.enter_choice
        else:
            if not (0 <= intent.marble_index < self.config.MARBLES_PER_PLAYER):
                raise ValueError(f"Invalid marble index: {intent.marble_index}")
            choice = intent.marble_index

        return slot * self.config.choices_per_slot + choice

    def slot_range(self, slot: int) -> tuple[int, int]:
        """Get the index range (start, end) owned by a hand slot."""
        start = slot * self.config.choices_per_slot
        return (start, start + self.config.choices_per_slot)

    @property
    def total_actions(self) -> int:
        """Total number of actions in the space."""
        return self.config.total_actions

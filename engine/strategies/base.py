"""Strategy capability: how a seat picks its card and its move."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar, Optional, TYPE_CHECKING

from core.cards import Card
from core.constants import SkillLevel

if TYPE_CHECKING:
    from engine.game_engine import MoveIntent
    from .view import PlayerView


class Strategy(ABC):
    """Abstract base class for the decision maker of one seat.

    Implementations must be swappable without engine changes: the engine
    only calls choose_card() and then choose_move() once per turn.
    """

    skill_level: ClassVar[SkillLevel]

    @property
    def name(self) -> str:
        """Display name of the strategy."""
        return self.skill_level.value

    @abstractmethod
    def choose_card(self, view: PlayerView) -> Card:
        """Pick a card from the hand (never called with an empty hand).

        Args:
            view: Read-only view of the game for this seat.

        Returns:
            A card held by the seat.
        """
        pass

    @abstractmethod
    def choose_move(self, view: PlayerView, card: Card) -> Optional[MoveIntent]:
        """Pick the move for the card just played.

        Args:
            view: Read-only view of the game for this seat.
            card: The card that was played (already discarded).

        Returns:
            The requested move, or None to decline.
        """
        pass

    def __str__(self) -> str:
        return f"{type(self).__name__}({self.name})"

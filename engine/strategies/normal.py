"""Normal tier: gets marbles out first, otherwise plays its biggest card."""

from __future__ import annotations

from typing import Optional, TYPE_CHECKING

from core.cards import Card
from core.constants import SkillLevel, MoveKind

from .analysis import entry_cards, has_marbles_on_board, highest_card
from .base import Strategy

if TYPE_CHECKING:
    from engine.game_engine import MoveIntent
    from .view import PlayerView


class NormalStrategy(Strategy):
    """Gets marbles out first, otherwise plays its biggest card.

    Card choice:
        1. An Ace or King when no marble is on the board.
        2. An Ace or King when the base is free.
        3. Otherwise the card with the most steps.

    Move choice: enter a marble when possible, else the first marble that
    can move.
    """

    skill_level = SkillLevel.NORMAL

    def choose_card(self, view: PlayerView) -> Card:
        entries = entry_cards(view)
        if entries and (not has_marbles_on_board(view) or view.can_enter()):
            return entries[0]
        return highest_card(view)

    def choose_move(self, view: PlayerView, card: Card) -> Optional[MoveIntent]:
        moves = view.valid_moves(card)
        for kind in (MoveKind.ENTER, MoveKind.ADVANCE):
            for move in moves:
                if move.kind == kind:
                    return move
        return None

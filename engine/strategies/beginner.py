"""Beginner tier: plays the first card and the first marble that moves."""

from __future__ import annotations

from typing import Optional, TYPE_CHECKING

from core.cards import Card
from core.constants import SkillLevel, MoveKind

from .analysis import marble_on_base
from .base import Strategy

if TYPE_CHECKING:
    from engine.game_engine import MoveIntent
    from .view import PlayerView


class BeginnerStrategy(Strategy):
    """Plays the first card in hand.

    Moves, in order of preference: the marble standing on the base, any
    other marble on the board (lowest index first), a new marble out of
    Home. Declines if nothing can move.
    """

    skill_level = SkillLevel.BEGINNER

    def choose_card(self, view: PlayerView) -> Card:
        return view.hand[0]

    def choose_move(self, view: PlayerView, card: Card) -> Optional[MoveIntent]:
        moves = view.valid_moves(card)
        advances = [m for m in moves if m.kind == MoveKind.ADVANCE]

        on_base = marble_on_base(view)
        if on_base is not None:
            for move in advances:
                if move.marble_index == on_base.index:
                    return move

        if advances:
            return advances[0]

        return next((m for m in moves if m.kind == MoveKind.ENTER), None)

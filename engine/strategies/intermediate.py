"""Intermediate tier: priority list over entering, scoring and capturing."""

from __future__ import annotations

from typing import Optional, TYPE_CHECKING

from core.cards import Card
from core.constants import SkillLevel, Zone

from .analysis import (
    MoveOption,
    move_options,
    score_option,
    best_option,
    first_option,
    entry_cards,
    has_marbles_on_board,
)
from .base import Strategy

if TYPE_CHECKING:
    from engine.game_engine import MoveIntent
    from .view import PlayerView

# Penalty for a card that cannot move anything
WASTED_CARD_SCORE = -10_000


class IntermediateStrategy(Strategy):
    """Works down a fixed priority list.

    Card choice:
        1. An Ace or King when no marble is on the board.
        2. A card that brings a marble into its safe zone.
        3. A card that captures an opponent.
        4. The card whose best move scores highest.

    Move choice: enter a marble, then reach the safe zone, then capture an
    opponent, then advance inside the safe zone, then move the marble
    furthest along the race.
    """

    skill_level = SkillLevel.INTERMEDIATE

    def choose_card(self, view: PlayerView) -> Card:
        entries = entry_cards(view)
        if entries and not has_marbles_on_board(view):
            return entries[0]

        options = {card: move_options(view, card) for card in view.hand}

        for card, card_options in options.items():
            if any(o.enters_safe_zone for o in card_options):
                return card

        for card, card_options in options.items():
            if any(o.captures_opponent for o in card_options):
                return card

        def card_score(card: Card) -> int:
            best = best_option(options[card])
            return score_option(best) if best is not None else WASTED_CARD_SCORE

        best_card = view.hand[0]
        for card in view.hand[1:]:
            if card_score(card) > card_score(best_card):
                best_card = card
        return best_card

    def choose_move(self, view: PlayerView, card: Card) -> Optional[MoveIntent]:
        options = move_options(view, card)
        if not options:
            return None

        priorities = (
            lambda o: o.is_entry,
            lambda o: o.enters_safe_zone,
            lambda o: o.captures_opponent,
            lambda o: o.marble.zone == Zone.SAFE,
        )
        for predicate in priorities:
            option = first_option(options, predicate)
            if option is not None:
                return option.intent

        furthest = best_option(options, key=_furthest_along(view))
        return furthest.intent


def _furthest_along(view: PlayerView):
    def key(option: MoveOption) -> int:
        return view.progress(option.marble)
    return key

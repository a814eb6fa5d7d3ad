"""Pro tier: plans around the safe zone and the backward shortcut."""

from __future__ import annotations

from typing import Optional, TYPE_CHECKING

from core.cards import Card
from core.constants import SkillLevel

from .analysis import (
    move_options,
    score_option,
    best_option,
    entry_cards,
    has_marbles_home,
    marble_on_base,
    distance_to_safe_zone,
)
from .base import Strategy

if TYPE_CHECKING:
    from engine.game_engine import MoveIntent
    from .view import PlayerView

# Marbles this many steps or fewer from their zone entry are "close"
CLOSE_TO_SAFE_ZONE = 10


class ProStrategy(Strategy):
    """Plans around the safe zone and the backward shortcut.

    Card choice:
        1. A backward card when a marble stands on the base: moving back
           from the base skips the own safe zone and lands just before it.
        2. The best card for a marble close to its safe zone.
        3. An Ace or King when the base is free and marbles wait in Home.
        4. A card that captures an opponent.
        5. The card whose best move scores highest.

    Move choice: the highest scoring move, which ranks reaching the safe
    zone above everything else.
    """

    skill_level = SkillLevel.PRO

    def choose_card(self, view: PlayerView) -> Card:
        options = {card: move_options(view, card) for card in view.hand}

        on_base = marble_on_base(view)
        if on_base is not None:
            for card, card_options in options.items():
                if view.steps_for(card) < 0 and any(
                    o.marble.index == on_base.index and o.gain > 0 for o in card_options
                ):
                    return card

        close = set()
        for marble in view.own_marbles():
            distance = distance_to_safe_zone(view, marble)
            if distance is not None and distance <= CLOSE_TO_SAFE_ZONE:
                close.add(marble.index)
        if close:
            candidates = [
                o
                for card_options in options.values()
                for o in card_options
                if o.marble.index in close and o.gain > 0
            ]
            best = best_option(candidates)
            if best is not None:
                return best.card

        entries = entry_cards(view)
        if entries and has_marbles_home(view) and view.can_enter():
            return entries[0]

        for card, card_options in options.items():
            if any(o.captures_opponent for o in card_options):
                return card

        best = best_option(o for card_options in options.values() for o in card_options)
        if best is not None:
            return best.card
        return view.hand[0]

    def choose_move(self, view: PlayerView, card: Card) -> Optional[MoveIntent]:
        best = best_option(move_options(view, card), key=score_option)
        return best.intent if best is not None else None

"""Move analysis shared by the strategy tiers.

Strategies compose these helpers instead of inheriting them, so each tier
only states its priorities.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Iterable, TYPE_CHECKING

from core.cards import Card
from core.constants import Zone, MoveKind
from core.marble import Marble
from core.track import Cell

if TYPE_CHECKING:
    from engine.game_engine import MoveIntent
    from .view import PlayerView


# Scoring weights for ranking moves
PROGRESS_WEIGHT = 10
SAFE_ZONE_BONUS = 1000
CAPTURE_BONUS = 300
TEAMMATE_CAPTURE_PENALTY = 400
ENTRY_BONUS = 200


@dataclass(frozen=True)
class MoveOption:
    """A legal move together with what it would achieve.

    Attributes:
        card: Card the move is made with.
        intent: The move itself.
        marble: Copy of the marble before the move.
        to_zone: Zone after the move.
        to_position: Cell after the move.
        gain: Change in race progress (negative when moving backward).
        captures: Marbles (seat, index) the move would send Home.
        teammate_hit: Whether one of those marbles belongs to a teammate.
    """

    card: Card
    intent: MoveIntent
    marble: Marble
    to_zone: Zone
    to_position: Cell
    gain: int
    captures: tuple[tuple[int, int], ...] = ()
    teammate_hit: bool = False

    @property
    def is_entry(self) -> bool:
        return self.intent.kind == MoveKind.ENTER

    @property
    def enters_safe_zone(self) -> bool:
        return self.marble.zone != Zone.SAFE and self.to_zone == Zone.SAFE

    @property
    def captures_opponent(self) -> bool:
        return len(self.captures) > 0 and not self.teammate_hit


def move_options(view: PlayerView, card: Card) -> list[MoveOption]:
    """Every legal move for a card, with its consequences."""
    marbles = view.own_marbles()
    teammates = set(view.teammates)
    options = []
    for intent in view.valid_moves(card):
        destination = view.destination(card, intent)
        if destination is None:
            continue
        to_zone, to_position = destination
        marble = marbles[intent.marble_index]

        victims: list[Marble] = []
        if to_zone == Zone.TRACK:
            victims = [
                m for m in view.marbles_at(to_position)
                if m.seat != view.seat and m.zone == Zone.TRACK
            ]

        gain = view.topology.progress(view.seat, to_zone, to_position) - view.progress(marble)
        options.append(
            MoveOption(
                card=card,
                intent=intent,
                marble=marble,
                to_zone=to_zone,
                to_position=to_position,
                gain=gain,
                captures=tuple(m.key for m in victims),
                teammate_hit=any(m.seat in teammates for m in victims),
            )
        )
    return options


def score_option(option: MoveOption) -> int:
    """Generic desirability of a move; higher is better."""
    score = option.gain * PROGRESS_WEIGHT
    if option.enters_safe_zone:
        score += SAFE_ZONE_BONUS
    if option.is_entry:
        score += ENTRY_BONUS
    if option.teammate_hit:
        score -= TEAMMATE_CAPTURE_PENALTY
    elif option.captures:
        score += CAPTURE_BONUS * len(option.captures)
    return score


def best_option(
    options: Iterable[MoveOption],
    key: Callable[[MoveOption], int] = score_option,
) -> Optional[MoveOption]:
    """Highest-ranked option; the earliest one wins ties."""
    best = None
    best_key = None
    for option in options:
        k = key(option)
        if best is None or k > best_key:
            best, best_key = option, k
    return best


def first_option(
    options: Iterable[MoveOption],
    predicate: Callable[[MoveOption], bool],
) -> Optional[MoveOption]:
    """First option matching a predicate."""
    return next((o for o in options if predicate(o)), None)


# -----------------------------------------------------------------------------
# Hand and board queries
# -----------------------------------------------------------------------------

def entry_cards(view: PlayerView) -> list[Card]:
    """Cards in hand that can bring a marble out of Home."""
    return [c for c in view.hand if view.step_table.can_enter(c)]


def has_marbles_on_board(view: PlayerView) -> bool:
    return any(not m.is_home() for m in view.own_marbles())


def has_marbles_home(view: PlayerView) -> bool:
    return any(m.is_home() for m in view.own_marbles())


def marble_on_base(view: PlayerView) -> Optional[Marble]:
    """This seat's marble standing on its base, if any."""
    base = view.base
    return next(
        (m for m in view.own_marbles() if m.zone == Zone.TRACK and m.position == base),
        None,
    )


def distance_to_safe_zone(view: PlayerView, marble: Marble) -> Optional[int]:
    """Forward steps until the marble reaches its zone entry; None if Home or Safe."""
    if marble.zone != Zone.TRACK:
        return None
    safe_start, _ = view.topology.safe_zone_range(view.seat)
    return view.topology.progress(view.seat, Zone.SAFE, safe_start) - view.progress(marble)


def highest_card(view: PlayerView) -> Card:
    """Card with the largest signed step count; the earliest one wins ties."""
    best = view.hand[0]
    for card in view.hand[1:]:
        if view.steps_for(card) > view.steps_for(best):
            best = card
    return best

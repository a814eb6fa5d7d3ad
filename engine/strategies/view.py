"""Read-only view of the game handed to strategies."""

from __future__ import annotations

import dataclasses
from typing import Optional, TYPE_CHECKING

from core.cards import Card, StepTable
from core.constants import Zone
from core.marble import Marble
from core.track import Cell, TrackTopology

if TYPE_CHECKING:
    from engine.game_engine import GameEngine, MoveIntent


class PlayerView:
    """What one seat may see and probe while deciding its turn.

    Marbles are returned as copies, so a strategy cannot move anything
    by mutating them. The view reads the live game, so it reflects the
    played card leaving the hand.
    """

    def __init__(self, engine: GameEngine, seat: int):
        self._engine = engine
        self.seat = seat

    # -------------------------------------------------------------------------
    # Static information
    # -------------------------------------------------------------------------

    @property
    def topology(self) -> TrackTopology:
        return self._engine.state.topology

    @property
    def step_table(self) -> StepTable:
        return self._engine.state.step_table

    @property
    def team(self) -> int:
        return self.topology.team_of(self.seat)

    @property
    def teammates(self) -> tuple[int, ...]:
        return self.topology.teammates(self.seat)

    @property
    def base(self) -> Cell:
        return self.topology.base(self.seat)

    # -------------------------------------------------------------------------
    # Visible state
    # -------------------------------------------------------------------------

    @property
    def hand(self) -> tuple[Card, ...]:
        """Cards this seat holds."""
        return tuple(self._engine.state.get_player(self.seat).hand)

    def hand_sizes(self) -> dict[int, int]:
        """Number of cards every seat holds."""
        return {p.seat: len(p.hand) for p in self._engine.state.players}

    def marbles_of(self, seat: int) -> list[Marble]:
        """Copies of a seat's marbles."""
        return [dataclasses.replace(m) for m in self._engine.state.registry.marbles_of(seat)]

    def own_marbles(self) -> list[Marble]:
        """Copies of this seat's marbles."""
        return self.marbles_of(self.seat)

    def all_marbles(self) -> list[Marble]:
        """Copies of every marble on the table."""
        return [dataclasses.replace(m) for m in self._engine.state.registry.all_marbles()]

    def marbles_at(self, cell: Cell) -> list[Marble]:
        """Copies of the marbles standing on a cell."""
        return [dataclasses.replace(m) for m in self._engine.state.registry.marbles_at(cell)]

    def progress(self, marble: Marble) -> int:
        """Race progress of a marble along its owner's route."""
        return self.topology.progress(marble.seat, marble.zone, marble.position)

    @property
    def loop_count(self) -> int:
        return self._engine.state.turn.loop_count

    @property
    def round_count(self) -> int:
        return self._engine.state.turn.round_count

    @property
    def starting_seat(self) -> int:
        return self._engine.state.turn.starting_player_idx

    # -------------------------------------------------------------------------
    # Move probing
    # -------------------------------------------------------------------------

    def steps_for(self, card: Card) -> int:
        return self.step_table.steps_for(card)

    def valid_moves(self, card: Card) -> list[MoveIntent]:
        """Legal moves for this seat with a card."""
        return self._engine.valid_moves(self.seat, card)

    def destination(self, card: Card, intent: MoveIntent) -> Optional[tuple[Zone, Cell]]:
        """Where a move would take its marble, None if illegal."""
        return self._engine.destination(self.seat, card, intent)

    def can_enter(self) -> bool:
        """Check if the base is free of this seat's own marbles."""
        return self._engine.resolver.can_enter(self.seat)

"""Marbles and the marble registry.

Each marble is one record holding both its zone and its position, so the
two can never disagree. The registry is the only writer of that record:
every state change during play goes through MarbleRegistry.commit(), which
enforces the board invariants, and saved games are loaded through
MarbleRegistry.restore().
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional

from .constants import Zone
from .errors import InvariantViolation
from .track import Cell, TrackTopology


@dataclass
class Marble:
    """A single marble.

    Attributes:
        seat: Seat of the owning player.
        index: Marble number within its owner (0-3); also its Home slot.
        zone: HOME, TRACK or SAFE.
        position: Cell index, or None while the marble is Home.
    """

    seat: int
    index: int
    zone: Zone = Zone.HOME
    position: Optional[Cell] = None

    @property
    def key(self) -> tuple[int, int]:
        """Stable identity of the marble: (seat, index)."""
        return (self.seat, self.index)

    def is_home(self) -> bool:
        """Check if the marble is in Home."""
        return self.zone == Zone.HOME

    def is_safe(self) -> bool:
        """Check if the marble is inside its safe zone."""
        return self.zone == Zone.SAFE

    def __str__(self) -> str:
        where = self.zone.value if self.position is None else f"{self.zone.value}@{self.position}"
        return f"Marble(seat={self.seat}, #{self.index}, {where})"


class MarbleRegistry:
    """Authoritative zone/position store for every marble on the table."""

    def __init__(self, topology: TrackTopology, marbles: dict[int, list[Marble]]):
        """Initialize the registry.

        Args:
            topology: Track geometry used to validate commits.
            marbles: Marbles of each seat, in marble-index order.
        """
        self.topology = topology
        self._marbles = marbles

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def marbles_of(self, seat: int) -> list[Marble]:
        """Marbles owned by a seat, in index order."""
        return self._marbles[seat]

    def all_marbles(self) -> Iterator[Marble]:
        """Iterate over every marble, seat by seat."""
        for seat in sorted(self._marbles):
            yield from self._marbles[seat]

    def get(self, seat: int, index: int) -> Marble:
        """Get a marble by owner seat and index.

        Raises:
            ValueError: If no such marble exists.
        """
        marbles = self._marbles.get(seat)
        if marbles is None or not 0 <= index < len(marbles):
            raise ValueError(f"No marble {index} for seat {seat}")
        return marbles[index]

    def owner_of(self, marble: Marble) -> int:
        """Seat owning a marble."""
        return marble.seat

    def is_home(self, marble: Marble) -> bool:
        """Check if a marble is in Home."""
        return marble.is_home()

    def position_of(self, marble: Marble) -> Cell:
        """Current cell of a marble.

        A Home marble reports its owner's base cell, for distance
        calculations only; it does not occupy the ring.
        """
        if marble.position is None:
            return self.topology.base(marble.seat)
        return marble.position

    def home_marbles(self, seat: int) -> list[Marble]:
        """Marbles of a seat still in Home."""
        return [m for m in self._marbles[seat] if m.is_home()]

    def marbles_at(self, cell: Cell) -> list[Marble]:
        """Marbles (any owner) standing on a cell."""
        return [m for m in self.all_marbles() if not m.is_home() and m.position == cell]

    def occupied_cells(self, seat: int, exclude: Optional[Cell] = None) -> set[Cell]:
        """Cells held by a seat's marbles on the board.

        Args:
            seat: The owning seat.
            exclude: A cell to leave out (the moving marble's own cell).
        """
        return {
            m.position
            for m in self._marbles[seat]
            if m.position is not None and m.position != exclude
        }

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def commit(self, marble: Marble, zone: Zone, position: Optional[Cell]) -> None:
        """Set a marble's zone and position during play.

        Raises:
            InvariantViolation: If the new state breaks a board invariant.
        """
        self._validate_commit(marble, zone, position)
        marble.zone = zone
        marble.position = position

    def restore(self, marble: Marble, zone: Zone, position: Optional[Cell]) -> None:
        """Place a marble as recorded in a saved game.

        Unlike commit(), the previous state of the marble is ignored, so a
        restored marble may start anywhere it could legally stand.

        Raises:
            InvariantViolation: If the placement itself breaks a board invariant.
        """
        self._validate_placement(marble, zone, position)
        marble.zone = zone
        marble.position = position

    def _validate_commit(self, marble: Marble, zone: Zone, position: Optional[Cell]) -> None:
        """Check a proposed state change against the board invariants."""
        if marble.zone == Zone.SAFE:
            if zone != Zone.SAFE:
                raise InvariantViolation(f"{marble} cannot leave its safe zone")
            if position is not None and marble.position is not None and position < marble.position:
                raise InvariantViolation(f"{marble} cannot move backward inside its safe zone")
        self._validate_placement(marble, zone, position)

    def _validate_placement(self, marble: Marble, zone: Zone, position: Optional[Cell]) -> None:
        """Check that a zone and position are a legal resting place for a marble."""
        if zone == Zone.HOME:
            if position is not None:
                raise InvariantViolation(f"Home marble cannot have a position ({position})")
            return

        if position is None:
            raise InvariantViolation(f"{zone.value} marble needs a position")

        if zone == Zone.SAFE and not self.topology.is_own_safe_zone(marble.seat, position):
            raise InvariantViolation(
                f"Cell {position} is not in seat {marble.seat}'s safe zone"
            )
        if zone == Zone.TRACK and not self.topology.is_ring_cell(position):
            raise InvariantViolation(f"Cell {position} is not a ring cell")

        for other in self._marbles[marble.seat]:
            if other is not marble and other.position == position:
                raise InvariantViolation(
                    f"Seat {marble.seat} already has a marble on cell {position}"
                )

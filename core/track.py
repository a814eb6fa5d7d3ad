"""Track topology for the marble race engine.

The track is static geometry:
- A ring of cells numbered 1..ring_length, wrapping from the last cell to 1
- One private 4-cell safe zone per seat, numbered inside the same space
- A base cell per seat where marbles leave Home
- A fixed team pairing of opposite seats

Cells inside any safe zone are never ring positions. The topology is
immutable; marble occupancy lives in the MarbleRegistry.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .constants import Zone, TEAMS, SAFE_ZONE_LENGTH


# Type alias for clarity
Cell = int


@dataclass(frozen=True)
class SeatLayout:
    """Per-seat cells on the track.

    Attributes:
        seat: Seat index (0-3).
        base: Ring cell where this seat's marbles appear when leaving Home.
        safe_start: First cell of the seat's safe zone (its entry).
        safe_end: Last cell of the seat's safe zone.
    """

    seat: int
    base: Cell
    safe_start: Cell
    safe_end: Cell

    @property
    def safe_cells(self) -> range:
        """All cells of this seat's safe zone, in walking order."""
        return range(self.safe_start, self.safe_end + 1)

    def contains(self, cell: Cell) -> bool:
        """Check if a cell lies inside this seat's safe zone."""
        return self.safe_start <= cell <= self.safe_end


@dataclass(frozen=True)
class TrackTopology:
    """Static geometry of the shared ring and the four safe zones.

    Attributes:
        ring_length: Number of cells in the numbering space (N).
        seats: Layout of each seat, indexed by seat number.
        teams: Seats grouped by team, indexed by team number.
    """

    ring_length: int
    seats: tuple[SeatLayout, ...]
    teams: tuple[tuple[int, ...], ...] = TEAMS
    _progress: dict[int, dict[Cell, int]] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    # -------------------------------------------------------------------------
    # Seat lookups
    # -------------------------------------------------------------------------

    @property
    def num_seats(self) -> int:
        """Number of seats at the table."""
        return len(self.seats)

    def seat(self, seat: int) -> SeatLayout:
        """Get the layout of a seat.

        Raises:
            ValueError: If the seat does not exist.
        """
        if not 0 <= seat < len(self.seats):
            raise ValueError(f"Invalid seat: {seat}")
        return self.seats[seat]

    def base(self, seat: int) -> Cell:
        """Ring cell where the seat's marbles leave Home."""
        return self.seat(seat).base

    def safe_zone_range(self, seat: int) -> tuple[Cell, Cell]:
        """First and last cell of the seat's safe zone."""
        layout = self.seat(seat)
        return layout.safe_start, layout.safe_end

    def approach_cell(self, seat: int) -> Cell:
        """Ring cell one step before the seat's safe zone."""
        return self.prev_cell(self.seat(seat).safe_start)

    # -------------------------------------------------------------------------
    # Safe zones
    # -------------------------------------------------------------------------

    def safe_zone_owner(self, cell: Cell) -> Optional[int]:
        """Seat owning the safe zone that contains a cell, or None on the ring."""
        for layout in self.seats:
            if layout.contains(cell):
                return layout.seat
        return None

    def is_own_safe_zone(self, seat: int, cell: Cell) -> bool:
        """Check if a cell lies inside the seat's own safe zone."""
        return self.seat(seat).contains(cell)

    def is_foreign_safe_zone(self, seat: int, cell: Cell) -> bool:
        """Check if a cell lies inside another seat's safe zone."""
        owner = self.safe_zone_owner(cell)
        return owner is not None and owner != seat

    def is_ring_cell(self, cell: Cell) -> bool:
        """Check if a cell is a regular ring position."""
        return 1 <= cell <= self.ring_length and self.safe_zone_owner(cell) is None

    def ring_cells(self) -> list[Cell]:
        """All ring positions in ascending order."""
        return [cell for cell in range(1, self.ring_length + 1) if self.is_ring_cell(cell)]

    def approach_window(self, seat: int, window: int) -> dict[Cell, int]:
        """Ring cells just before the seat's safe zone, mapped to their distance.

        Walks backward from the zone entry; the cell one step before the
        entry has distance 1. Stops early at a cell that is not on the ring.
        """
        cells: dict[Cell, int] = {}
        cell = self.seat(seat).safe_start
        for distance in range(1, window + 1):
            cell = self.prev_cell(cell)
            if not self.is_ring_cell(cell):
                break
            cells[cell] = distance
        return cells

    # -------------------------------------------------------------------------
    # Ring arithmetic
    # -------------------------------------------------------------------------

    def next_cell(self, cell: Cell) -> Cell:
        """Cell one step forward, wrapping from the last cell to 1."""
        return 1 if cell >= self.ring_length else cell + 1

    def prev_cell(self, cell: Cell) -> Cell:
        """Cell one step backward, wrapping from 1 to the last cell."""
        return self.ring_length if cell <= 1 else cell - 1

    # -------------------------------------------------------------------------
    # Teams
    # -------------------------------------------------------------------------

    def team_of(self, seat: int) -> int:
        """Team index of a seat.

        Raises:
            ValueError: If the seat belongs to no team.
        """
        for team_idx, members in enumerate(self.teams):
            if seat in members:
                return team_idx
        raise ValueError(f"Seat {seat} belongs to no team")

    def teammates(self, seat: int) -> tuple[int, ...]:
        """Other seats on the same team."""
        return tuple(s for s in self.teams[self.team_of(seat)] if s != seat)

    # -------------------------------------------------------------------------
    # Race progress
    # -------------------------------------------------------------------------

    def progress(self, seat: int, zone: Zone, position: Optional[Cell]) -> int:
        """Forward steps a marble has covered since leaving its base.

        Home marbles report -1. Ring cells behind the base (between the
        seat's own safe zone and its base) count as 0. Foreign safe zones
        count as one step each, matching how movement consumes them.
        """
        if zone == Zone.HOME or position is None:
            return -1
        table = self._progress_table(seat)
        return table.get(position, 0)

    def max_progress(self, seat: int) -> int:
        """Progress of a marble parked on the last cell of its safe zone."""
        return self._progress_table(seat)[self.seat(seat).safe_end]

    def _progress_table(self, seat: int) -> dict[Cell, int]:
        """Build (once) the progress of every cell on the seat's route."""
        if seat in self._progress:
            return self._progress[seat]

        layout = self.seat(seat)
        approach = self.approach_cell(seat)
        table: dict[Cell, int] = {layout.base: 0}
        cell = layout.base
        steps = 0
        while cell != approach:
            cell = self.next_cell(cell)
            owner = self.safe_zone_owner(cell)
            if owner is not None and owner != seat:
                cell = self.next_cell(self.seats[owner].safe_end)
            steps += 1
            table[cell] = steps
            if steps > self.ring_length:
                raise ValueError(f"Seat {seat} route never reaches its safe zone")

        for depth, safe_cell in enumerate(layout.safe_cells, start=1):
            table[safe_cell] = steps + depth

        self._progress[seat] = table
        return table

    def __str__(self) -> str:
        """Return a human-readable string representation."""
        zones = ", ".join(
            f"seat {s.seat}: base={s.base} safe={s.safe_start}-{s.safe_end}"
            for s in self.seats
        )
        return f"TrackTopology(ring={self.ring_length}, {zones})"


def make_seat_layout(seat: int, base: Cell, safe_start: Cell) -> SeatLayout:
    """Create a seat layout with a standard-length safe zone."""
    return SeatLayout(
        seat=seat,
        base=base,
        safe_start=safe_start,
        safe_end=safe_start + SAFE_ZONE_LENGTH - 1,
    )

"""Movement resolver for the marble race engine.

Turns a card's signed step count into a validated target cell. Steps are
walked one cell at a time because safe-zone entry, foreign-zone skipping
and own-marble blocking all depend on the cells crossed, not just on the
arithmetic offset.

An unchanged position is the resolver's way of saying "illegal move": it
never raises for a move that simply cannot be made.
"""

from __future__ import annotations

import logging
from typing import Optional

from core.constants import Zone, REDIRECT_APPROACH_WINDOW
from core.marble import Marble, MarbleRegistry
from core.track import Cell, TrackTopology

logger = logging.getLogger(__name__)


class MovementResolver:
    """Computes legal destinations for marbles on the board.

    The resolver reads occupancy from the registry but never mutates it;
    committing the result is the caller's job.
    """

    def __init__(self, topology: TrackTopology, registry: MarbleRegistry):
        """Initialize the resolver.

        Args:
            topology: Static track geometry.
            registry: Marble store used for own-marble blocking checks.
        """
        self.topology = topology
        self.registry = registry
        self._approach = {
            layout.seat: topology.approach_window(layout.seat, REDIRECT_APPROACH_WINDOW)
            for layout in topology.seats
        }

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def resolve(self, seat: int, current_position: Cell, steps: int) -> Cell:
        """Resolve a move of `steps` cells for one of a seat's marbles.

        Args:
            seat: Seat owning the moving marble.
            current_position: Cell the marble stands on (ring or own safe zone).
            steps: Signed step count; negative moves backward.

        Returns:
            The target cell. Equal to current_position if the move is illegal.
        """
        if steps == 0:
            return current_position
        if steps < 0:
            target = self._resolve_backward(seat, current_position, -steps)
        else:
            target = self._resolve_forward(seat, current_position, steps)

        logger.debug(
            "Seat %d: %d %+d -> %d%s",
            seat, current_position, steps, target,
            " (illegal)" if target == current_position else "",
        )
        return target

    def resolve_marble(self, marble: Marble, steps: int) -> Cell:
        """Resolve a move for a marble already on the board.

        Raises:
            ValueError: If the marble is still in Home.
        """
        if marble.position is None:
            raise ValueError(f"{marble} is in Home; it must enter before it can move")
        return self.resolve(marble.seat, marble.position, steps)

    def target_zone(self, seat: int, cell: Cell) -> Zone:
        """Zone a seat's marble is in when standing on a cell."""
        if self.topology.is_own_safe_zone(seat, cell):
            return Zone.SAFE
        return Zone.TRACK

    def can_enter(self, seat: int) -> bool:
        """Check if a marble of the seat may leave Home onto its base.

        Entry is blocked only by the seat's own marble on the base; other
        players' marbles there are captured.
        """
        return self.topology.base(seat) not in self.registry.occupied_cells(seat)

    def overshoot_redirect(
        self,
        seat: int,
        current_position: Cell,
        steps: int,
        occupied: set[Cell],
    ) -> Optional[Cell]:
        """Redirect a near-miss into the safe zone instead of passing it.

        Applies when the marble stands within the approach window before
        its own zone entry and the steps would carry it past the entry,
        except when they are an exact multiple of the distance to the
        entry. The marble lands `steps - distance` cells into the zone,
        at most 3, provided the cell is free of the seat's own marbles.

        Args:
            seat: Seat owning the moving marble.
            current_position: Ring cell the marble stands on.
            steps: Forward step count.
            occupied: Cells held by the seat's other marbles.

        Returns:
            The redirected safe-zone cell, or None to fall through to the
            normal step-by-step walk.
        """
        distance = self._approach[seat].get(current_position)
        if distance is None or steps <= distance or steps % distance == 0:
            return None

        layout = self.topology.seat(seat)
        target = min(
            layout.safe_start + min(steps - distance, REDIRECT_APPROACH_WINDOW),
            layout.safe_end,
        )
        if target in occupied:
            return None

        logger.debug(
            "Seat %d: redirect from %d with %d steps into safe cell %d",
            seat, current_position, steps, target,
        )
        return target

    # -------------------------------------------------------------------------
    # Forward movement
    # -------------------------------------------------------------------------

    def _resolve_forward(self, seat: int, current: Cell, steps: int) -> Cell:
        topology = self.topology
        layout = topology.seat(seat)
        occupied = self.registry.occupied_cells(seat, exclude=current)

        if layout.contains(current):
            return self._advance_in_safe_zone(seat, current, steps, occupied)

        redirect = self.overshoot_redirect(seat, current, steps, occupied)
        if redirect is not None:
            return redirect

        position = current
        remaining = steps
        while remaining > 0:
            nxt = topology.next_cell(position)

            if nxt == layout.safe_start:
                if nxt in occupied:
                    break
                position = nxt
                remaining -= 1
                if remaining > 0:
                    position = self._advance_in_safe_zone(seat, position, remaining, occupied)
                break

            owner = topology.safe_zone_owner(nxt)
            if owner is not None and owner != seat:
                # Whole foreign zone counts as one step
                nxt = topology.next_cell(topology.seat(owner).safe_end)

            if nxt in occupied:
                break
            position = nxt
            remaining -= 1

        if position in occupied or topology.is_foreign_safe_zone(seat, position):
            return current
        return position

    def _advance_in_safe_zone(
        self, seat: int, position: Cell, steps: int, occupied: set[Cell]
    ) -> Cell:
        """Walk inside the own safe zone; clamp at its end, stop before own marbles."""
        end = self.topology.seat(seat).safe_end
        for _ in range(steps):
            if position >= end:
                break
            nxt = position + 1
            if nxt in occupied:
                break
            position = nxt
        return position

    # -------------------------------------------------------------------------
    # Backward movement
    # -------------------------------------------------------------------------

    def _resolve_backward(self, seat: int, current: Cell, magnitude: int) -> Cell:
        topology = self.topology
        if topology.is_own_safe_zone(seat, current):
            return current

        occupied = self.registry.occupied_cells(seat, exclude=current)
        position = current
        for _ in range(magnitude):
            prev = topology.prev_cell(position)
            owner = topology.safe_zone_owner(prev)
            if owner is not None:
                # Safe zones are never ring positions, own zone included
                prev = topology.prev_cell(topology.seat(owner).safe_start)
            if prev in occupied:
                break
            position = prev
        return position

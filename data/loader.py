"""Track data loader for the marble race engine.

Loads and validates track geometry and the card-to-steps table from JSON
files, converting them into GameConfig instances ready for use in the game.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
import sys

from core.constants import Rank, NUM_SEATS, SAFE_ZONE_LENGTH
from core.cards import StepTable
from core.config import GameConfig
from core.track import SeatLayout, TrackTopology


def resource_path(relative_path: str) -> Path:
    """
    Get absolute path to a resource, works for dev and PyInstaller exe.
    """
    if hasattr(sys, "_MEIPASS"):
        # PyInstaller bundles resources in a temporary folder
        return Path(sys._MEIPASS) / "data" / relative_path

    # Dev mode: look relative to this file (in the data/ directory)
    return Path(__file__).parent / relative_path


class TrackLoadError(Exception):
    """Raised when track loading or validation fails."""
    pass


class TrackLoader:
    """Loads and validates track data from JSON files."""

    EXPECTED_SEATS = NUM_SEATS
    EXPECTED_SAFE_ZONE_LENGTH = SAFE_ZONE_LENGTH

    def __init__(self, strict: bool = True):
        """Initialize the loader.

        Args:
            strict: If True, require standard-length safe zones. Set to
                    False for small custom boards used in tests.
        """
        self.strict = strict

    def load_from_file(self, file_path: str | Path) -> GameConfig:
        """Load a track from a JSON file.

        Args:
            file_path: Path to the JSON track file.

        Returns:
            A GameConfig with the loaded topology and step table.

        Raises:
            TrackLoadError: If the file cannot be read or parsed.
            TrackLoadError: If validation fails.
        """
        path = Path(file_path)

        if not path.exists():
            raise TrackLoadError(f"Track file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise TrackLoadError(f"Invalid JSON in track file: {e}")
        except IOError as e:
            raise TrackLoadError(f"Error reading track file: {e}")

        return self.load_from_dict(data)

    def load_from_dict(self, data: dict[str, Any]) -> GameConfig:
        """Load a track from a dictionary.

        Args:
            data: Dictionary with 'ring_length', 'seats', 'teams' and
                  'card_steps' keys ('entry_ranks' is optional).

        Returns:
            A GameConfig with the loaded topology and step table.

        Raises:
            TrackLoadError: If validation fails.
        """
        self._validate_structure(data)

        ring_length = data["ring_length"]
        if not isinstance(ring_length, int) or ring_length <= 0:
            raise TrackLoadError(f"Invalid ring length: {ring_length}")

        layouts = sorted(
            (self._create_seat(seat_data, ring_length) for seat_data in data["seats"]),
            key=lambda layout: layout.seat,
        )
        if [layout.seat for layout in layouts] != list(range(self.EXPECTED_SEATS)):
            raise TrackLoadError(
                f"Seats must be numbered 0..{self.EXPECTED_SEATS - 1}, "
                f"got {[layout.seat for layout in layouts]}"
            )

        teams = self._create_teams(data["teams"])
        topology = TrackTopology(ring_length=ring_length, seats=tuple(layouts), teams=teams)
        self._validate_topology(topology)

        step_table = self._create_step_table(data["card_steps"], data.get("entry_ranks"))
        return GameConfig(topology=topology, step_table=step_table)

    def _validate_structure(self, data: dict[str, Any]) -> None:
        """Validate the basic structure of the track data."""
        if not isinstance(data, dict):
            raise TrackLoadError("Track data must be a dictionary")

        for key in ("ring_length", "seats", "teams", "card_steps"):
            if key not in data:
                raise TrackLoadError(f"Track data missing '{key}' key")

        if not isinstance(data["seats"], list):
            raise TrackLoadError("'seats' must be a list")

        if len(data["seats"]) != self.EXPECTED_SEATS:
            raise TrackLoadError(
                f"Expected {self.EXPECTED_SEATS} seats, found {len(data['seats'])}"
            )

        if not isinstance(data["card_steps"], dict):
            raise TrackLoadError("'card_steps' must be a mapping of rank to steps")

    def _create_seat(self, seat_data: dict[str, Any], ring_length: int) -> SeatLayout:
        """Create a SeatLayout from seat data dictionary."""
        required_fields = ["seat", "base", "safe_zone"]
        for field in required_fields:
            if field not in seat_data:
                raise TrackLoadError(f"Seat missing required field: {field}")

        seat = seat_data["seat"]
        base = seat_data["base"]
        zone = seat_data["safe_zone"]

        if not isinstance(zone, list) or len(zone) != 2:
            raise TrackLoadError(f"Safe zone of seat {seat} must be [start, end]")
        start, end = zone

        for cell in (base, start, end):
            if not isinstance(cell, int) or not 1 <= cell <= ring_length:
                raise TrackLoadError(
                    f"Cell {cell} of seat {seat} is outside the ring 1..{ring_length}"
                )

        if end < start:
            raise TrackLoadError(f"Safe zone of seat {seat} ends before it starts")

        length = end - start + 1
        if self.strict and length != self.EXPECTED_SAFE_ZONE_LENGTH:
            raise TrackLoadError(
                f"Safe zone of seat {seat} has {length} cells, "
                f"expected {self.EXPECTED_SAFE_ZONE_LENGTH}"
            )

        return SeatLayout(seat=seat, base=base, safe_start=start, safe_end=end)

    def _create_teams(self, teams_data: Any) -> tuple[tuple[int, ...], ...]:
        """Create the team pairing, checking it partitions the seats."""
        if not isinstance(teams_data, list) or not teams_data:
            raise TrackLoadError("'teams' must be a non-empty list of seat lists")

        teams = tuple(tuple(team) for team in teams_data)
        seats = sorted(seat for team in teams for seat in team)
        if seats != list(range(self.EXPECTED_SEATS)):
            raise TrackLoadError(f"Teams must cover every seat exactly once, got {teams_data}")
        return teams

    def _validate_topology(self, topology: TrackTopology) -> None:
        """Validate zone placement against the ring."""
        layouts = topology.seats

        for i, a in enumerate(layouts):
            for b in layouts[i + 1:]:
                if a.safe_start <= b.safe_end and b.safe_start <= a.safe_end:
                    raise TrackLoadError(
                        f"Safe zones of seats {a.seat} and {b.seat} overlap"
                    )

        for layout in layouts:
            before = topology.prev_cell(layout.safe_start)
            after = topology.next_cell(layout.safe_end)
            if not topology.is_ring_cell(before) or not topology.is_ring_cell(after):
                raise TrackLoadError(
                    f"Safe zone of seat {layout.seat} is adjacent to another safe zone"
                )
            if not topology.is_ring_cell(layout.base):
                raise TrackLoadError(
                    f"Base {layout.base} of seat {layout.seat} lies inside a safe zone"
                )

        bases = [layout.base for layout in layouts]
        if len(set(bases)) != len(bases):
            raise TrackLoadError(f"Seats share a base cell: {bases}")

    def _create_step_table(self, steps_data: dict[str, Any], entry_data: Any) -> StepTable:
        """Create the card-to-steps table."""
        steps: dict[Rank, int] = {}
        for rank_str, value in steps_data.items():
            try:
                rank = Rank(rank_str)
            except ValueError:
                raise TrackLoadError(
                    f"Invalid rank '{rank_str}'. "
                    f"Valid ranks: {[r.value for r in Rank]}"
                )
            if not isinstance(value, int):
                raise TrackLoadError(f"Steps for {rank_str} must be an integer, got {value!r}")
            steps[rank] = value

        missing = [rank.value for rank in Rank if rank not in steps]
        if missing:
            raise TrackLoadError(f"Card steps missing ranks: {missing}")

        if entry_data is None:
            return StepTable(steps=steps)

        try:
            entry_ranks = tuple(Rank(r) for r in entry_data)
        except ValueError as e:
            raise TrackLoadError(f"Invalid entry rank: {e}")
        return StepTable(steps=steps, entry_ranks=entry_ranks)


def load_game_config(file_path: str | Path, strict: bool = True) -> GameConfig:
    """Convenience function to load a track from a file.

    Args:
        file_path: Path to the JSON track file.
        strict: If True, enforce standard-length safe zones.

    Returns:
        A GameConfig with the loaded topology and step table.
    """
    loader = TrackLoader(strict=strict)
    return loader.load_from_file(file_path)


def load_default_config() -> GameConfig:
    """Load the reference 67-cell track and standard step table.

    Raises:
        TrackLoadError: If the default track file is missing or invalid.
    """
    default_path = resource_path("default_track.json")
    return load_game_config(default_path, strict=True)


def get_track_stats(config: GameConfig) -> dict[str, Any]:
    """Get statistics about a track.

    Args:
        config: The configuration to analyze.

    Returns:
        Dictionary with track statistics.
    """
    topology = config.topology
    return {
        "ring_length": topology.ring_length,
        "num_ring_cells": len(topology.ring_cells()),
        "num_seats": topology.num_seats,
        "bases": {layout.seat: layout.base for layout in topology.seats},
        "safe_zones": {
            layout.seat: (layout.safe_start, layout.safe_end) for layout in topology.seats
        },
        "route_lengths": {
            layout.seat: topology.max_progress(layout.seat) for layout in topology.seats
        },
    }

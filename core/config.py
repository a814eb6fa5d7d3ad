"""Game configuration: the only tunables of the rules engine."""

from __future__ import annotations

from dataclasses import dataclass, field

from .cards import StepTable
from .track import TrackTopology


@dataclass(frozen=True)
class GameConfig:
    """Track geometry plus the card-to-steps table.

    Attributes:
        topology: Ring length, seat bases, safe zones and team pairing.
        step_table: Card rank to signed step count.
    """

    topology: TrackTopology
    step_table: StepTable = field(default_factory=StepTable)

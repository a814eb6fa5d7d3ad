"""Strategies for the marble race: one capability, four difficulty tiers.

The skill ladder mirrors a learning player: BEGINNER improves to
INTERMEDIATE, which improves to PRO. NORMAL sits beside the ladder and
also improves to INTERMEDIATE.
"""

from __future__ import annotations

from core.constants import SkillLevel

from .base import Strategy
from .view import PlayerView
from .beginner import BeginnerStrategy
from .normal import NormalStrategy
from .intermediate import IntermediateStrategy
from .pro import ProStrategy

STRATEGY_TIERS: dict[SkillLevel, type[Strategy]] = {
    SkillLevel.BEGINNER: BeginnerStrategy,
    SkillLevel.NORMAL: NormalStrategy,
    SkillLevel.INTERMEDIATE: IntermediateStrategy,
    SkillLevel.PRO: ProStrategy,
}

SKILL_LADDER: dict[SkillLevel, SkillLevel] = {
    SkillLevel.BEGINNER: SkillLevel.INTERMEDIATE,
    SkillLevel.NORMAL: SkillLevel.INTERMEDIATE,
    SkillLevel.INTERMEDIATE: SkillLevel.PRO,
    SkillLevel.PRO: SkillLevel.PRO,
}


def create_strategy(level: SkillLevel | str) -> Strategy:
    """Create a strategy for a difficulty tier.

    Args:
        level: A SkillLevel or its name (e.g. "pro").

    Raises:
        ValueError: If the tier is unknown.
    """
    if isinstance(level, str):
        try:
            level = SkillLevel(level.lower())
        except ValueError:
            raise ValueError(
                f"Unknown strategy '{level}'. "
                f"Valid strategies: {[s.value for s in SkillLevel]}"
            )
    return STRATEGY_TIERS[level]()


def improve_strategy(strategy: Strategy) -> Strategy:
    """Return a strategy one step up the skill ladder (PRO stays PRO)."""
    return create_strategy(SKILL_LADDER[strategy.skill_level])


__all__ = [
    "Strategy",
    "PlayerView",
    "BeginnerStrategy",
    "NormalStrategy",
    "IntermediateStrategy",
    "ProStrategy",
    "STRATEGY_TIERS",
    "SKILL_LADDER",
    "create_strategy",
    "improve_strategy",
]

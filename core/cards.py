"""Playing cards and the card-to-steps table.

A card's suit is cosmetic; only its rank matters, through the step table.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from .constants import Rank, Suit, DEFAULT_CARD_STEPS, ENTRY_RANKS


@dataclass(frozen=True)
class Card:
    """A single playing card."""

    suit: Suit
    rank: Rank

    def to_dict(self) -> dict[str, str]:
        """Serialize the card."""
        return {"suit": self.suit.value, "rank": self.rank.value}

    @classmethod
    def from_dict(cls, data: Mapping[str, str]) -> Card:
        """Deserialize a card produced by to_dict()."""
        return cls(suit=Suit(data["suit"]), rank=Rank(data["rank"]))

    def __str__(self) -> str:
        return f"{self.rank.value} of {self.suit.value}"


@dataclass(frozen=True)
class StepTable:
    """Maps card ranks to signed step counts.

    Attributes:
        steps: Step count for every rank. Negative values move backward.
        entry_ranks: Ranks that may bring a marble out of Home.
    """

    steps: Mapping[Rank, int] = field(default_factory=lambda: dict(DEFAULT_CARD_STEPS))
    entry_ranks: tuple[Rank, ...] = ENTRY_RANKS

    def __post_init__(self) -> None:
        missing = [rank.value for rank in Rank if rank not in self.steps]
        if missing:
            raise ValueError(f"Step table missing ranks: {missing}")

    def steps_for(self, card: Card) -> int:
        """Signed step count for a card."""
        return self.steps[card.rank]

    def can_enter(self, card: Card) -> bool:
        """Check if a card can bring a marble out of Home."""
        return card.rank in self.entry_ranks


def build_standard_deck() -> list[Card]:
    """Build a standard 52-card deck (4 suits x 13 ranks), unshuffled."""
    return [Card(suit=suit, rank=rank) for suit in Suit for rank in Rank]

"""Player model for the marble race engine.

Each player sits at one of four seats, belongs to a team of two, holds a
hand of cards and owns four marbles. Marble state is mutated only through
the MarbleRegistry; the player keeps references for ordered access.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .cards import Card
from .marble import Marble


@dataclass
class Player:
    """Represents a player in the marble race.

    Attributes:
        seat: Seat index (0-3), also the turn order.
        team: Team index (seats 0 and 2 are team 0, seats 1 and 3 team 1).
        hand: Cards currently held.
        marbles: The player's four marbles, in index order.
    """

    seat: int
    team: int
    hand: list[Card] = field(default_factory=list)
    marbles: list[Marble] = field(default_factory=list)

    def has_cards(self) -> bool:
        """Check if the player holds any card."""
        return len(self.hand) > 0

    def add_card(self, card: Card) -> None:
        """Add a card to the hand."""
        self.hand.append(card)

    def remove_card(self, card: Card) -> None:
        """Remove a card from the hand.

        Raises:
            ValueError: If the card is not in the hand.
        """
        if card not in self.hand:
            raise ValueError(f"Seat {self.seat} does not hold {card}")
        self.hand.remove(card)

    def clear_hand(self) -> list[Card]:
        """Empty the hand and return the cards that were in it."""
        cards = self.hand
        self.hand = []
        return cards

    def all_marbles_safe(self) -> bool:
        """Check if every marble of this player is inside its safe zone."""
        return all(m.is_safe() for m in self.marbles)

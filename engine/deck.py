"""Deck manager: builds, shuffles, deals and recycles the card supply.

Cards only ever move between the deck, the hands and the discard pile, so
the 52 cards are conserved for the whole game.
"""

from __future__ import annotations

import logging
import random
from typing import Optional

from core.cards import Card, build_standard_deck
from core.errors import ExhaustedSupplyError
from core.game_state import GameState

logger = logging.getLogger(__name__)


class DeckManager:
    """Owns every card movement on a game state."""

    def __init__(self, state: GameState, rng: Optional[random.Random] = None):
        """Initialize the deck manager.

        Args:
            state: Game state holding the deck, discard pile and hands.
            rng: Random source for shuffles. A fresh unseeded one if None.
        """
        self.state = state
        self.rng = rng if rng is not None else random.Random()

    def build(self) -> None:
        """Put a fresh 52-card deck in place; hands and discard pile are emptied."""
        for player in self.state.players:
            player.clear_hand()
        self.state.discard_pile = []
        self.state.deck = build_standard_deck()

    def shuffle(self) -> None:
        """Shuffle the deck in place with a uniform random permutation."""
        self.rng.shuffle(self.state.deck)

    def refill_if_empty(self) -> bool:
        """Recycle the discard pile into the deck if the deck ran out.

        Returns:
            True if a refill happened.
        """
        state = self.state
        if state.deck or not state.discard_pile:
            return False
        state.deck = state.discard_pile
        state.discard_pile = []
        self.shuffle()
        logger.debug("Recycled %d discarded cards into the deck", len(state.deck))
        return True

    def draw(self) -> Card:
        """Draw the front card of the deck, refilling it first if needed.

        Raises:
            ExhaustedSupplyError: If deck and discard pile are both empty.
        """
        self.refill_if_empty()
        if not self.state.deck:
            raise ExhaustedSupplyError("Deck and discard pile are both empty")
        return self.state.deck.pop(0)

    def deal(self, hand_size: int) -> None:
        """Deal `hand_size` cards to every player, round-robin from seat 0.

        Cards still in hand are discarded first.

        Raises:
            ValueError: If hand_size is negative.
            ExhaustedSupplyError: If the supply runs out mid-deal.
        """
        if hand_size < 0:
            raise ValueError(f"Invalid hand size: {hand_size}")

        state = self.state
        for player in state.players:
            state.discard_pile.extend(player.clear_hand())

        for _ in range(hand_size):
            for player in state.players:
                player.add_card(self.draw())

        state.turn.hand_size = hand_size
        logger.debug("Dealt %d cards to each of %d players", hand_size, len(state.players))

    def discard(self, seat: int, card: Card) -> None:
        """Move a card from a player's hand to the discard pile.

        Raises:
            ValueError: If the player does not hold the card.
        """
        self.state.get_player(seat).remove_card(card)
        self.state.discard_pile.append(card)

    def total_cards(self) -> int:
        """Number of cards across deck, hands and discard pile."""
        state = self.state
        return (
            len(state.deck)
            + len(state.discard_pile)
            + sum(len(p.hand) for p in state.players)
        )

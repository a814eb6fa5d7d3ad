"""Tests for the deck manager."""

import random

import pytest

from core.cards import build_standard_deck
from core.errors import ExhaustedSupplyError
from core.game_state import GameState
from data.loader import load_default_config
from engine.deck import DeckManager


@pytest.fixture
def state() -> GameState:
    return GameState.create_initial_state(load_default_config())


@pytest.fixture
def deck(state: GameState) -> DeckManager:
    manager = DeckManager(state, random.Random(3))
    manager.build()
    return manager


class TestBuildAndShuffle:
    """Test deck construction and shuffling."""

    def test_build_gives_full_deck(self, state: GameState, deck: DeckManager):
        assert len(state.deck) == 52
        assert state.discard_pile == []
        assert deck.total_cards() == 52

    def test_build_clears_hands(self, state: GameState, deck: DeckManager):
        deck.deal(4)
        deck.build()
        assert all(not p.has_cards() for p in state.players)
        assert deck.total_cards() == 52

    def test_shuffle_is_permutation(self, state: GameState, deck: DeckManager):
        deck.shuffle()
        assert sorted(map(str, state.deck)) == sorted(map(str, build_standard_deck()))

    def test_seeded_shuffles_repeat(self):
        orders = []
        for _ in range(2):
            s = GameState.create_initial_state(load_default_config())
            manager = DeckManager(s, random.Random(42))
            manager.build()
            manager.shuffle()
            orders.append(list(s.deck))
        assert orders[0] == orders[1]


class TestDealing:
    """Test dealing hands."""

    def test_deal_round_robin(self, state: GameState, deck: DeckManager):
        top = list(state.deck[:8])
        deck.deal(2)

        assert state.players[0].hand == [top[0], top[4]]
        assert state.players[3].hand == [top[3], top[7]]
        assert len(state.deck) == 44
        assert state.turn.hand_size == 2

    def test_deal_discards_leftover_hands(self, state: GameState, deck: DeckManager):
        deck.deal(4)
        leftover = list(state.players[2].hand)
        deck.deal(5)

        assert all(len(p.hand) == 5 for p in state.players)
        for card in leftover:
            assert card in state.discard_pile
        assert deck.total_cards() == 52

    def test_negative_hand_size_raises(self, deck: DeckManager):
        with pytest.raises(ValueError):
            deck.deal(-1)

    def test_deal_conserves_cards(self, state: GameState, deck: DeckManager):
        for hand_size in (4, 4, 5, 5, 5):
            deck.deal(hand_size)
            assert deck.total_cards() == 52
            assert state.validate() == []


class TestDrawAndRefill:
    """Test drawing and discard recycling."""

    def test_draw_from_front(self, state: GameState, deck: DeckManager):
        first = state.deck[0]
        assert deck.draw() == first
        assert len(state.deck) == 51

    def test_refill_when_empty(self, state: GameState, deck: DeckManager):
        state.discard_pile = state.deck
        state.deck = []

        assert deck.refill_if_empty()
        assert len(state.deck) == 52
        assert state.discard_pile == []

    def test_no_refill_while_cards_remain(self, deck: DeckManager):
        assert not deck.refill_if_empty()

    def test_draw_refills(self, state: GameState, deck: DeckManager):
        state.discard_pile = state.deck
        state.deck = []
        deck.draw()
        assert len(state.deck) == 51

    def test_exhausted_supply_raises(self, state: GameState, deck: DeckManager):
        state.deck = []
        state.discard_pile = []
        with pytest.raises(ExhaustedSupplyError):
            deck.draw()

    def test_deal_through_refill(self, state: GameState, deck: DeckManager):
        # 48 cards in the discard pile, 4 left in the deck
        state.discard_pile = state.deck[:48]
        state.deck = state.deck[48:]
        deck.deal(5)
        assert all(len(p.hand) == 5 for p in state.players)
        assert deck.total_cards() == 52


class TestDiscard:
    """Test discarding from a hand."""

    def test_discard_moves_card(self, state: GameState, deck: DeckManager):
        deck.deal(4)
        card = state.players[1].hand[2]
        deck.discard(1, card)

        assert card not in state.players[1].hand
        assert state.discard_pile[-1] == card

    def test_discard_unheld_card_raises(self, state: GameState, deck: DeckManager):
        deck.deal(4)
        held = {c for p in state.players for c in p.hand}
        stranger = next(c for c in build_standard_deck() if c not in held)
        with pytest.raises(ValueError):
            deck.discard(0, stranger)

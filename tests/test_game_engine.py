"""Tests for the main game engine.

Tests cover:
1. Game initialization (reset, load_state)
2. Move generation (valid_moves, destination)
3. The three turn steps (play_card, apply_move, next_turn)
4. Full turns driven by a strategy (play_turn)
5. Integration tests for complete games
"""

import pytest

from core.cards import Card
from core.constants import Zone, Suit, Rank, MoveKind, TurnPhase
from core.game_state import GameState
from data.loader import load_default_config
from engine.events import RecordingSink, CardPlayed, MarbleMoved
from engine.game_engine import GameEngine, MoveIntent, MoveResult, TurnResult
from engine.strategies import BeginnerStrategy, NormalStrategy


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def recorder() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def engine(recorder: RecordingSink) -> GameEngine:
    engine = GameEngine(sinks=[recorder])
    engine.reset(seed=21)
    return engine


def set_hand(state: GameState, seat: int, cards: list[Card]) -> None:
    """Give a seat exactly these cards, taking them from wherever they are."""
    player = state.get_player(seat)
    state.discard_pile.extend(player.clear_hand())
    for card in cards:
        for pile in [state.deck, state.discard_pile] + [p.hand for p in state.players]:
            if card in pile:
                pile.remove(card)
                break
        player.add_card(card)


def place(state: GameState, seat: int, index: int, cell: int) -> None:
    zone = Zone.SAFE if state.topology.is_own_safe_zone(seat, cell) else Zone.TRACK
    state.registry.commit(state.registry.get(seat, index), zone, cell)


ACE = Card(Suit.SPADES, Rank.ACE)
KING = Card(Suit.HEARTS, Rank.KING)
FIVE = Card(Suit.CLUBS, Rank.FIVE)
FOUR = Card(Suit.DIAMONDS, Rank.FOUR)


# =============================================================================
# Initialization
# =============================================================================

class TestReset:
    """Test game initialization."""

    def test_reset_returns_state(self):
        engine = GameEngine()
        state = engine.reset(seed=1)

        assert state is engine.state
        assert state.phase == TurnPhase.AWAITING_CARD_CHOICE
        assert all(m.is_home() for m in state.registry.all_marbles())
        assert state.validate() == []

    def test_state_before_reset_raises(self):
        engine = GameEngine()
        with pytest.raises(RuntimeError):
            engine.state
        with pytest.raises(RuntimeError):
            engine.resolver
        assert not engine.is_game_over()

    def test_seeded_reset_is_reproducible(self):
        hashes = []
        for _ in range(2):
            engine = GameEngine()
            engine.reset(seed=99)
            hashes.append(engine.state.state_hash())
        assert hashes[0] == hashes[1]

    def test_reset_starts_fresh_game(self, engine: GameEngine):
        place(engine.state, 0, 0, 20)
        engine.reset(seed=2)
        assert engine.state.registry.get(0, 0).is_home()

    def test_explicit_config(self):
        engine = GameEngine(config=load_default_config())
        engine.reset(seed=3)
        assert engine.state.topology.ring_length == 67

    def test_load_state_continues_game(self, engine: GameEngine):
        place(engine.state, 1, 0, 5)
        snapshot = GameState.from_dict(engine.state.to_dict(), engine.config)

        other = GameEngine()
        other.load_state(snapshot, seed=4)

        assert other.state.state_hash() == engine.state.state_hash()
        assert other.phase == TurnPhase.AWAITING_CARD_CHOICE
        card = other.state.get_current_player().hand[0]
        other.play_card(card)
        assert other.phase == TurnPhase.AWAITING_MOVE


# =============================================================================
# Move Generation
# =============================================================================

class TestValidMoves:
    """Test legal move generation."""

    def test_entry_card_with_all_home(self, engine: GameEngine):
        assert engine.valid_moves(0, ACE) == [MoveIntent(MoveKind.ENTER, 0)]
        assert engine.valid_moves(0, KING) == [MoveIntent(MoveKind.ENTER, 0)]

    def test_non_entry_card_with_all_home(self, engine: GameEngine):
        assert engine.valid_moves(0, FIVE) == []

    def test_enter_offered_for_lowest_home_marble(self, engine: GameEngine):
        place(engine.state, 0, 0, 20)
        moves = engine.valid_moves(0, ACE)
        assert MoveIntent(MoveKind.ENTER, 1) in moves
        assert MoveIntent(MoveKind.ENTER, 2) not in moves
        assert MoveIntent(MoveKind.ADVANCE, 0) in moves

    def test_enter_blocked_by_own_marble_on_base(self, engine: GameEngine):
        place(engine.state, 0, 0, 51)
        moves = engine.valid_moves(0, ACE)
        assert moves == [MoveIntent(MoveKind.ADVANCE, 0)]

    def test_blocked_marble_has_no_move(self, engine: GameEngine):
        place(engine.state, 0, 0, 20)
        place(engine.state, 0, 1, 21)
        assert engine.valid_moves(0, ACE) == [
            MoveIntent(MoveKind.ENTER, 2),
            MoveIntent(MoveKind.ADVANCE, 1),
        ]

    def test_destination(self, engine: GameEngine):
        place(engine.state, 0, 0, 44)
        assert engine.destination(0, FIVE, MoveIntent(MoveKind.ADVANCE, 0)) == (Zone.SAFE, 49)
        assert engine.destination(0, ACE, MoveIntent(MoveKind.ENTER, 1)) == (Zone.TRACK, 51)

    def test_destination_rejects_bad_intents(self, engine: GameEngine):
        place(engine.state, 0, 0, 20)
        # Home marble cannot advance, board marble cannot enter
        assert engine.destination(0, FIVE, MoveIntent(MoveKind.ADVANCE, 1)) is None
        assert engine.destination(0, ACE, MoveIntent(MoveKind.ENTER, 0)) is None
        assert engine.destination(0, FIVE, MoveIntent(MoveKind.ADVANCE, 7)) is None
        assert engine.destination(0, FIVE, MoveIntent(MoveKind.ENTER, 1)) is None

    def test_valid_moves_do_not_mutate(self, engine: GameEngine):
        place(engine.state, 0, 0, 20)
        before = engine.state.state_hash()
        for card in (ACE, KING, FIVE, FOUR):
            engine.valid_moves(0, card)
        assert engine.state.state_hash() == before


# =============================================================================
# Turn Steps
# =============================================================================

class TestPlayCard:
    """Test discarding the card for a turn."""

    def test_play_card(self, engine: GameEngine, recorder: RecordingSink):
        state = engine.state
        card = state.get_player(0).hand[0]
        engine.play_card(card)

        assert card not in state.get_player(0).hand
        assert state.discard_pile[-1] == card
        assert state.pending_card == card
        assert engine.phase == TurnPhase.AWAITING_MOVE
        assert recorder.of_type(CardPlayed) == [CardPlayed(seat=0, card=card)]

    def test_card_not_held_raises(self, engine: GameEngine):
        held = engine.state.get_player(0).hand
        other = engine.state.get_player(1).hand[0]
        assert other not in held
        with pytest.raises(ValueError):
            engine.play_card(other)

    def test_second_card_raises(self, engine: GameEngine):
        hand = engine.state.get_player(0).hand
        engine.play_card(hand[0])
        with pytest.raises(RuntimeError):
            engine.play_card(hand[0])

    def test_apply_move_without_card_raises(self, engine: GameEngine):
        with pytest.raises(RuntimeError):
            engine.apply_move(None)


class TestApplyMove:
    """Test resolving the move for a played card."""

    def test_declined(self, engine: GameEngine):
        card = engine.state.get_player(0).hand[0]
        engine.play_card(card)
        before = engine.state.registry.marbles_of(0)[0].zone

        result = engine.apply_move(None)

        assert isinstance(result, MoveResult)
        assert not result.applied
        assert result.reason == "declined"
        assert result.card == card
        assert engine.state.pending_card is None
        assert engine.state.registry.marbles_of(0)[0].zone == before

    def test_illegal_intent_consumes_card(self, engine: GameEngine, recorder: RecordingSink):
        state = engine.state
        set_hand(state, 0, [FIVE])
        engine.play_card(FIVE)

        result = engine.apply_move(MoveIntent(MoveKind.ENTER, 0))

        assert not result.applied
        assert "not legal" in result.reason
        assert FIVE in state.discard_pile
        assert recorder.of_type(MarbleMoved) == []
        assert all(m.is_home() for m in state.registry.marbles_of(0))
        assert state.pending_card is None

    def test_enter(self, engine: GameEngine, recorder: RecordingSink):
        set_hand(engine.state, 0, [KING])
        engine.play_card(KING)
        result = engine.apply_move(MoveIntent(MoveKind.ENTER, 0))

        assert result.applied
        assert (result.from_zone, result.from_position) == (Zone.HOME, None)
        assert (result.to_zone, result.to_position) == (Zone.TRACK, 51)
        assert engine.state.registry.get(0, 0).position == 51
        assert recorder.of_type(MarbleMoved) == [
            MarbleMoved(
                seat=0, marble_index=0,
                from_zone=Zone.HOME, from_position=None,
                to_zone=Zone.TRACK, to_position=51,
            )
        ]

    def test_advance_into_safe_zone(self, engine: GameEngine):
        place(engine.state, 0, 2, 44)
        set_hand(engine.state, 0, [FIVE])
        engine.play_card(FIVE)
        result = engine.apply_move(MoveIntent(MoveKind.ADVANCE, 2))

        assert result.applied
        assert result.to_zone == Zone.SAFE
        assert engine.state.registry.get(0, 2).is_safe()
        assert not result.game_won

    def test_four_moves_backward(self, engine: GameEngine):
        place(engine.state, 0, 0, 51)
        set_hand(engine.state, 0, [FOUR])
        engine.play_card(FOUR)
        result = engine.apply_move(MoveIntent(MoveKind.ADVANCE, 0))

        assert result.to_position == 43

    def test_state_stays_valid(self, engine: GameEngine):
        place(engine.state, 0, 0, 20)
        place(engine.state, 1, 0, 25)
        set_hand(engine.state, 0, [FIVE])
        engine.play_card(FIVE)
        engine.apply_move(MoveIntent(MoveKind.ADVANCE, 0))
        assert engine.state.validate() == []


class TestNextTurn:
    """Test passing the turn."""

    def test_next_turn_moves_to_next_seat(self, engine: GameEngine):
        engine.play_card(engine.state.get_player(0).hand[0])
        engine.apply_move(None)
        assert engine.next_turn()
        assert engine.state.turn.current_player_idx == 1
        assert engine.phase == TurnPhase.AWAITING_CARD_CHOICE


# =============================================================================
# play_turn
# =============================================================================

class TestPlayTurn:
    """Test full turns driven by a strategy."""

    def test_turn_result(self, engine: GameEngine):
        result = engine.play_turn(BeginnerStrategy())

        assert isinstance(result, TurnResult)
        assert result.seat == 0
        assert result.card is not None
        assert result.move is not None
        assert result.advanced
        assert engine.state.turn.current_player_idx == 1

    def test_turn_left_open(self, engine: GameEngine):
        result = engine.play_turn(BeginnerStrategy(), advance=False)

        assert not result.advanced
        assert engine.state.turn.current_player_idx == 0
        assert engine.phase == TurnPhase.AWAITING_MOVE
        engine.next_turn()
        assert engine.state.turn.current_player_idx == 1

    def test_skipped_turn(self, engine: GameEngine):
        state = engine.state
        state.discard_pile.extend(state.get_player(0).clear_hand())
        result = engine.play_turn(BeginnerStrategy())

        assert result.skipped
        assert result.card is None
        assert result.advanced

    def test_player_view_is_read_only(self, engine: GameEngine):
        place(engine.state, 0, 0, 20)
        view = engine.player_view(0)
        marble = view.own_marbles()[0]
        marble.position = 30

        assert engine.state.registry.get(0, 0).position == 20
        assert view.hand == tuple(engine.state.get_player(0).hand)
        assert sum(view.hand_sizes().values()) == 16


# =============================================================================
# Integration
# =============================================================================

class TestIntegration:
    """Complete games."""

    @pytest.mark.parametrize("seed", [0, 1, 2])
    def test_full_game_terminates(self, seed: int):
        engine = GameEngine()
        engine.reset(seed=seed)
        strategy = NormalStrategy()

        turns = 0
        while not engine.is_game_over() and turns < 20_000:
            engine.play_turn(strategy)
            turns += 1
            if turns % 50 == 0:
                assert engine.state.validate() == []

        assert engine.is_game_over()
        assert engine.winning_team in (0, 1)
        seats = engine.state.team_seats(engine.winning_team)
        assert all(engine.state.get_player(s).all_marbles_safe() for s in seats)

"""Tests for core data structures.

Tests cover:
1. Enums and constants
2. Track topology (ring arithmetic, safe zones, progress)
3. Cards and the step table
4. Marbles and the marble registry
5. Player model
6. GameState creation, cloning, serialization and validation
"""

import pytest

from core.constants import (
    Zone,
    Suit,
    Rank,
    TurnPhase,
    MoveKind,
    SkillLevel,
    NUM_SEATS,
    MARBLES_PER_PLAYER,
    SAFE_ZONE_LENGTH,
    DEFAULT_RING_LENGTH,
    TEAMS,
    DEFAULT_CARD_STEPS,
    ENTRY_RANKS,
)
from core.errors import InvariantViolation, ExhaustedSupplyError
from core.track import SeatLayout, TrackTopology, make_seat_layout
from core.cards import Card, StepTable, build_standard_deck
from core.config import GameConfig
from core.marble import Marble, MarbleRegistry
from core.player import Player
from core.game_state import GameState, TurnState
from data.loader import load_default_config


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def config() -> GameConfig:
    """The reference 67-cell track."""
    return load_default_config()


@pytest.fixture
def topology(config: GameConfig) -> TrackTopology:
    return config.topology


@pytest.fixture
def state(config: GameConfig) -> GameState:
    return GameState.create_initial_state(config)


# =============================================================================
# Enum and Constant Tests
# =============================================================================

class TestEnums:
    """Test enum definitions."""

    def test_zone_values(self):
        assert {z.value for z in Zone} == {"home", "track", "safe"}

    def test_rank_count(self):
        assert len(Rank) == 13

    def test_suit_count(self):
        assert len(Suit) == 4

    def test_turn_phases(self):
        assert TurnPhase.IDLE.value == "idle"
        assert TurnPhase.GAME_OVER.value == "game_over"
        assert len(TurnPhase) == 6

    def test_move_kinds(self):
        assert {k.value for k in MoveKind} == {"enter", "advance"}

    def test_skill_levels(self):
        assert [s.value for s in SkillLevel] == ["beginner", "normal", "intermediate", "pro"]


class TestConstants:
    """Test game constants."""

    def test_table_geometry(self):
        assert NUM_SEATS == 4
        assert MARBLES_PER_PLAYER == 4
        assert SAFE_ZONE_LENGTH == 4
        assert DEFAULT_RING_LENGTH == 67

    def test_teams_pair_opposite_seats(self):
        assert TEAMS == ((0, 2), (1, 3))

    def test_four_is_the_only_backward_card(self):
        backward = [rank for rank, steps in DEFAULT_CARD_STEPS.items() if steps < 0]
        assert backward == [Rank.FOUR]
        assert DEFAULT_CARD_STEPS[Rank.FOUR] == -4

    def test_face_card_steps(self):
        assert DEFAULT_CARD_STEPS[Rank.ACE] == 1
        assert DEFAULT_CARD_STEPS[Rank.JACK] == 11
        assert DEFAULT_CARD_STEPS[Rank.QUEEN] == 12
        assert DEFAULT_CARD_STEPS[Rank.KING] == 13

    def test_entry_ranks(self):
        assert set(ENTRY_RANKS) == {Rank.ACE, Rank.KING}

    def test_exhausted_supply_is_invariant_violation(self):
        assert issubclass(ExhaustedSupplyError, InvariantViolation)
        assert issubclass(InvariantViolation, RuntimeError)


# =============================================================================
# Track Topology Tests
# =============================================================================

class TestSeatLayout:
    """Test SeatLayout."""

    def test_safe_cells(self):
        layout = SeatLayout(seat=0, base=51, safe_start=46, safe_end=49)
        assert list(layout.safe_cells) == [46, 47, 48, 49]

    def test_contains(self):
        layout = SeatLayout(seat=0, base=51, safe_start=46, safe_end=49)
        assert layout.contains(46)
        assert layout.contains(49)
        assert not layout.contains(45)
        assert not layout.contains(50)

    def test_make_seat_layout_uses_standard_length(self):
        layout = make_seat_layout(seat=2, base=18, safe_start=13)
        assert layout.safe_end == 16


class TestTrackTopology:
    """Test the reference track geometry."""

    def test_reference_layout(self, topology: TrackTopology):
        assert topology.ring_length == 67
        assert topology.num_seats == 4
        assert [topology.base(s) for s in range(4)] == [51, 1, 18, 35]
        assert topology.safe_zone_range(0) == (46, 49)
        assert topology.safe_zone_range(1) == (63, 66)
        assert topology.safe_zone_range(2) == (13, 16)
        assert topology.safe_zone_range(3) == (30, 33)

    def test_invalid_seat_raises(self, topology: TrackTopology):
        with pytest.raises(ValueError):
            topology.seat(4)

    def test_ring_has_51_positions(self, topology: TrackTopology):
        ring = topology.ring_cells()
        assert len(ring) == 51
        assert 46 not in ring
        assert 67 in ring

    def test_approach_cells(self, topology: TrackTopology):
        assert [topology.approach_cell(s) for s in range(4)] == [45, 62, 12, 29]

    def test_wraparound(self, topology: TrackTopology):
        assert topology.next_cell(67) == 1
        assert topology.prev_cell(1) == 67
        assert topology.next_cell(10) == 11
        assert topology.prev_cell(10) == 9

    def test_safe_zone_owner(self, topology: TrackTopology):
        assert topology.safe_zone_owner(47) == 0
        assert topology.safe_zone_owner(64) == 1
        assert topology.safe_zone_owner(14) == 2
        assert topology.safe_zone_owner(31) == 3
        assert topology.safe_zone_owner(50) is None

    def test_own_and_foreign_zones(self, topology: TrackTopology):
        assert topology.is_own_safe_zone(2, 13)
        assert not topology.is_foreign_safe_zone(2, 13)
        assert topology.is_foreign_safe_zone(0, 13)
        assert not topology.is_foreign_safe_zone(0, 20)

    def test_approach_window(self, topology: TrackTopology):
        assert topology.approach_window(0, 3) == {45: 1, 44: 2, 43: 3}

    def test_teams(self, topology: TrackTopology):
        assert topology.team_of(0) == 0
        assert topology.team_of(3) == 1
        assert topology.teammates(0) == (2,)
        assert topology.teammates(1) == (3,)


class TestProgress:
    """Test race progress along each seat's route."""

    def test_home_is_minus_one(self, topology: TrackTopology):
        assert topology.progress(0, Zone.HOME, None) == -1

    def test_base_is_zero(self, topology: TrackTopology):
        for seat in range(4):
            assert topology.progress(seat, Zone.TRACK, topology.base(seat)) == 0

    def test_foreign_zone_counts_as_one_step(self, topology: TrackTopology):
        # Seat 0 crosses seat 1's zone (63-66) right before cell 67
        assert topology.progress(0, Zone.TRACK, 62) == 11
        assert topology.progress(0, Zone.TRACK, 67) == 12

    def test_route_end(self, topology: TrackTopology):
        assert topology.progress(0, Zone.TRACK, 45) == 49
        assert topology.progress(0, Zone.SAFE, 46) == 50
        assert topology.max_progress(0) == 53

    def test_every_seat_has_same_route_length(self, topology: TrackTopology):
        assert len({topology.max_progress(s) for s in range(4)}) == 1


# =============================================================================
# Card Tests
# =============================================================================

class TestCards:
    """Test cards, the standard deck and the step table."""

    def test_standard_deck(self):
        deck = build_standard_deck()
        assert len(deck) == 52
        assert len(set(deck)) == 52

    def test_card_equality_and_hash(self):
        a = Card(Suit.HEARTS, Rank.ACE)
        b = Card(Suit.HEARTS, Rank.ACE)
        assert a == b
        assert hash(a) == hash(b)

    def test_card_str(self):
        assert str(Card(Suit.SPADES, Rank.ACE)) == "ace of spades"

    def test_card_dict_round_trip(self):
        card = Card(Suit.CLUBS, Rank.TEN)
        assert card.to_dict() == {"suit": "clubs", "rank": "10"}
        assert Card.from_dict(card.to_dict()) == card

    def test_step_table_defaults(self):
        table = StepTable()
        assert table.steps_for(Card(Suit.CLUBS, Rank.FOUR)) == -4
        assert table.steps_for(Card(Suit.CLUBS, Rank.KING)) == 13

    def test_can_enter(self):
        table = StepTable()
        assert table.can_enter(Card(Suit.CLUBS, Rank.ACE))
        assert table.can_enter(Card(Suit.CLUBS, Rank.KING))
        assert not table.can_enter(Card(Suit.CLUBS, Rank.QUEEN))

    def test_incomplete_step_table_raises(self):
        with pytest.raises(ValueError, match="missing"):
            StepTable(steps={Rank.ACE: 1})


# =============================================================================
# Marble Registry Tests
# =============================================================================

class TestMarble:
    """Test the Marble record."""

    def test_defaults_to_home(self):
        marble = Marble(seat=1, index=2)
        assert marble.is_home()
        assert marble.position is None
        assert marble.key == (1, 2)

    def test_is_safe(self):
        assert Marble(seat=0, index=0, zone=Zone.SAFE, position=46).is_safe()


class TestMarbleRegistry:
    """Test MarbleRegistry queries and commits."""

    def test_get(self, state: GameState):
        marble = state.registry.get(2, 3)
        assert marble.seat == 2
        assert marble.index == 3

    def test_get_invalid_raises(self, state: GameState):
        with pytest.raises(ValueError):
            state.registry.get(0, 4)

    def test_position_of_home_reports_base(self, state: GameState):
        marble = state.registry.get(0, 0)
        assert state.registry.position_of(marble) == 51

    def test_commit_to_track(self, state: GameState):
        marble = state.registry.get(0, 0)
        state.registry.commit(marble, Zone.TRACK, 51)
        assert marble.zone == Zone.TRACK
        assert marble.position == 51
        assert state.registry.marbles_at(51) == [marble]

    def test_commit_rejects_own_collision(self, state: GameState):
        registry = state.registry
        registry.commit(registry.get(0, 0), Zone.TRACK, 20)
        with pytest.raises(InvariantViolation):
            registry.commit(registry.get(0, 1), Zone.TRACK, 20)

    def test_other_seats_may_share_a_cell(self, state: GameState):
        registry = state.registry
        registry.commit(registry.get(0, 0), Zone.TRACK, 20)
        registry.commit(registry.get(1, 0), Zone.TRACK, 20)
        assert len(registry.marbles_at(20)) == 2

    def test_commit_rejects_track_in_safe_zone(self, state: GameState):
        with pytest.raises(InvariantViolation):
            state.registry.commit(state.registry.get(0, 0), Zone.TRACK, 47)

    def test_commit_rejects_foreign_safe_zone(self, state: GameState):
        with pytest.raises(InvariantViolation):
            state.registry.commit(state.registry.get(0, 0), Zone.SAFE, 14)

    def test_safe_marble_cannot_leave_or_retreat(self, state: GameState):
        registry = state.registry
        marble = registry.get(0, 0)
        registry.commit(marble, Zone.SAFE, 48)
        with pytest.raises(InvariantViolation):
            registry.commit(marble, Zone.TRACK, 45)
        with pytest.raises(InvariantViolation):
            registry.commit(marble, Zone.SAFE, 46)
        registry.commit(marble, Zone.SAFE, 49)
        assert marble.position == 49

    def test_home_marble_cannot_have_position(self, state: GameState):
        with pytest.raises(InvariantViolation):
            state.registry.commit(state.registry.get(0, 0), Zone.HOME, 51)

    def test_occupied_cells_excludes(self, state: GameState):
        registry = state.registry
        registry.commit(registry.get(0, 0), Zone.TRACK, 20)
        registry.commit(registry.get(0, 1), Zone.TRACK, 25)
        assert registry.occupied_cells(0) == {20, 25}
        assert registry.occupied_cells(0, exclude=20) == {25}

    def test_home_marbles(self, state: GameState):
        registry = state.registry
        registry.commit(registry.get(3, 0), Zone.TRACK, 35)
        assert [m.index for m in registry.home_marbles(3)] == [1, 2, 3]

    def test_restore_ignores_previous_state(self, state: GameState):
        """A saved safe-zone marble can be put back on the track."""
        registry = state.registry
        marble = registry.get(0, 0)
        registry.commit(marble, Zone.SAFE, 48)
        registry.restore(marble, Zone.TRACK, 20)
        assert marble.zone == Zone.TRACK
        assert marble.position == 20

    def test_restore_rejects_impossible_placement(self, state: GameState):
        registry = state.registry
        with pytest.raises(InvariantViolation):
            registry.restore(registry.get(0, 0), Zone.SAFE, 14)
        with pytest.raises(InvariantViolation):
            registry.restore(registry.get(0, 0), Zone.HOME, 51)
        registry.restore(registry.get(0, 0), Zone.TRACK, 20)
        with pytest.raises(InvariantViolation):
            registry.restore(registry.get(0, 1), Zone.TRACK, 20)


# =============================================================================
# Player Tests
# =============================================================================

class TestPlayer:
    """Test Player class."""

    def test_hand_operations(self):
        player = Player(seat=0, team=0)
        card = Card(Suit.HEARTS, Rank.SEVEN)
        assert not player.has_cards()
        player.add_card(card)
        assert player.has_cards()
        player.remove_card(card)
        assert not player.has_cards()

    def test_remove_missing_card_raises(self):
        player = Player(seat=0, team=0)
        with pytest.raises(ValueError):
            player.remove_card(Card(Suit.HEARTS, Rank.SEVEN))

    def test_clear_hand_returns_cards(self):
        player = Player(seat=0, team=0)
        cards = [Card(Suit.HEARTS, Rank.TWO), Card(Suit.CLUBS, Rank.NINE)]
        for card in cards:
            player.add_card(card)
        assert player.clear_hand() == cards
        assert player.hand == []

    def test_all_marbles_safe(self):
        marbles = [Marble(seat=0, index=i, zone=Zone.SAFE, position=46 + i) for i in range(4)]
        assert Player(seat=0, team=0, marbles=marbles).all_marbles_safe()
        marbles[3].zone = Zone.TRACK
        assert not Player(seat=0, team=0, marbles=marbles).all_marbles_safe()


# =============================================================================
# GameState Tests
# =============================================================================

class TestGameState:
    """Test GameState creation and bookkeeping."""

    def test_initial_state(self, state: GameState):
        assert state.num_players() == 4
        assert state.phase == TurnPhase.IDLE
        assert state.turn == TurnState()
        assert all(m.is_home() for m in state.registry.all_marbles())
        assert [p.team for p in state.players] == [0, 1, 0, 1]

    def test_players_share_registry_marbles(self, state: GameState):
        assert state.players[1].marbles[2] is state.registry.get(1, 2)

    def test_requires_four_seats(self, config: GameConfig):
        topology = TrackTopology(ring_length=67, seats=config.topology.seats[:3])
        with pytest.raises(ValueError):
            GameState.create_initial_state(GameConfig(topology=topology))

    def test_advance_current_player_wraps(self, state: GameState):
        state.turn.current_player_idx = 3
        state.advance_current_player()
        assert state.turn.current_player_idx == 0

    def test_set_starting_player_invalid(self, state: GameState):
        with pytest.raises(ValueError):
            state.set_starting_player(4)

    def test_team_seats(self, state: GameState):
        assert state.team_seats(0) == (0, 2)
        assert state.team_seats(1) == (1, 3)

    def test_clone_is_independent(self, state: GameState):
        clone = state.clone()
        clone.registry.commit(clone.registry.get(0, 0), Zone.TRACK, 51)
        assert state.registry.get(0, 0).is_home()
        assert clone.players[0].marbles[0].position == 51

    def test_dict_round_trip(self, state: GameState, config: GameConfig):
        state.deck = build_standard_deck()
        for seat in range(4):
            state.players[seat].add_card(state.deck.pop(0))
        state.discard_pile.append(state.deck.pop(0))
        state.registry.commit(state.registry.get(1, 2), Zone.TRACK, 7)
        state.registry.commit(state.registry.get(2, 0), Zone.SAFE, 15)
        state.turn.loop_count = 4
        state.turn.starting_player_idx = 1
        state.phase = TurnPhase.AWAITING_CARD_CHOICE

        restored = GameState.from_dict(state.to_dict(), config)

        assert restored.to_dict() == state.to_dict()
        assert restored.state_hash() == state.state_hash()
        assert restored.registry.get(1, 2).position == 7
        assert restored.registry.get(2, 0).zone == Zone.SAFE
        assert restored.turn.loop_count == 4

    def test_from_dict_rejects_impossible_marble(self, state: GameState, config: GameConfig):
        data = state.to_dict()
        data["marbles"][0]["zone"] = Zone.TRACK.value
        data["marbles"][0]["position"] = 47
        with pytest.raises(InvariantViolation):
            GameState.from_dict(data, config)

    def test_hash_changes_with_state(self, state: GameState):
        before = state.state_hash()
        state.registry.commit(state.registry.get(0, 0), Zone.TRACK, 51)
        assert state.state_hash() != before


class TestGameStateValidation:
    """Test GameState.validate()."""

    def test_initial_state_is_valid(self, state: GameState):
        assert state.validate() == []

    def test_detects_missing_cards(self, state: GameState):
        state.deck = build_standard_deck()[:-1]
        errors = state.validate()
        assert any("Card supply" in e for e in errors)

    def test_full_deck_is_valid(self, state: GameState):
        state.deck = build_standard_deck()
        assert state.validate() == []

    def test_detects_home_marble_with_position(self, state: GameState):
        state.registry.get(0, 0).position = 20
        assert any("Home" in e for e in state.validate())

    def test_detects_track_marble_in_safe_zone(self, state: GameState):
        marble = state.registry.get(0, 0)
        marble.zone = Zone.TRACK
        marble.position = 47
        assert any("non-ring" in e for e in state.validate())

    def test_detects_game_over_mismatch(self, state: GameState):
        state.turn.game_over = True
        assert any("game_over" in e for e in state.validate())

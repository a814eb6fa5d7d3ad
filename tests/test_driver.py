"""Tests for the CLI driver and text renderer."""

import pytest

from core.cards import Card
from core.constants import Zone, Suit, Rank
from engine.driver import (
    GameDriver,
    GameResult,
    TextRenderer,
    parse_strategies,
    build_parser,
    main,
)
from engine.events import CardPlayed, MarbleMoved, MarbleCaptured, TurnAdvanced, HandsRedealt, GameWon
from engine.strategies import (
    BeginnerStrategy,
    NormalStrategy,
    IntermediateStrategy,
    ProStrategy,
    create_strategy,
)


def four_of(level: str):
    return [create_strategy(level) for _ in range(4)]


# =============================================================================
# Renderer
# =============================================================================

class TestTextRenderer:
    """Test event formatting."""

    @pytest.fixture
    def renderer(self) -> TextRenderer:
        return TextRenderer(use_colors=False)

    def test_card_played(self, renderer: TextRenderer):
        event = CardPlayed(seat=2, card=Card(Suit.HEARTS, Rank.KING))
        assert renderer.format_event(event).startswith("P2 plays ")

    def test_marble_moved_from_home(self, renderer: TextRenderer):
        event = MarbleMoved(
            seat=0, marble_index=1,
            from_zone=Zone.HOME, from_position=None,
            to_zone=Zone.TRACK, to_position=51,
        )
        assert renderer.format_event(event) == "  P0 marble 1: home -> 51"

    def test_marble_moved_into_safe_zone(self, renderer: TextRenderer):
        event = MarbleMoved(
            seat=0, marble_index=1,
            from_zone=Zone.TRACK, from_position=44,
            to_zone=Zone.SAFE, to_position=49,
        )
        assert renderer.format_event(event) == "  P0 marble 1: 44 -> 49 (safe)"

    def test_other_events(self, renderer: TextRenderer):
        assert "captured" in renderer.format_event(MarbleCaptured(seat=1, marble_index=0, home_slot=0))
        assert renderer.format_event(TurnAdvanced(new_player=3)) == "-- turn: P3"
        assert "loop 2" in renderer.format_event(HandsRedealt(hand_size=5, loop_count=2))
        assert renderer.format_event(GameWon(team=1, seats=(1, 3))) == "Team 1 (P1 & P3) wins!"

    def test_colors(self):
        colored = TextRenderer(use_colors=True).format_event(TurnAdvanced(new_player=0))
        assert "\033[" in colored


# =============================================================================
# GameDriver
# =============================================================================

class TestGameDriver:
    """Test running games."""

    def test_requires_four_strategies(self):
        with pytest.raises(ValueError):
            GameDriver([BeginnerStrategy()])

    def test_run_game(self):
        driver = GameDriver(four_of("pro"))
        result = driver.run_game(seed=3)

        assert isinstance(result, GameResult)
        assert result.turns > 0
        assert result.strategies == ("pro", "pro", "pro", "pro")
        if result.winning_team is not None:
            assert driver.engine.is_game_over()

    def test_turn_cap(self):
        driver = GameDriver(four_of("beginner"), max_turns=10)
        result = driver.run_game(seed=1)

        assert result.turns == 10
        assert result.winning_team is None

    def test_seeded_games_repeat(self):
        first = GameDriver(four_of("intermediate")).run_game(seed=12)
        second = GameDriver(four_of("intermediate")).run_game(seed=12)
        assert first == second

    def test_run_series(self):
        results = GameDriver(four_of("normal"), max_turns=200).run_series(3, seed=5)
        assert len(results) == 3

    def test_learning_series_climbs_ladder(self):
        strategies = [BeginnerStrategy(), NormalStrategy(), NormalStrategy(), NormalStrategy()]
        driver = GameDriver(strategies, max_turns=100)
        results = driver.run_learning_series(3, learner_seat=0, seed=0)

        assert [r.strategies[0] for r in results] == ["beginner", "intermediate", "pro"]
        assert isinstance(driver.strategies[0], ProStrategy)
        assert isinstance(driver.strategies[1], NormalStrategy)

    def test_learning_series_bad_seat(self):
        driver = GameDriver(four_of("normal"))
        with pytest.raises(ValueError):
            driver.run_learning_series(2, learner_seat=4)

    def test_renderer_receives_game(self, capsys):
        driver = GameDriver(four_of("normal"), renderer=TextRenderer(use_colors=False), max_turns=8)
        driver.run_game(seed=2)

        out = capsys.readouterr().out
        assert "plays" in out
        assert "GAME OVER" in out


# =============================================================================
# CLI
# =============================================================================

class TestCli:
    """Test argument parsing and the entry point."""

    def test_parse_strategies(self):
        strategies = parse_strategies("beginner, normal,intermediate,PRO")
        assert [type(s) for s in strategies] == [
            BeginnerStrategy, NormalStrategy, IntermediateStrategy, ProStrategy,
        ]

    def test_parse_strategies_wrong_count(self):
        with pytest.raises(ValueError):
            parse_strategies("pro,pro")

    def test_parser_defaults(self):
        args = build_parser().parse_args([])
        assert args.games == 1
        assert args.learning_seat is None
        assert not args.quiet

    def test_main_quiet(self, capsys):
        code = main(["--quiet", "--games", "2", "--seed", "4", "--max-turns", "50"])

        assert code == 0
        out = capsys.readouterr().out
        assert "Game 1:" in out
        assert "Game 2:" in out

    def test_main_bad_strategies(self, capsys):
        assert main(["--strategies", "pro,wizard,pro,pro"]) == 2
        assert "Error" in capsys.readouterr().err

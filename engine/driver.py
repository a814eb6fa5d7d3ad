"""CLI driver for watching the marble race.

This module provides a text-based interface that plays games between
strategies. It serves as both a runnable demo and a reference
implementation for how a GUI would interact with the game engine.

The driver is designed to be extensible:
- GameRenderer handles all display logic (can be swapped for GUI)
- GameDriver orchestrates the game loop

Usage:
    python -m engine.driver --games 3 --seed 7

Or from code:
    from engine.driver import GameDriver
    driver = GameDriver(strategies)
    result = driver.run_game(seed=7)
"""

from __future__ import annotations

import argparse
import logging
import os
import re
import sys
from abc import abstractmethod
from dataclasses import dataclass
from typing import Optional

from core.config import GameConfig
from core.constants import Zone, NUM_SEATS
from core.game_state import GameState

from engine.events import (
    EventSink,
    GameEvent,
    CardPlayed,
    MarbleMoved,
    MarbleCaptured,
    TurnAdvanced,
    HandsRedealt,
    GameWon,
)
from engine.game_engine import GameEngine
from engine.strategies import Strategy, create_strategy, improve_strategy

logger = logging.getLogger(__name__)

DEFAULT_STRATEGIES = "beginner,normal,intermediate,pro"
DEFAULT_MAX_TURNS = 5000


# =============================================================================
# Display Formatters (GUI-ready abstraction)
# =============================================================================

class GameRenderer(EventSink):
    """Abstract base class for rendering the game.

    Implement this interface to create a GUI renderer.
    The CLI renderer is provided as TextRenderer.
    """

    def handle(self, event: GameEvent) -> None:
        self.render_event(event)

    @abstractmethod
    def render_event(self, event: GameEvent) -> None:
        """Render one game event."""
        pass

    @abstractmethod
    def render_state(self, state: GameState) -> None:
        """Render the full game state."""
        pass

    @abstractmethod
    def render_message(self, message: str) -> None:
        """Render a message to the user."""
        pass

    @abstractmethod
    def render_game_over(self, state: GameState) -> None:
        """Render the game over screen."""
        pass


class TextRenderer(GameRenderer):
    """CLI text-based renderer for the game."""

    # Box drawing characters
    H_LINE = "─"
    V_LINE = "│"
    TL_CORNER = "┌"
    TR_CORNER = "┐"
    BL_CORNER = "└"
    BR_CORNER = "┘"

    # Seat colors (ANSI codes)
    PLAYER_COLORS = [
        "\033[90m",  # Black
        "\033[91m",  # Red
        "\033[94m",  # Blue
        "\033[92m",  # Green
    ]
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    def __init__(self, use_colors: bool = True):
        """Initialize the renderer.

        Args:
            use_colors: Whether to use ANSI color codes.
        """
        self.use_colors = use_colors

    def _color(self, text: str, color: str) -> str:
        """Apply color to text if colors are enabled."""
        if self.use_colors:
            return f"{color}{text}{self.RESET}"
        return text

    def _player_color(self, seat: int) -> str:
        """Get the color code for a seat."""
        return self.PLAYER_COLORS[seat % len(self.PLAYER_COLORS)]

    def _seat(self, seat: int) -> str:
        return self._color(f"P{seat}", self._player_color(seat))

    def _box(self, title: str, content: list[str], width: int = 60) -> str:
        """Create a box around content."""
        lines = []
        title_space = width - len(title) - 4
        lines.append(f"{self.TL_CORNER}{self.H_LINE}{self.H_LINE} {title} {self.H_LINE * title_space}{self.TR_CORNER}")

        for line in content:
            # Strip ANSI codes for padding calculation
            visible_len = len(self._strip_ansi(line))
            padding = max(width - visible_len - 2, 0)
            lines.append(f"{self.V_LINE} {line}{' ' * padding}{self.V_LINE}")

        lines.append(f"{self.BL_CORNER}{self.H_LINE * width}{self.BR_CORNER}")
        return "\n".join(lines)

    def _strip_ansi(self, text: str) -> str:
        """Strip ANSI escape codes from text."""
        return re.sub(r'\033\[[0-9;]*m', '', text)

    def format_event(self, event: GameEvent) -> str:
        """One-line description of an event."""
        if isinstance(event, CardPlayed):
            return f"{self._seat(event.seat)} plays {event.card}"
        if isinstance(event, MarbleMoved):
            if event.from_zone == Zone.HOME:
                origin = "home"
            else:
                origin = str(event.from_position)
            where = f"{event.to_position}"
            if event.to_zone == Zone.SAFE:
                where += " (safe)"
            return f"  {self._seat(event.seat)} marble {event.marble_index}: {origin} -> {where}"
        if isinstance(event, MarbleCaptured):
            return self._color(
                f"  P{event.seat} marble {event.marble_index} captured, "
                f"back to home slot {event.home_slot}",
                self.BOLD,
            )
        if isinstance(event, TurnAdvanced):
            return self._color(f"-- turn: P{event.new_player}", self.DIM)
        if isinstance(event, HandsRedealt):
            return f"== loop {event.loop_count}: dealt {event.hand_size} cards each =="
        if isinstance(event, GameWon):
            seats = " & ".join(f"P{s}" for s in event.seats)
            return self._color(f"Team {event.team} ({seats}) wins!", self.BOLD)
        return str(event)

    def render_event(self, event: GameEvent) -> None:
        """Print one game event."""
        print(self.format_event(event))

    def render_state(self, state: GameState) -> None:
        """Render the full game state."""
        content = []
        for player in state.players:
            marbles = []
            for m in player.marbles:
                if m.zone == Zone.HOME:
                    marbles.append("H")
                elif m.zone == Zone.SAFE:
                    marbles.append(f"S{m.position}")
                else:
                    marbles.append(str(m.position))
            current = " <--" if player.seat == state.turn.current_player_idx else ""
            content.append(
                f"{self._seat(player.seat)} (team {player.team}): "
                f"cards={len(player.hand)} marbles=[{', '.join(marbles)}]{current}"
            )
        title = f"Loop {state.turn.loop_count} / Round {state.turn.round_count}"
        print(self._box(title, content))

    def render_message(self, message: str) -> None:
        """Render a message to the user."""
        print(f"\n{message}")

    def render_game_over(self, state: GameState) -> None:
        """Render the game over screen."""
        print("\n" + "=" * 60)
        print(self._color("GAME OVER".center(60), self.BOLD))
        print("=" * 60)
        self.render_state(state)
        team = state.turn.winning_team
        if team is None:
            print("\nNo winner: turn limit reached")
        else:
            seats = " & ".join(f"P{s}" for s in state.team_seats(team))
            print(f"\n{self._color(f'Team {team} ({seats}) WINS!', self.BOLD)}")
        print("=" * 60)


# =============================================================================
# Game Driver
# =============================================================================

@dataclass
class GameResult:
    """Summary of one finished (or stalled) game.

    Attributes:
        winning_team: Index of the winning team, None if the turn cap hit.
        turns: Turns played, skipped turns included.
        loop_count: Loops completed.
        round_count: Rounds completed.
        strategies: Strategy names by seat.
    """

    winning_team: Optional[int]
    turns: int
    loop_count: int
    round_count: int
    strategies: tuple[str, ...] = ()


class GameDriver:
    """Main driver for running games between strategies.

    This class orchestrates the game loop and delegates display to a
    GameRenderer.
    """

    def __init__(
        self,
        strategies: list[Strategy],
        config: Optional[GameConfig] = None,
        renderer: Optional[GameRenderer] = None,
        max_turns: int = DEFAULT_MAX_TURNS,
    ):
        """Initialize the driver.

        Args:
            strategies: One strategy per seat.
            config: Track configuration. Default track if None.
            renderer: Where events and results are shown. Silent if None.
            max_turns: Turn cap that ends a stalled game without a winner.

        Raises:
            ValueError: If there is not exactly one strategy per seat.
        """
        if len(strategies) != NUM_SEATS:
            raise ValueError(f"Expected {NUM_SEATS} strategies, got {len(strategies)}")
        self.strategies = list(strategies)
        self.renderer = renderer
        self.max_turns = max_turns
        self.engine = GameEngine(config, sinks=[renderer] if renderer is not None else None)

    def run_game(self, seed: Optional[int] = None) -> GameResult:
        """Play one game to the end or to the turn cap.

        Args:
            seed: Seed for the deck shuffles.

        Returns:
            GameResult for the game.
        """
        engine = self.engine
        state = engine.reset(seed=seed)
        names = tuple(s.name for s in self.strategies)
        logger.debug("Starting game (seed=%s): %s", seed, ", ".join(names))

        turns = 0
        while not engine.is_game_over() and turns < self.max_turns:
            seat = state.turn.current_player_idx
            engine.play_turn(self.strategies[seat])
            turns += 1

        if not engine.is_game_over():
            logger.warning("Game stopped after %d turns without a winner", turns)
        if self.renderer is not None:
            self.renderer.render_game_over(state)

        return GameResult(
            winning_team=state.turn.winning_team,
            turns=turns,
            loop_count=state.turn.loop_count,
            round_count=state.turn.round_count,
            strategies=names,
        )

    def run_series(self, games: int, seed: Optional[int] = None) -> list[GameResult]:
        """Play several games with the same strategies."""
        return [self.run_game(_game_seed(seed, i)) for i in range(games)]

    def run_learning_series(
        self,
        games: int,
        learner_seat: int,
        seed: Optional[int] = None,
    ) -> list[GameResult]:
        """Play consecutive games, promoting one seat's strategy after each.

        Args:
            games: Number of games to play.
            learner_seat: Seat whose strategy climbs the skill ladder.
            seed: Base seed; game i uses seed + i.

        Returns:
            One GameResult per game, in order.

        Raises:
            ValueError: If the seat is invalid.
        """
        if not 0 <= learner_seat < NUM_SEATS:
            raise ValueError(f"Invalid seat: {learner_seat}")

        results = []
        for i in range(games):
            results.append(self.run_game(_game_seed(seed, i)))
            if i < games - 1:
                before = self.strategies[learner_seat]
                self.strategies[learner_seat] = improve_strategy(before)
                after = self.strategies[learner_seat]
                logger.info("Seat %d improved: %s -> %s", learner_seat, before.name, after.name)
                if self.renderer is not None:
                    self.renderer.render_message(
                        f"P{learner_seat} has learned from the game: {before.name} -> {after.name}"
                    )
        return results


def _game_seed(seed: Optional[int], game_index: int) -> Optional[int]:
    return None if seed is None else seed + game_index


# =============================================================================
# Entry Point
# =============================================================================

def parse_strategies(names_arg: str) -> list[Strategy]:
    """Parse a comma-separated list of four tier names.

    Raises:
        ValueError: If the list does not name exactly four known tiers.
    """
    names = [name.strip() for name in names_arg.split(",") if name.strip()]
    if len(names) != NUM_SEATS:
        raise ValueError(f"Expected {NUM_SEATS} strategies, got {len(names)}: {names_arg!r}")
    return [create_strategy(name) for name in names]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run marble race games between strategies")
    parser.add_argument("--games", type=int, default=1, help="Number of games to play")
    parser.add_argument("--seed", type=int, default=None, help="Base random seed")
    parser.add_argument(
        "--strategies",
        type=str,
        default=DEFAULT_STRATEGIES,
        help="Four comma-separated tiers, seat 0 first (beginner, normal, intermediate, pro)",
    )
    parser.add_argument(
        "--learning-seat",
        type=int,
        default=None,
        help="Promote this seat's strategy after every game",
    )
    parser.add_argument("--max-turns", type=int, default=DEFAULT_MAX_TURNS, help="Turn cap per game")
    parser.add_argument("--no-color", action="store_true", help="Disable ANSI colors")
    parser.add_argument("--quiet", action="store_true", help="Only print the final summary")
    parser.add_argument(
        "--log-level",
        type=str,
        default=os.getenv("LOG_LEVEL", "WARNING"),
        help="Logging level (default: $LOG_LEVEL or WARNING)",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI driver."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        strategies = parse_strategies(args.strategies)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    renderer = None if args.quiet else TextRenderer(use_colors=not args.no_color)
    driver = GameDriver(strategies, renderer=renderer, max_turns=args.max_turns)

    print("=" * 60)
    print("MARBLE RACE".center(60))
    print("=" * 60)

    try:
        if args.learning_seat is not None:
            results = driver.run_learning_series(args.games, args.learning_seat, seed=args.seed)
        else:
            results = driver.run_series(args.games, seed=args.seed)
    except KeyboardInterrupt:
        print("\n\nGame interrupted. Goodbye!")
        return 130

    print()
    for i, result in enumerate(results, 1):
        winner = "none" if result.winning_team is None else f"team {result.winning_team}"
        print(
            f"Game {i}: winner={winner}, turns={result.turns}, "
            f"loops={result.loop_count}, rounds={result.round_count} "
            f"[{', '.join(result.strategies)}]"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())

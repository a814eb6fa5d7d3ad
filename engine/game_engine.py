"""Main game engine for the marble race.

The GameEngine is the primary interface for playing the game. It provides:
- reset(): Initialize a new game
- valid_moves(): Return legal moves for a card
- play_card() / apply_move() / next_turn(): The three steps of a turn
- play_turn(): Run one full turn with a Strategy

The engine enforces all game rules. Move legality is enforced, not
trusted: an illegal move is reported as a non-applied MoveResult and never
touches the state.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Optional, TYPE_CHECKING

from core.cards import Card
from core.config import GameConfig
from core.constants import Zone, TurnPhase, MoveKind
from core.game_state import GameState
from core.track import Cell
from data.loader import load_default_config

from .captures import CaptureEvaluator
from .deck import DeckManager
from .events import EventDispatcher, EventSink, CardPlayed, MarbleMoved
from .movement import MovementResolver
from .phase_machine import PhaseMachine
from .scheduler import TurnScheduler

if TYPE_CHECKING:
    from .strategies.base import Strategy
    from .strategies.view import PlayerView

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MoveIntent:
    """A strategy's requested move for the card it played.

    Attributes:
        kind: ENTER brings a Home marble onto the base; ADVANCE moves a
            marble already on the board by the card's steps.
        marble_index: Index (0-3) of the marble to move.
    """

    kind: MoveKind
    marble_index: int

    def __str__(self) -> str:
        return f"{self.kind.value} marble {self.marble_index}"


@dataclass
class MoveResult:
    """Outcome of resolving the move for a played card.

    Attributes:
        applied: Whether a marble actually moved.
        seat: Seat that played the card.
        card: The card played.
        intent: The requested move, None if declined.
        from_zone, from_position: Marble location before the move.
        to_zone, to_position: Marble location after the move.
        captured: (seat, marble_index) of every marble sent Home.
        game_won: Whether this move ended the game.
        reason: Why the move was not applied (if it wasn't).
    """

    applied: bool
    seat: int
    card: Card
    intent: Optional[MoveIntent] = None
    from_zone: Optional[Zone] = None
    from_position: Optional[Cell] = None
    to_zone: Optional[Zone] = None
    to_position: Optional[Cell] = None
    captured: list[tuple[int, int]] = field(default_factory=list)
    game_won: bool = False
    reason: Optional[str] = None


@dataclass
class TurnResult:
    """Outcome of one full turn.

    Attributes:
        seat: Seat whose turn it was.
        card: Card played, None if the hand was empty.
        move: Move outcome, None if the turn was skipped.
        skipped: True if the player had no cards.
        advanced: Whether the turn passed to the next seat.
    """

    seat: int
    card: Optional[Card] = None
    move: Optional[MoveResult] = None
    skipped: bool = False
    advanced: bool = False


class GameEngine:
    """Main engine for playing the marble race.

    The engine owns the game state and wires together the movement
    resolver, capture evaluator, deck manager and turn scheduler.

    Usage:
        engine = GameEngine()
        engine.reset(seed=7)

        while not engine.is_game_over():
            engine.play_turn(strategies[engine.state.turn.current_player_idx])
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        sinks: Optional[list[EventSink]] = None,
    ):
        """Initialize the game engine.

        Args:
            config: Track geometry and step table. Loads the default track if None.
            sinks: Event sinks attached for every game this engine plays.
        """
        self.config = config if config is not None else load_default_config()
        self.dispatcher = EventDispatcher(sinks)
        self._state: Optional[GameState] = None
        self._phase_machine: Optional[PhaseMachine] = None
        self._resolver: Optional[MovementResolver] = None
        self._captures: Optional[CaptureEvaluator] = None
        self._deck: Optional[DeckManager] = None
        self._scheduler: Optional[TurnScheduler] = None

    @property
    def state(self) -> GameState:
        """Get the current game state.

        Raises:
            RuntimeError: If the game has not been initialized.
        """
        if self._state is None:
            raise RuntimeError("Game not initialized. Call reset() first.")
        return self._state

    @property
    def phase(self) -> TurnPhase:
        """Get the current turn phase."""
        return self.state.phase

    @property
    def resolver(self) -> MovementResolver:
        """Movement resolver bound to the current game."""
        return self._require(self._resolver)

    @property
    def scheduler(self) -> TurnScheduler:
        """Turn scheduler bound to the current game."""
        return self._require(self._scheduler)

    @property
    def deck(self) -> DeckManager:
        """Deck manager bound to the current game."""
        return self._require(self._deck)

    @property
    def captures(self) -> CaptureEvaluator:
        """Capture and win evaluator bound to the current game."""
        return self._require(self._captures)

    def _require(self, component):
        if component is None:
            raise RuntimeError("Game not initialized. Call reset() first.")
        return component

    def subscribe(self, sink: EventSink) -> None:
        """Attach an event sink."""
        self.dispatcher.subscribe(sink)

    def is_game_over(self) -> bool:
        """Check if the game has ended."""
        return self._state is not None and self._state.is_game_over()

    @property
    def winning_team(self) -> Optional[int]:
        """Index of the winning team, or None."""
        return self.state.turn.winning_team

    # -------------------------------------------------------------------------
    # Game Initialization
    # -------------------------------------------------------------------------

    def reset(self, seed: Optional[int] = None, starting_seat: int = 0) -> GameState:
        """Initialize a new game: fresh marbles, shuffled deck, first hands dealt.

        Args:
            seed: Seed for the deck shuffles. Unseeded if None.
            starting_seat: Seat that opens the first round.

        Returns:
            The initial game state, waiting for the first card.
        """
        state = GameState.create_initial_state(self.config)
        state.set_starting_player(starting_seat)
        self._attach(state, random.Random(seed))
        self._scheduler.start()
        logger.debug("New game: seed=%s, starting seat %d", seed, starting_seat)
        return state

    def load_state(self, state: GameState, seed: Optional[int] = None) -> None:
        """Continue a game from an existing state (e.g. one rebuilt by from_dict).

        Args:
            state: The state to play on. Its phase is taken as is.
            seed: Seed for future reshuffles.
        """
        self._attach(state, random.Random(seed))

    def _attach(self, state: GameState, rng: random.Random) -> None:
        self._state = state
        self._phase_machine = PhaseMachine(initial_phase=state.phase)
        self._resolver = MovementResolver(state.topology, state.registry)
        self._captures = CaptureEvaluator(state, self.dispatcher, self._phase_machine)
        self._deck = DeckManager(state, rng)
        self._scheduler = TurnScheduler(state, self._deck, self._phase_machine, self.dispatcher)

    # -------------------------------------------------------------------------
    # Move generation
    # -------------------------------------------------------------------------

    def destination(self, seat: int, card: Card, intent: MoveIntent) -> Optional[tuple[Zone, Cell]]:
        """Where a move would take its marble, without committing it.

        Args:
            seat: Seat owning the marble.
            card: Card the move is made with.
            intent: The requested move.

        Returns:
            (zone, cell) after the move, or None if the move is illegal.
        """
        state = self.state
        if not 0 <= intent.marble_index < len(state.registry.marbles_of(seat)):
            return None
        marble = state.registry.get(seat, intent.marble_index)

        if intent.kind == MoveKind.ENTER:
            if not marble.is_home() or not state.step_table.can_enter(card):
                return None
            if not self._resolver.can_enter(seat):
                return None
            return Zone.TRACK, state.topology.base(seat)

        if marble.is_home():
            return None
        target = self._resolver.resolve_marble(marble, state.step_table.steps_for(card))
        if target == marble.position:
            return None
        return self._resolver.target_zone(seat, target), target

    def valid_moves(self, seat: int, card: Card) -> list[MoveIntent]:
        """Legal moves for a seat holding a card.

        ENTER is listed once, for the lowest-index Home marble.

        Args:
            seat: The seat to generate moves for.
            card: The card to be played.

        Returns:
            List of legal MoveIntents (empty if the card cannot move anything).
        """
        moves: list[MoveIntent] = []
        home = self.state.registry.home_marbles(seat)
        if home:
            enter = MoveIntent(MoveKind.ENTER, home[0].index)
            if self.destination(seat, card, enter) is not None:
                moves.append(enter)

        for marble in self.state.registry.marbles_of(seat):
            if marble.is_home():
                continue
            advance = MoveIntent(MoveKind.ADVANCE, marble.index)
            if self.destination(seat, card, advance) is not None:
                moves.append(advance)
        return moves

    # -------------------------------------------------------------------------
    # Turn steps
    # -------------------------------------------------------------------------

    def play_card(self, card: Card) -> None:
        """Current player discards a card to take their turn.

        Raises:
            RuntimeError: If the engine is not waiting for a card.
            ValueError: If the current player does not hold the card.
        """
        state = self.state
        if state.phase != TurnPhase.AWAITING_CARD_CHOICE:
            raise RuntimeError(f"Cannot play a card during {state.phase.value}")

        seat = state.turn.current_player_idx
        self._deck.discard(seat, card)
        state.pending_card = card
        self._scheduler.enter_phase(TurnPhase.AWAITING_MOVE)
        self.dispatcher.emit(CardPlayed(seat=seat, card=card))

    def apply_move(self, intent: Optional[MoveIntent]) -> MoveResult:
        """Resolve the move for the card just played.

        A declined (None) or illegal intent still consumes the card and
        leaves the board untouched.

        Raises:
            RuntimeError: If no card is waiting for its move.
        """
        state = self.state
        card = state.pending_card
        if state.phase != TurnPhase.AWAITING_MOVE or card is None:
            raise RuntimeError(f"No card waiting for a move (phase {state.phase.value})")
        state.pending_card = None

        seat = state.turn.current_player_idx
        if intent is None:
            return MoveResult(applied=False, seat=seat, card=card, reason="declined")

        destination = self.destination(seat, card, intent)
        if destination is None:
            logger.debug("Seat %d: illegal move %s with %s", seat, intent, card)
            return MoveResult(
                applied=False, seat=seat, card=card, intent=intent,
                reason=f"{intent} is not legal with {card}",
            )

        marble = state.registry.get(seat, intent.marble_index)
        from_zone, from_position = marble.zone, marble.position
        to_zone, to_position = destination
        state.registry.commit(marble, to_zone, to_position)
        self.dispatcher.emit(
            MarbleMoved(
                seat=seat,
                marble_index=marble.index,
                from_zone=from_zone,
                from_position=from_position,
                to_zone=to_zone,
                to_position=to_position,
            )
        )

        captured = []
        if to_zone == Zone.TRACK:
            captured = self._captures.apply_captures(marble, to_position)
        game_won = self._captures.check_win()

        return MoveResult(
            applied=True,
            seat=seat,
            card=card,
            intent=intent,
            from_zone=from_zone,
            from_position=from_position,
            to_zone=to_zone,
            to_position=to_position,
            captured=[m.key for m in captured],
            game_won=game_won,
        )

    def next_turn(self) -> bool:
        """Pass the turn to the next seat. No-op once the game is over."""
        return self.scheduler.next_turn()

    def play_turn(self, strategy: Strategy, advance: bool = True) -> TurnResult:
        """Run one full turn for the current player.

        Args:
            strategy: Decides the card and the move.
            advance: If False, the turn is left open so a host can call
                next_turn() itself (e.g. after an animation finishes).

        Returns:
            TurnResult describing what happened.
        """
        state = self.state
        seat = state.turn.current_player_idx
        if self.is_game_over():
            return TurnResult(seat=seat)

        player = state.get_player(seat)
        if not player.has_cards():
            advanced = self.next_turn() if advance else False
            return TurnResult(seat=seat, skipped=True, advanced=advanced)

        view = self.player_view(seat)
        card = strategy.choose_card(view)
        self.play_card(card)
        intent = strategy.choose_move(view, card)
        move = self.apply_move(intent)

        advanced = False
        if advance and not self.is_game_over():
            advanced = self.next_turn()
        return TurnResult(seat=seat, card=card, move=move, advanced=advanced)

    def player_view(self, seat: int) -> PlayerView:
        """Read-only view of the game for one seat."""
        from .strategies.view import PlayerView

        return PlayerView(self, seat)

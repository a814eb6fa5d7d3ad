"""Turn scheduler for the marble race engine.

Drives whose turn it is and how hands are replenished:
- Seats play in order 0 -> 1 -> 2 -> 3 -> 0
- A round completes each time turn order returns to the starting seat
- A loop completes when a round ends with every hand empty; new hands are
  dealt (4 cards for loops 0-1, 5 from loop 2 onward)
- Every 3rd loop the starting seat moves to the next seat
- Once the game is over nothing is scheduled any more
"""

from __future__ import annotations

import logging

from core.constants import (
    TurnPhase,
    INITIAL_HAND_SIZE,
    EXTENDED_HAND_SIZE,
    EXTENDED_HAND_FROM_LOOP,
    STARTING_SEAT_ROTATION_LOOPS,
)
from core.game_state import GameState

from .deck import DeckManager
from .events import EventDispatcher, TurnAdvanced, HandsRedealt
from .phase_machine import PhaseMachine

logger = logging.getLogger(__name__)


def hand_size_for_loop(loop_count: int) -> int:
    """Cards dealt per player for a given loop count."""
    if loop_count < EXTENDED_HAND_FROM_LOOP:
        return INITIAL_HAND_SIZE
    return EXTENDED_HAND_SIZE


class TurnScheduler:
    """Single owner of the TurnState counters and the phase machine."""

    def __init__(
        self,
        state: GameState,
        deck: DeckManager,
        phase_machine: PhaseMachine,
        dispatcher: EventDispatcher,
    ):
        """Initialize the scheduler.

        Args:
            state: Game state whose TurnState is driven.
            deck: Deals new hands when a loop completes.
            phase_machine: Validates every phase change.
            dispatcher: Where TurnAdvanced and HandsRedealt are emitted.
        """
        self.state = state
        self.deck = deck
        self.phase_machine = phase_machine
        self.dispatcher = dispatcher

    hand_size_for_loop = staticmethod(hand_size_for_loop)

    def enter_phase(self, phase: TurnPhase) -> None:
        """Move the phase machine and the state to a new phase.

        Raises:
            RuntimeError: If the transition is not allowed.
        """
        result = self.phase_machine.transition_to(phase)
        if not result.success:
            raise RuntimeError(result.reason)
        self.state.set_phase(phase)

    def start(self) -> None:
        """Build, shuffle and deal the first hands, then open the first turn.

        Raises:
            RuntimeError: If the game has already started.
        """
        if self.phase_machine.phase != TurnPhase.IDLE:
            raise RuntimeError(f"Game already started (phase {self.phase_machine.phase.value})")

        turn = self.state.turn
        self.deck.build()
        self.deck.shuffle()
        self.deck.deal(hand_size_for_loop(turn.loop_count))
        turn.current_player_idx = turn.starting_player_idx

        self.enter_phase(TurnPhase.AWAITING_CARD_CHOICE)
        self.dispatcher.emit(TurnAdvanced(new_player=turn.current_player_idx))

    def next_turn(self) -> bool:
        """Pass the turn to the next seat.

        Returns:
            False if the game is over (nothing happens), True otherwise.
        """
        turn = self.state.turn
        if turn.game_over or self.phase_machine.is_game_over():
            return False

        self.state.advance_current_player()

        if self.phase_machine.is_round_complete(self.state):
            turn.round_count += 1
            self.enter_phase(TurnPhase.ROUND_COMPLETE)
            if self.state.all_hands_empty():
                self._redeal()

        self.enter_phase(TurnPhase.AWAITING_CARD_CHOICE)
        self.state.pending_card = None
        self.dispatcher.emit(TurnAdvanced(new_player=turn.current_player_idx))
        return True

    def _redeal(self) -> None:
        """Complete a loop: deal new hands and maybe rotate the starting seat."""
        turn = self.state.turn
        self.enter_phase(TurnPhase.DEALING_HANDS)

        turn.loop_count += 1
        hand_size = hand_size_for_loop(turn.loop_count)
        self.deck.deal(hand_size)
        logger.info("Loop %d: dealt %d cards per player", turn.loop_count, hand_size)
        self.dispatcher.emit(HandsRedealt(hand_size=hand_size, loop_count=turn.loop_count))

        if turn.loop_count % STARTING_SEAT_ROTATION_LOOPS == 0:
            new_start = (turn.starting_player_idx + 1) % self.state.num_players()
            self.state.set_starting_player(new_start)
            turn.current_player_idx = new_start
            logger.debug("Starting seat rotated to %d", new_start)

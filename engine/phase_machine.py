"""Phase state machine for the marble race engine.

Manages turn phase transitions including:
- Game start (hands dealt, first player asked for a card)
- The per-turn card choice and move resolution
- Round completion and redealing once every hand is empty
- Game over detection

The phase machine enforces valid transitions; the turn scheduler decides
when they occur.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from core.constants import TurnPhase

if TYPE_CHECKING:
    from core.game_state import GameState


# Valid phase transitions
PHASE_TRANSITIONS: dict[TurnPhase, list[TurnPhase]] = {
    TurnPhase.IDLE: [TurnPhase.AWAITING_CARD_CHOICE],
    # Per-turn loop; an empty hand skips straight to the next seat
    TurnPhase.AWAITING_CARD_CHOICE: [
        TurnPhase.AWAITING_MOVE,
        TurnPhase.AWAITING_CARD_CHOICE,
        TurnPhase.ROUND_COMPLETE,
        TurnPhase.GAME_OVER,
    ],
    TurnPhase.AWAITING_MOVE: [
        TurnPhase.AWAITING_CARD_CHOICE,
        TurnPhase.ROUND_COMPLETE,
        TurnPhase.GAME_OVER,
    ],
    # Back at the starting seat
    TurnPhase.ROUND_COMPLETE: [
        TurnPhase.DEALING_HANDS,
        TurnPhase.AWAITING_CARD_CHOICE,
        TurnPhase.GAME_OVER,
    ],
    TurnPhase.DEALING_HANDS: [TurnPhase.AWAITING_CARD_CHOICE, TurnPhase.GAME_OVER],
    # Terminal
    TurnPhase.GAME_OVER: [],
}


@dataclass
class PhaseTransitionResult:
    """Result of a phase transition attempt.

    Attributes:
        success: Whether the transition was successful.
        new_phase: The new phase if successful, None otherwise.
        reason: Description of why the transition failed (if it did).
    """

    success: bool
    new_phase: Optional[TurnPhase]
    reason: Optional[str] = None


class PhaseMachine:
    """State machine for managing turn phase transitions.

    The phase machine tracks the current phase and enforces valid
    transitions. It does not modify game state directly - it only
    computes what the next phase may be.

    Phases:
        - IDLE: Game created, no hands dealt yet
        - AWAITING_CARD_CHOICE: Current player must pick a card
        - AWAITING_MOVE: Card discarded, move not yet resolved
        - ROUND_COMPLETE: Turn order came back to the starting seat
        - DEALING_HANDS: All hands empty, new hands being dealt
        - GAME_OVER: Terminal state
    """

    def __init__(self, initial_phase: TurnPhase = TurnPhase.IDLE):
        """Initialize the phase machine.

        Args:
            initial_phase: The starting phase (default: IDLE).
        """
        self._phase = initial_phase

    @property
    def phase(self) -> TurnPhase:
        """Get the current phase."""
        return self._phase

    def get_valid_transitions(self) -> list[TurnPhase]:
        """Get the list of valid next phases from the current phase.

        Returns:
            List of phases that can be transitioned to.
        """
        return PHASE_TRANSITIONS.get(self._phase, [])

    def can_transition_to(self, target_phase: TurnPhase) -> bool:
        """Check if a transition to the target phase is valid.

        Args:
            target_phase: The phase to transition to.

        Returns:
            True if the transition is valid, False otherwise.
        """
        return target_phase in self.get_valid_transitions()

    def transition_to(self, target_phase: TurnPhase) -> PhaseTransitionResult:
        """Attempt to transition to a new phase.

        Args:
            target_phase: The phase to transition to.

        Returns:
            PhaseTransitionResult indicating success or failure.
        """
        if not self.can_transition_to(target_phase):
            valid = self.get_valid_transitions()
            return PhaseTransitionResult(
                success=False,
                new_phase=None,
                reason=f"Cannot transition from {self._phase.value} to {target_phase.value}. "
                f"Valid transitions: {[p.value for p in valid]}",
            )

        self._phase = target_phase
        return PhaseTransitionResult(success=True, new_phase=target_phase)

    def is_game_over(self) -> bool:
        """Check if the game has ended."""
        return self._phase == TurnPhase.GAME_OVER

    def is_awaiting_card(self) -> bool:
        """Check if the current player must choose a card."""
        return self._phase == TurnPhase.AWAITING_CARD_CHOICE

    def is_awaiting_move(self) -> bool:
        """Check if a played card is waiting for its move."""
        return self._phase == TurnPhase.AWAITING_MOVE

    # -------------------------------------------------------------------------
    # Phase transition logic helpers
    # -------------------------------------------------------------------------

    def is_round_complete(self, state: GameState) -> bool:
        """Check if turn order has come back to the starting seat.

        Args:
            state: The current game state.
        """
        return state.turn.current_player_idx == state.turn.starting_player_idx

    def should_redeal(self, state: GameState) -> bool:
        """Check if the round just completed also exhausted every hand.

        Args:
            state: The current game state.

        Returns:
            True if new hands should be dealt.
        """
        return self.is_round_complete(state) and state.all_hands_empty()

    # -------------------------------------------------------------------------
    # String representation
    # -------------------------------------------------------------------------

    def __str__(self) -> str:
        """Return string representation of the phase machine."""
        return f"PhaseMachine(phase={self._phase.value})"

    def __repr__(self) -> str:
        """Return detailed representation of the phase machine."""
        return f"PhaseMachine(phase={self._phase!r})"

"""Capture and win evaluation.

Captures protect only the identical player: a teammate's marble on the
landed cell goes Home just like an opponent's. A team wins once every
marble of both teammates is inside its safe zone.
"""

from __future__ import annotations

import logging
from typing import Optional

from core.constants import Zone, TurnPhase
from core.game_state import GameState
from core.marble import Marble
from core.track import Cell

from .events import EventDispatcher, MarbleCaptured, GameWon
from .phase_machine import PhaseMachine

logger = logging.getLogger(__name__)


class CaptureEvaluator:
    """Reacts to a committed move: captures first, then victory."""

    def __init__(
        self,
        state: GameState,
        dispatcher: EventDispatcher,
        phase_machine: Optional[PhaseMachine] = None,
    ):
        """Initialize the evaluator.

        Args:
            state: Game state to inspect and update.
            dispatcher: Where capture and win events are emitted.
            phase_machine: Moved to GAME_OVER alongside the state on a win.
        """
        self.state = state
        self.dispatcher = dispatcher
        self.phase_machine = phase_machine

    def apply_captures(self, moved_marble: Marble, landed_cell: Cell) -> list[Marble]:
        """Send every other player's marble on the landed ring cell Home.

        Args:
            moved_marble: The marble that just moved.
            landed_cell: Cell it landed on.

        Returns:
            The captured marbles.
        """
        registry = self.state.registry
        victims = [
            m
            for m in registry.marbles_at(landed_cell)
            if m.seat != moved_marble.seat and m.zone == Zone.TRACK
        ]
        for victim in victims:
            registry.commit(victim, Zone.HOME, None)
            logger.debug(
                "Seat %d captured seat %d marble %d on cell %d",
                moved_marble.seat, victim.seat, victim.index, landed_cell,
            )
            self.dispatcher.emit(
                MarbleCaptured(seat=victim.seat, marble_index=victim.index, home_slot=victim.index)
            )
        return victims

    def winning_team(self) -> Optional[int]:
        """Team whose marbles are all safe, or None."""
        for team_idx, seats in enumerate(self.state.topology.teams):
            if all(self.state.get_player(seat).all_marbles_safe() for seat in seats):
                return team_idx
        return None

    def check_win(self) -> bool:
        """Check for a winning team, ending the game on the first detection.

        Returns:
            True if the game has been won (now or earlier).
        """
        turn = self.state.turn
        if turn.game_over:
            return True

        team = self.winning_team()
        if team is None:
            return False

        turn.game_over = True
        turn.winning_team = team
        if self.phase_machine is not None:
            self.phase_machine.transition_to(TurnPhase.GAME_OVER)
        self.state.set_phase(TurnPhase.GAME_OVER)

        seats = tuple(self.state.topology.teams[team])
        logger.info("Team %d (seats %s) wins", team, seats)
        self.dispatcher.emit(GameWon(team=team, seats=seats))
        return True

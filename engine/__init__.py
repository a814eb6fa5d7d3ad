"""Game engine for the marble race.

This module provides the game logic including:
- Movement resolution, captures and win detection
- Deck management and the turn scheduler with its phase machine
- Game engine for coordinating game play
- Strategies for the four difficulty tiers
"""

from .phase_machine import (
    PhaseMachine,
    PhaseTransitionResult,
    PHASE_TRANSITIONS,
)

from .events import (
    GameEvent,
    CardPlayed,
    MarbleMoved,
    MarbleCaptured,
    TurnAdvanced,
    HandsRedealt,
    GameWon,
    EventSink,
    EventDispatcher,
    RecordingSink,
)

from .movement import MovementResolver
from .captures import CaptureEvaluator
from .deck import DeckManager
from .scheduler import TurnScheduler, hand_size_for_loop

from .game_engine import (
    GameEngine,
    MoveIntent,
    MoveResult,
    TurnResult,
)

__all__ = [
    # Phase machine
    "PhaseMachine",
    "PhaseTransitionResult",
    "PHASE_TRANSITIONS",
    # Events
    "GameEvent",
    "CardPlayed",
    "MarbleMoved",
    "MarbleCaptured",
    "TurnAdvanced",
    "HandsRedealt",
    "GameWon",
    "EventSink",
    "EventDispatcher",
    "RecordingSink",
    # Rules
    "MovementResolver",
    "CaptureEvaluator",
    "DeckManager",
    "TurnScheduler",
    "hand_size_for_loop",
    # Game engine
    "GameEngine",
    "MoveIntent",
    "MoveResult",
    "TurnResult",
]

"""Core data models for the marble race engine."""

from .constants import (
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
    INITIAL_HAND_SIZE,
    EXTENDED_HAND_SIZE,
    EXTENDED_HAND_FROM_LOOP,
    STARTING_SEAT_ROTATION_LOOPS,
    REDIRECT_APPROACH_WINDOW,
    DEFAULT_CARD_STEPS,
    ENTRY_RANKS,
)

from .errors import InvariantViolation, ExhaustedSupplyError

from .track import Cell, SeatLayout, TrackTopology, make_seat_layout

from .cards import Card, StepTable, build_standard_deck

from .config import GameConfig

from .marble import Marble, MarbleRegistry

from .player import Player

from .game_state import TurnState, GameState

__all__ = [
    # Constants
    "Zone",
    "Suit",
    "Rank",
    "TurnPhase",
    "MoveKind",
    "SkillLevel",
    "NUM_SEATS",
    "MARBLES_PER_PLAYER",
    "SAFE_ZONE_LENGTH",
    "DEFAULT_RING_LENGTH",
    "TEAMS",
    "INITIAL_HAND_SIZE",
    "EXTENDED_HAND_SIZE",
    "EXTENDED_HAND_FROM_LOOP",
    "STARTING_SEAT_ROTATION_LOOPS",
    "REDIRECT_APPROACH_WINDOW",
    "DEFAULT_CARD_STEPS",
    "ENTRY_RANKS",
    # Errors
    "InvariantViolation",
    "ExhaustedSupplyError",
    # Track
    "Cell",
    "SeatLayout",
    "TrackTopology",
    "make_seat_layout",
    # Cards
    "Card",
    "StepTable",
    "build_standard_deck",
    # Configuration
    "GameConfig",
    # Marbles
    "Marble",
    "MarbleRegistry",
    # Player
    "Player",
    # Game State
    "TurnState",
    "GameState",
]

"""Constants and enums for the marble race engine."""

from enum import Enum


class Zone(Enum):
    """Where a marble currently is."""

    HOME = "home"  # Off the board, no position
    TRACK = "track"  # On the shared ring
    SAFE = "safe"  # Inside the owner's private safe zone


class Suit(Enum):
    """Card suits. Cosmetic only: no rule depends on the suit."""

    CLUBS = "clubs"
    DIAMONDS = "diamonds"
    HEARTS = "hearts"
    SPADES = "spades"


class Rank(Enum):
    """Card ranks of a standard deck."""

    ACE = "ace"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "jack"
    QUEEN = "queen"
    KING = "king"


class TurnPhase(Enum):
    """Phases of the turn scheduler."""

    IDLE = "idle"
    AWAITING_CARD_CHOICE = "awaiting_card_choice"
    AWAITING_MOVE = "awaiting_move"
    ROUND_COMPLETE = "round_complete"
    DEALING_HANDS = "dealing_hands"
    GAME_OVER = "game_over"


class MoveKind(Enum):
    """Kinds of marble moves a strategy can request."""

    ENTER = "enter"  # Bring a marble from Home onto its base cell
    ADVANCE = "advance"  # Move a marble on the board by the card's steps


class SkillLevel(Enum):
    """Strategy difficulty tiers, weakest first."""

    BEGINNER = "beginner"
    NORMAL = "normal"
    INTERMEDIATE = "intermediate"
    PRO = "pro"


# Table geometry
NUM_SEATS = 4
MARBLES_PER_PLAYER = 4
SAFE_ZONE_LENGTH = 4
DEFAULT_RING_LENGTH = 67

# Fixed team pairing: opposite seats share a victory condition
TEAMS = ((0, 2), (1, 3))

# Hand sizing and starting-seat rotation
INITIAL_HAND_SIZE = 4
EXTENDED_HAND_SIZE = 5
EXTENDED_HAND_FROM_LOOP = 2  # Loop count from which hands grow to 5 cards
STARTING_SEAT_ROTATION_LOOPS = 3  # Starting seat moves on every 3rd loop

# Approach cells (before the safe zone) where the overshoot redirect applies
REDIRECT_APPROACH_WINDOW = 3

# Card rank to signed step count. FOUR is the only backward card.
DEFAULT_CARD_STEPS = {
    Rank.ACE: 1,
    Rank.TWO: 2,
    Rank.THREE: 3,
    Rank.FOUR: -4,
    Rank.FIVE: 5,
    Rank.SIX: 6,
    Rank.SEVEN: 7,
    Rank.EIGHT: 8,
    Rank.NINE: 9,
    Rank.TEN: 10,
    Rank.JACK: 11,
    Rank.QUEEN: 12,
    Rank.KING: 13,
}

# Ranks that can bring a marble out of Home onto its base
ENTRY_RANKS = (Rank.ACE, Rank.KING)

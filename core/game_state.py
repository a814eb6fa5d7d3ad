"""Game state for the marble race engine.

GameState is the single source of truth for the entire game.
It combines all components and provides methods for cloning,
serialization, and state hashing for RL rollouts.
"""

from __future__ import annotations

import copy
import hashlib
import json
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional, Any

from .constants import (
    Zone,
    TurnPhase,
    NUM_SEATS,
    MARBLES_PER_PLAYER,
    INITIAL_HAND_SIZE,
)
from .cards import Card, StepTable, build_standard_deck
from .config import GameConfig
from .marble import Marble, MarbleRegistry
from .player import Player
from .track import TrackTopology


@dataclass
class TurnState:
    """Whose turn it is and how far the game has progressed.

    Attributes:
        current_player_idx: Seat whose turn it is.
        starting_player_idx: Seat that opens each round; rotates every 3rd loop.
        loop_count: Completed cycles of dealing and exhausting all hands.
        round_count: Completed passes of turns through all four seats.
        hand_size: Cards dealt per player at the last deal.
        game_over: Set once a team wins; terminal.
        winning_team: Index of the winning team, if any.
    """

    current_player_idx: int = 0
    starting_player_idx: int = 0
    loop_count: int = 0
    round_count: int = 0
    hand_size: int = INITIAL_HAND_SIZE
    game_over: bool = False
    winning_team: Optional[int] = None


@dataclass
class GameState:
    """The complete game state - single source of truth.

    Attributes:
        config: Track geometry and card-to-steps table.
        players: All four players in seat order.
        registry: Zone/position store for every marble.
        deck: Draw pile; cards are drawn from the front.
        discard_pile: Played cards, oldest first.
        turn: Turn, round and loop tracking.
        phase: Current turn scheduler phase.
        pending_card: Card played this turn whose move is not yet resolved.
            It has already been discarded and is not counted separately.
    """

    config: GameConfig
    players: list[Player]
    registry: MarbleRegistry
    deck: list[Card] = field(default_factory=list)
    discard_pile: list[Card] = field(default_factory=list)
    turn: TurnState = field(default_factory=TurnState)
    phase: TurnPhase = TurnPhase.IDLE
    pending_card: Optional[Card] = None

    @classmethod
    def create_initial_state(cls, config: GameConfig) -> GameState:
        """Create a fresh state: every marble Home, empty deck and hands.

        Args:
            config: Track geometry and step table.

        Returns:
            A new GameState in the IDLE phase.

        Raises:
            ValueError: If the topology does not describe four seats.
        """
        topology = config.topology
        if topology.num_seats != NUM_SEATS:
            raise ValueError(
                f"Track must have {NUM_SEATS} seats, got {topology.num_seats}"
            )

        players = []
        marbles: dict[int, list[Marble]] = {}
        for seat in range(NUM_SEATS):
            seat_marbles = [Marble(seat=seat, index=i) for i in range(MARBLES_PER_PLAYER)]
            marbles[seat] = seat_marbles
            players.append(
                Player(seat=seat, team=topology.team_of(seat), marbles=seat_marbles)
            )

        return cls(
            config=config,
            players=players,
            registry=MarbleRegistry(topology, marbles),
        )

    # -------------------------------------------------------------------------
    # Configuration access
    # -------------------------------------------------------------------------

    @property
    def topology(self) -> TrackTopology:
        """Track geometry."""
        return self.config.topology

    @property
    def step_table(self) -> StepTable:
        """Card-to-steps table."""
        return self.config.step_table

    # -------------------------------------------------------------------------
    # Player access methods
    # -------------------------------------------------------------------------

    def get_current_player(self) -> Player:
        """Get the player whose turn it is."""
        return self.players[self.turn.current_player_idx]

    def get_player(self, seat: int) -> Player:
        """Get a player by seat.

        Raises:
            ValueError: If the seat is invalid.
        """
        if not 0 <= seat < len(self.players):
            raise ValueError(f"Invalid seat: {seat}")
        return self.players[seat]

    def get_starting_player(self) -> Player:
        """Get the seat that opens each round."""
        return self.players[self.turn.starting_player_idx]

    def num_players(self) -> int:
        """Return the number of players."""
        return len(self.players)

    def advance_current_player(self) -> None:
        """Move to the next seat in turn order."""
        self.turn.current_player_idx = (self.turn.current_player_idx + 1) % len(self.players)

    def set_starting_player(self, seat: int) -> None:
        """Set the seat that opens each round.

        Raises:
            ValueError: If the seat is invalid.
        """
        if not 0 <= seat < len(self.players):
            raise ValueError(f"Invalid seat: {seat}")
        self.turn.starting_player_idx = seat

    def all_hands_empty(self) -> bool:
        """Check if every player has played all their cards."""
        return all(not p.has_cards() for p in self.players)

    def team_seats(self, team: int) -> tuple[int, ...]:
        """Seats making up a team."""
        return self.topology.teams[team]

    # -------------------------------------------------------------------------
    # Phase management
    # -------------------------------------------------------------------------

    def set_phase(self, phase: TurnPhase) -> None:
        """Set the current scheduler phase."""
        self.phase = phase

    def is_game_over(self) -> bool:
        """Check if the game has ended."""
        return self.phase == TurnPhase.GAME_OVER or self.turn.game_over

    # -------------------------------------------------------------------------
    # Cloning and serialization
    # -------------------------------------------------------------------------

    def clone(self) -> GameState:
        """Create a deep copy of the game state.

        Used for RL rollouts and hypothetical state exploration.
        """
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the mutable game state to a dictionary.

        Marble zones/positions, hands, deck and discard order and every
        TurnState field are stored verbatim. The configuration is not.
        """
        return {
            "phase": self.phase.value,
            "turn": {
                "current_player_idx": self.turn.current_player_idx,
                "starting_player_idx": self.turn.starting_player_idx,
                "loop_count": self.turn.loop_count,
                "round_count": self.turn.round_count,
                "hand_size": self.turn.hand_size,
                "game_over": self.turn.game_over,
                "winning_team": self.turn.winning_team,
            },
            "pending_card": self.pending_card.to_dict() if self.pending_card else None,
            "players": [
                {
                    "seat": p.seat,
                    "team": p.team,
                    "hand": [card.to_dict() for card in p.hand],
                }
                for p in self.players
            ],
            "marbles": [
                {
                    "seat": m.seat,
                    "index": m.index,
                    "zone": m.zone.value,
                    "position": m.position,
                }
                for m in self.registry.all_marbles()
            ],
            "deck": [card.to_dict() for card in self.deck],
            "discard_pile": [card.to_dict() for card in self.discard_pile],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], config: GameConfig) -> GameState:
        """Rebuild a game state produced by to_dict().

        Marbles are placed through MarbleRegistry.restore(), which rejects
        impossible placements. Call validate() afterwards to check the rest.

        Args:
            data: Dictionary produced by to_dict().
            config: The configuration the state was played with.

        Raises:
            InvariantViolation: If a recorded marble placement is impossible.
        """
        state = cls.create_initial_state(config)

        for player_data in data["players"]:
            player = state.get_player(player_data["seat"])
            player.hand = [Card.from_dict(c) for c in player_data["hand"]]

        for marble_data in data["marbles"]:
            marble = state.registry.get(marble_data["seat"], marble_data["index"])
            state.registry.restore(marble, Zone(marble_data["zone"]), marble_data["position"])

        state.deck = [Card.from_dict(c) for c in data["deck"]]
        state.discard_pile = [Card.from_dict(c) for c in data["discard_pile"]]
        state.turn = TurnState(**data["turn"])
        state.phase = TurnPhase(data["phase"])
        pending = data.get("pending_card")
        state.pending_card = Card.from_dict(pending) if pending else None
        return state

    def state_hash(self) -> str:
        """Compute a hash of the game state.

        Useful for detecting duplicate states in RL algorithms
        and for state caching.
        """
        state_json = json.dumps(self.to_dict(), sort_keys=True)
        return hashlib.sha256(state_json.encode()).hexdigest()

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate(self) -> list[str]:
        """Validate the game state for consistency.

        Returns:
            List of validation error messages (empty if valid).
        """
        errors: list[str] = []
        topology = self.topology

        for i, player in enumerate(self.players):
            if player.seat != i:
                errors.append(f"Player at index {i} has seat {player.seat} (expected {i})")

        if not 0 <= self.turn.current_player_idx < len(self.players):
            errors.append(f"Invalid current_player_idx: {self.turn.current_player_idx}")
        if not 0 <= self.turn.starting_player_idx < len(self.players):
            errors.append(f"Invalid starting_player_idx: {self.turn.starting_player_idx}")

        for marble in self.registry.all_marbles():
            if marble.zone == Zone.HOME:
                if marble.position is not None:
                    errors.append(f"{marble} is Home but has a position")
            elif marble.position is None:
                errors.append(f"{marble} is on the board without a position")
            elif marble.zone == Zone.SAFE:
                if not topology.is_own_safe_zone(marble.seat, marble.position):
                    errors.append(f"{marble} is Safe outside its own safe zone")
            elif not topology.is_ring_cell(marble.position):
                errors.append(f"{marble} is on the track at a non-ring cell")

        for player in self.players:
            cells = [m.position for m in player.marbles if m.position is not None]
            if len(cells) != len(set(cells)):
                errors.append(f"Seat {player.seat} has two marbles on one cell")

        cards = list(self.deck) + list(self.discard_pile)
        for player in self.players:
            cards.extend(player.hand)
        expected = Counter(build_standard_deck())
        if Counter(cards) != expected and cards:
            errors.append(
                f"Card supply is inconsistent: {len(cards)} cards tracked, "
                f"{len(expected)} expected"
            )

        if self.turn.game_over != (self.phase == TurnPhase.GAME_OVER):
            errors.append("game_over flag and GAME_OVER phase disagree")

        return errors

    # -------------------------------------------------------------------------
    # String representation
    # -------------------------------------------------------------------------

    def __str__(self) -> str:
        """Return a human-readable string representation."""
        lines = [
            f"GameState(phase={self.phase.value}, loop={self.turn.loop_count}, "
            f"round={self.turn.round_count})",
            f"  Current player: {self.turn.current_player_idx}",
            f"  Starting player: {self.turn.starting_player_idx}",
            f"  Deck: {len(self.deck)}, discard: {len(self.discard_pile)}",
            f"  Players ({len(self.players)}):",
        ]
        for p in self.players:
            marbles = ", ".join(
                m.zone.value if m.position is None else f"{m.zone.value}@{m.position}"
                for m in p.marbles
            )
            lines.append(f"    P{p.seat} (team {p.team}): cards={len(p.hand)} [{marbles}]")
        return "\n".join(lines)

"""Observation encoding for the marble race RL environment.

Encodes what one seat can see of the game into a flat numpy array
suitable for neural network input. Uses self-relative seat encoding where
the observing seat is always index 0 and its teammate index 2.
"""

from __future__ import annotations

import numpy as np
from typing import Sequence, TYPE_CHECKING

from core.cards import Card
from core.constants import Rank, Zone
from core.game_state import GameState
from core.marble import Marble
from core.track import TrackTopology
from .config import ObservationConfig, DEFAULT_OBS_CONFIG

if TYPE_CHECKING:
    from engine.strategies.view import PlayerView


_ZONE_INDEX = {zone: idx for idx, zone in enumerate(Zone)}
_RANK_INDEX = {rank: idx for idx, rank in enumerate(Rank)}


class ObservationEncoder:
    """Encodes the visible game state into a flat observation tensor.

    The observation is structured as follows:
    1. Marble features [NUM_SEATS x MARBLES_PER_PLAYER x MARBLE_FEATURE_DIM]
    2. Hand features [HAND_FEATURE_DIM]
    3. Global state [GLOBAL_FEATURE_DIM]

    All features are normalized to the [0, 1] range. Other seats' hands
    are reduced to their sizes, so the encoding never leaks hidden cards.
    """

    def __init__(self, config: ObservationConfig = DEFAULT_OBS_CONFIG):
        """Initialize the encoder with configuration.

        Args:
            config: Observation configuration defining tensor dimensions.
        """
        self.config = config

    @property
    def observation_dim(self) -> int:
        """Total dimension of the flat observation tensor."""
        return self.config.total_observation_dim

    def encode(self, state: GameState, seat: int) -> np.ndarray:
        """Encode a game state from one seat's perspective.

        Args:
            state: The GameState to encode.
            seat: The seat whose perspective to use.

        Returns:
            Flat numpy array of shape (total_observation_dim,) with dtype float32.
        """
        return self._encode(
            topology=state.topology,
            seat=seat,
            marbles_by_seat={p.seat: state.registry.marbles_of(p.seat) for p in state.players},
            hand=state.get_player(seat).hand,
            hand_sizes={p.seat: len(p.hand) for p in state.players},
            starting_seat=state.turn.starting_player_idx,
            loop_count=state.turn.loop_count,
            round_count=state.turn.round_count,
        )

    def encode_view(self, view: PlayerView) -> np.ndarray:
        """Encode the game as seen through a strategy's PlayerView."""
        return self._encode(
            topology=view.topology,
            seat=view.seat,
            marbles_by_seat={s: view.marbles_of(s) for s in range(view.topology.num_seats)},
            hand=view.hand,
            hand_sizes=view.hand_sizes(),
            starting_seat=view.starting_seat,
            loop_count=view.loop_count,
            round_count=view.round_count,
        )

    def _encode(
        self,
        topology: TrackTopology,
        seat: int,
        marbles_by_seat: dict[int, list[Marble]],
        hand: Sequence[Card],
        hand_sizes: dict[int, int],
        starting_seat: int,
        loop_count: int,
        round_count: int,
    ) -> np.ndarray:
        obs = np.zeros(self.config.total_observation_dim, dtype=np.float32)
        seat_order = self._get_seat_order(seat)

        offset = 0
        offset = self._encode_marbles(topology, seat_order, marbles_by_seat, obs, offset)
        offset = self._encode_hand(hand, obs, offset)
        offset = self._encode_global(
            seat_order, hand_sizes, starting_seat, loop_count, round_count, obs, offset
        )
        return obs

    def _encode_marbles(
        self,
        topology: TrackTopology,
        seat_order: list[int],
        marbles_by_seat: dict[int, list[Marble]],
        obs: np.ndarray,
        offset: int,
    ) -> int:
        """Encode marble features into observation tensor.

        Marble features (4 per marble):
        - zone (3): one-hot over home, track, safe
        - progress (1): race progress along the owner's route, normalized
        """
        feature_dim = self.config.MARBLE_FEATURE_DIM

        for rel_idx, actual_seat in enumerate(seat_order):
            max_progress = max(topology.max_progress(actual_seat), 1)
            marbles = sorted(marbles_by_seat.get(actual_seat, []), key=lambda m: m.index)
            for marble in marbles[: self.config.MARBLES_PER_PLAYER]:
                base = offset + (rel_idx * self.config.MARBLES_PER_PLAYER + marble.index) * feature_dim

                obs[base + _ZONE_INDEX[marble.zone]] = 1.0

                progress = topology.progress(actual_seat, marble.zone, marble.position)
                # Home marbles report -1; they stay at 0
                obs[base + self.config.ZONES] = max(progress, 0) / max_progress

        return offset + self.config.marble_features_size

    def _encode_hand(self, hand: Sequence[Card], obs: np.ndarray, offset: int) -> int:
        """Encode the observing seat's hand.

        Hand features (14 total):
        - rank counts (13): copies of each rank held, divided by the 4 suits
        - hand size (1): normalized by the largest hand
        """
        for card in hand:
            obs[offset + _RANK_INDEX[card.rank]] += 0.25
        obs[offset + self.config.RANKS] = min(len(hand) / self.config.MAX_HAND_SIZE, 1.0)

        return offset + self.config.hand_features_size

    def _encode_global(
        self,
        seat_order: list[int],
        hand_sizes: dict[int, int],
        starting_seat: int,
        loop_count: int,
        round_count: int,
        obs: np.ndarray,
        offset: int,
    ) -> int:
        """Encode global state features into observation tensor.

        Global features (10 total):
        - starting seat (4): one-hot in self-relative order
        - hand sizes (4): per seat in self-relative order, normalized
        - loop_count (1): normalized
        - round_count (1): normalized
        """
        base = offset
        i = 0

        for actual_seat in seat_order:
            obs[base + i] = 1.0 if actual_seat == starting_seat else 0.0
            i += 1

        for actual_seat in seat_order:
            obs[base + i] = min(hand_sizes.get(actual_seat, 0) / self.config.MAX_HAND_SIZE, 1.0)
            i += 1

        obs[base + i] = min(loop_count / self.config.MAX_LOOPS, 1.0)
        i += 1
        obs[base + i] = min(round_count / self.config.MAX_ROUNDS, 1.0)
        i += 1

        return offset + self.config.global_features_size

    def _get_seat_order(self, seat: int) -> list[int]:
        """Get seats in self-relative order (observer first, then clockwise)."""
        num_seats = self.config.NUM_SEATS
        return [(seat + i) % num_seats for i in range(num_seats)]

    def get_observation_space_shape(self) -> tuple[int, ...]:
        """Return the shape of the observation space."""
        return (self.config.total_observation_dim,)

    def get_observation_bounds(self) -> tuple[float, float]:
        """Return the min and max bounds for observation values."""
        return (0.0, 1.0)

"""Game events and notification sinks.

The engine commits every state change synchronously, then emits an event
describing it. Sinks (renderers, loggers, test recorders) are advisory:
the engine's state is authoritative whether or not any sink is attached.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, TypeVar

from core.cards import Card
from core.constants import Zone


@dataclass(frozen=True)
class GameEvent:
    """Base class for everything the engine emits."""


@dataclass(frozen=True)
class CardPlayed(GameEvent):
    """A player discarded a card to take their turn."""

    seat: int
    card: Card


@dataclass(frozen=True)
class MarbleMoved(GameEvent):
    """A marble changed zone and/or position."""

    seat: int
    marble_index: int
    from_zone: Zone
    from_position: Optional[int]
    to_zone: Zone
    to_position: Optional[int]


@dataclass(frozen=True)
class MarbleCaptured(GameEvent):
    """A marble was sent back to its Home slot."""

    seat: int
    marble_index: int
    home_slot: int


@dataclass(frozen=True)
class TurnAdvanced(GameEvent):
    """The turn passed to a new seat."""

    new_player: int


@dataclass(frozen=True)
class HandsRedealt(GameEvent):
    """All hands were exhausted and new hands were dealt."""

    hand_size: int
    loop_count: int


@dataclass(frozen=True)
class GameWon(GameEvent):
    """A team brought all of its marbles into their safe zones."""

    team: int
    seats: tuple[int, ...]


E = TypeVar("E", bound=GameEvent)


class EventSink(ABC):
    """Receives game events.

    Implement this interface to drive a renderer, animation layer or log.
    """

    @abstractmethod
    def handle(self, event: GameEvent) -> None:
        """Handle one emitted event."""
        pass


class EventDispatcher:
    """Fans events out to every subscribed sink, in subscription order."""

    def __init__(self, sinks: Optional[list[EventSink]] = None):
        self._sinks: list[EventSink] = list(sinks or [])

    def subscribe(self, sink: EventSink) -> None:
        """Attach a sink."""
        if sink not in self._sinks:
            self._sinks.append(sink)

    def unsubscribe(self, sink: EventSink) -> None:
        """Detach a sink. Unknown sinks are ignored."""
        if sink in self._sinks:
            self._sinks.remove(sink)

    @property
    def sinks(self) -> list[EventSink]:
        """Currently attached sinks."""
        return list(self._sinks)

    def emit(self, event: GameEvent) -> None:
        """Deliver an event to every sink."""
        for sink in self._sinks:
            sink.handle(event)


class RecordingSink(EventSink):
    """Keeps every event it receives. Used by tests and the RL environment."""

    def __init__(self) -> None:
        self.events: list[GameEvent] = []

    def handle(self, event: GameEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: type[E]) -> list[E]:
        """Recorded events of one type, in emission order."""
        return [e for e in self.events if isinstance(e, event_type)]

    def clear(self) -> None:
        """Forget all recorded events."""
        self.events.clear()

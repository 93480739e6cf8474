"""Typed event bus — decoupled notification of state transitions.

Services emit events after each successful transition; the adapter
layer (REST, logging, autosave notices) subscribes to them.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, TypeVar, Type

T = TypeVar("T")


# -- Economy events ------------------------------------------------------

@dataclass(frozen=True)
class FactoryPurchased:
    """A factory was bought."""
    age_key: str
    factory_key: str
    owned: int
    cost: int


@dataclass(frozen=True)
class ScientistHired:
    """A scientist was hired."""
    count: int
    cost: int


# -- Research events -----------------------------------------------------

@dataclass(frozen=True)
class ResearchCompleted:
    """A research task reached its required progress."""
    task_index: int
    task_name: str


@dataclass(frozen=True)
class AgeUnlocked:
    """An age and its factories became available."""
    age_key: str
    age_name: str


# -- Combat events -------------------------------------------------------

@dataclass(frozen=True)
class RaidResolved:
    """A raid finished."""
    enemy_name: str
    player_won: bool
    reward: int
    casualties: int


@dataclass(frozen=True)
class SiegeStarted:
    """A siege mission was launched."""
    weapon_type: str
    weapons_sent: int
    end_timestamp: float


@dataclass(frozen=True)
class SiegeCompleted:
    """A siege mission paid out."""
    weapon_type: str
    reward: float


# -- Session events ------------------------------------------------------

@dataclass(frozen=True)
class GameSaved:
    """A snapshot was written."""
    path: str
    saved_at: float


# -- Event Bus -----------------------------------------------------------

class EventBus:
    """Simple synchronous event bus with typed events.

    Usage:
        bus = EventBus()
        bus.on(AgeUnlocked, lambda e: print(e.age_name))
        bus.emit(AgeUnlocked(age_key="bronze", age_name="Bronze Age"))
    """

    def __init__(self) -> None:
        self._handlers: dict[type, list[Callable[[Any], None]]] = defaultdict(list)

    def on(self, event_type: Type[T], handler: Callable[[T], None]) -> None:
        """Register a handler for an event type."""
        self._handlers[event_type].append(handler)

    def off(self, event_type: Type[T], handler: Callable[[T], None]) -> None:
        """Unregister a handler."""
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: object) -> None:
        """Emit an event to all registered handlers."""
        for handler in self._handlers.get(type(event), []):
            handler(event)

    def clear(self) -> None:
        """Remove all handlers."""
        self._handlers.clear()

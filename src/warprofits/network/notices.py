"""Notice board — user-facing messages derived from game events.

Collects short notices ("Bronze Age Unlocked!", "Game saved") for the
client to show and dismiss. Oldest notices are dropped past ``maxlen``.
"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

from warprofits.util.events import (
    AgeUnlocked,
    GameSaved,
    RaidResolved,
    SiegeCompleted,
    SiegeStarted,
)
from warprofits.util.types import format_money

if TYPE_CHECKING:
    from warprofits.util.events import EventBus


class NoticeBoard:
    """Bounded queue of pending notices fed by the event bus."""

    def __init__(self, maxlen: int = 50) -> None:
        self._notices: deque[str] = deque(maxlen=maxlen)

    def subscribe(self, bus: EventBus) -> None:
        """Register handlers for every event that produces a notice."""
        bus.on(AgeUnlocked, lambda e: self.post(f"{e.age_name} Unlocked!"))
        bus.on(GameSaved, lambda e: self.post("Game saved"))
        bus.on(SiegeStarted, lambda e: self.post(
            f"Siege started with {e.weapons_sent} {e.weapon_type}"))
        bus.on(SiegeCompleted, lambda e: self.post(
            f"Siege complete! Earned ${format_money(e.reward)}"))
        bus.on(RaidResolved, self._on_raid)

    def _on_raid(self, event: RaidResolved) -> None:
        if event.player_won:
            self.post(f"Victory over {event.enemy_name}! Earned ${format_money(event.reward)}")
        else:
            self.post(f"Defeated by {event.enemy_name}. Lost {event.casualties} weapons")

    def post(self, text: str) -> None:
        self._notices.append(text)

    def drain(self) -> list[str]:
        """Return all pending notices and clear them."""
        notices = list(self._notices)
        self._notices.clear()
        return notices

    def __len__(self) -> int:
        return len(self._notices)

"""Siege service — long-running missions with a delayed reward.

A siege commits weapons for a fixed duration (14 hours by default).
The reward is fixed at launch and paid when the tick notices the end
timestamp has passed. Only one siege may run at a time.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from warprofits.models.game_state import SiegeMission
from warprofits.util import constants as c
from warprofits.util.events import SiegeCompleted, SiegeStarted

if TYPE_CHECKING:
    from warprofits.loaders.game_config_loader import GameConfig
    from warprofits.models.game_state import GameState
    from warprofits.util.events import EventBus

log = logging.getLogger(__name__)


class SiegeService:
    """Service managing the single siege slot.

    Args:
        event_bus: Event bus for siege lifecycle events.
        game_config: Siege duration and reward multiplier.
    """

    def __init__(self, event_bus: EventBus, game_config: GameConfig | None = None) -> None:
        self._events = event_bus
        if game_config is not None:
            self._duration = game_config.siege_duration_s
            self._multiplier = game_config.siege_reward_multiplier
        else:
            self._duration = c.SIEGE_DURATION_S
            self._multiplier = c.SIEGE_REWARD_MULTIPLIER

    # -- Query -----------------------------------------------------------

    def remaining_seconds(self, state: GameState, now: float) -> float:
        """Seconds until the active siege pays out (0 when idle)."""
        if not state.siege.active:
            return 0.0
        return max(0.0, state.siege.end_timestamp - now)

    # -- Lifecycle -------------------------------------------------------

    def start(self, state: GameState, weapon_type: str, amount: int, now: float) -> SiegeMission | str:
        """Launch a siege. Returns the mission or an error string."""
        if state.siege.active:
            return "A siege is already in progress"
        if weapon_type not in state.weapon_inventory:
            return f"Unknown weapon: {weapon_type}"
        if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
            return "Siege needs at least one weapon"
        have = state.weapon_inventory[weapon_type]
        if have < amount:
            return f"Not enough {weapon_type} (need {amount}, have {int(have)})"

        state.weapon_inventory[weapon_type] = have - amount
        state.siege = SiegeMission(
            active=True,
            end_timestamp=now + self._duration,
            reward=amount * self._multiplier,
            weapon_type=weapon_type,
            weapons_sent=amount,
        )
        log.info("Siege started: %d x %s, reward=%.0f, ends in %.0fs",
                 amount, weapon_type, state.siege.reward, self._duration)
        self._events.emit(SiegeStarted(
            weapon_type=weapon_type, weapons_sent=amount,
            end_timestamp=state.siege.end_timestamp,
        ))
        return state.siege

    def resolve(self, state: GameState, now: float) -> Optional[float]:
        """Pay out the siege if it is due. Returns the reward paid, or None."""
        siege = state.siege
        if not siege.active or now < siege.end_timestamp:
            return None
        reward = siege.reward
        state.money += reward
        weapon_type = siege.weapon_type or ""
        state.siege = SiegeMission()
        log.info("Siege completed: %s paid %.0f", weapon_type, reward)
        self._events.emit(SiegeCompleted(weapon_type=weapon_type, reward=reward))
        return reward

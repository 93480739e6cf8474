"""Game session — the single owner of a GameState.

Every state transition goes through the session: the periodic tick and
each player command run under one lock, so they never interleave even
when the REST adapter and the game loop run on different threads.

The session exposes:

- **Commands**: buy_factory, hire_scientist, launch_raid, start_siege,
  save, reset.
- **Queries**: summary, factories, balance, research, inventory, siege: every
  quantity the rendering layer displays.

Domain failures are returned as error strings, never raised.
"""

from __future__ import annotations

import copy
import logging
import threading
import time
from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional

from warprofits.models.game_state import GameState, SiegeMission, new_game_state
from warprofits.persistence.state_save import DEFAULT_STATE_PATH, save_state
from warprofits.util.events import GameSaved
from warprofits.util.types import format_money, format_percent, format_time

if TYPE_CHECKING:
    from warprofits.engine.economy_service import EconomyService
    from warprofits.engine.raid_service import RaidService
    from warprofits.engine.research_service import ResearchService
    from warprofits.engine.siege_service import SiegeService
    from warprofits.loaders.game_config_loader import GameConfig
    from warprofits.models.battle import RaidResult
    from warprofits.models.catalog import Catalog
    from warprofits.util.events import EventBus

log = logging.getLogger(__name__)


class GameSession:
    """Simulation controller for one game.

    Args:
        state: The game state; owned by the session from now on.
        catalog: Static content, used for resets.
        event_bus: Event bus shared with the services.
        economy: Factory pricing and production.
        research: Research queue and scientists.
        raids: Raid resolution.
        sieges: Siege missions.
        game_config: Offline cap, starting money and save path.
        clock: Wall-clock source in seconds.
    """

    def __init__(
        self,
        state: GameState,
        catalog: Catalog,
        event_bus: EventBus,
        economy: EconomyService,
        research: ResearchService,
        raids: RaidService,
        sieges: SiegeService,
        game_config: GameConfig | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._state = state
        self._catalog = catalog
        self._events = event_bus
        self._economy = economy
        self._research = research
        self._raids = raids
        self._sieges = sieges
        self._clock = clock
        self._lock = threading.RLock()
        if game_config is not None:
            self._max_elapsed = game_config.max_elapsed_seconds
            self._starting_money = game_config.starting_money
            self._state_path = game_config.state_file
        else:
            self._max_elapsed = None
            self._starting_money = 0.0
            self._state_path = DEFAULT_STATE_PATH

    @property
    def state(self) -> GameState:
        """Direct state access, for tests and persistence."""
        return self._state

    def now(self) -> float:
        return self._clock()

    # -- Tick ------------------------------------------------------------

    def tick(self, now: float | None = None) -> float:
        """Advance the simulation to ``now``. Returns the elapsed seconds used.

        Elapsed time is the wall-clock delta since the last tick, which
        includes any time the game was not running.
        """
        if now is None:
            now = self._clock()
        with self._lock:
            state = self._state
            elapsed = max(0.0, now - state.last_update)
            if self._max_elapsed is not None:
                elapsed = min(elapsed, self._max_elapsed)
            state.last_update = now

            self._economy.step(state, elapsed)
            self._research.step(state, elapsed)
            self._sieges.resolve(state, now)
            return elapsed

    # -- Commands --------------------------------------------------------

    def buy_factory(self, age_key: str, factory_key: str) -> Optional[str]:
        """Buy one factory. Returns error message or None."""
        with self._lock:
            return self._economy.purchase(self._state, age_key, factory_key)

    def hire_scientist(self) -> Optional[str]:
        """Hire one scientist. Returns error message or None."""
        with self._lock:
            return self._research.hire_scientist(self._state)

    def launch_raid(self, tier: str, army: Mapping[str, int]) -> RaidResult | str:
        """Raid an enemy of ``tier``. Returns the result or an error string."""
        with self._lock:
            return self._raids.raid(self._state, tier, army)

    def start_siege(self, weapon_type: str, amount: int) -> SiegeMission | str:
        """Launch a siege. Returns the mission or an error string."""
        with self._lock:
            return self._sieges.start(self._state, weapon_type, amount, self._clock())

    def reset(self) -> None:
        """Discard all progress and start a fresh game."""
        with self._lock:
            self._state = new_game_state(self._catalog, money=self._starting_money,
                                         now=self._clock())
        log.info("Game reset")

    async def save(self, path: str | None = None) -> str:
        """Write a snapshot. Returns the path written."""
        path = path or self._state_path
        with self._lock:
            snapshot = copy.deepcopy(self._state)
        await save_state(snapshot, path)
        self._events.emit(GameSaved(path=path, saved_at=self._clock()))
        return path

    # -- Queries ---------------------------------------------------------

    def summary(self) -> dict[str, Any]:
        """Headline numbers: balance, income, scientists, research, siege."""
        with self._lock:
            state = self._state
            income = self._economy.income_per_second(state)
            return {
                "money": int(state.money),
                "money_display": format_money(state.money),
                "economy_mode": "weapons" if self._economy.weapon_economy else "money",
                "income_per_second": income,
                "income_per_hour": income * 3600,
                "scientists": state.scientists.count,
                "scientist_cost": self._research.scientist_cost(state),
                "research": self._research_view(state),
                "ages": {
                    key: {"name": age.name, "unlocked": age.unlocked}
                    for key, age in state.ages.items()
                },
                "inventory": self._inventory_view(state),
                "siege": self._siege_view(state),
                "last_update": state.last_update,
            }

    def factories(self) -> list[dict[str, Any]]:
        """Per-factory cost, owned count and production of unlocked ages."""
        with self._lock:
            rows: list[dict[str, Any]] = []
            for age in self._state.ages.values():
                if not age.unlocked:
                    continue
                for factory in age.factories.values():
                    rate = self._economy.effective_rate(factory)
                    rows.append({
                        "age": age.key,
                        "key": factory.key,
                        "name": factory.name,
                        "owned": factory.owned,
                        "cost": self._economy.cost(factory),
                        "rate_per_hour": rate * 60,
                        "total_per_hour": factory.owned * rate * 60,
                        "until_next_bonus": self._economy.units_to_next_milestone(factory),
                    })
            return rows

    def balance(self) -> int:
        """Current balance, truncated for display."""
        with self._lock:
            return int(self._state.money)

    def research(self) -> dict[str, Any]:
        with self._lock:
            return self._research_view(self._state)

    def inventory(self) -> dict[str, int]:
        with self._lock:
            return self._inventory_view(self._state)

    def siege(self) -> dict[str, Any]:
        with self._lock:
            return self._siege_view(self._state)

    # -- Views -----------------------------------------------------------

    def _research_view(self, state: GameState) -> dict[str, Any]:
        task = state.current_task()
        percent = self._research.progress_percent(state)
        return {
            "task": self._research.task_name(state),
            "target_age": task.age_key if task is not None else None,
            "progress": task.progress if task is not None else 0.0,
            "required": task.required if task is not None else 0.0,
            "percent": percent,
            "percent_display": format_percent(percent),
            "rate": self._research.rate(state),
            "scientists": state.scientists.count,
            "scientist_cost": self._research.scientist_cost(state),
        }

    def _inventory_view(self, state: GameState) -> dict[str, int]:
        return {key: int(amount) for key, amount in state.weapon_inventory.items()}

    def _siege_view(self, state: GameState) -> dict[str, Any]:
        remaining = self._sieges.remaining_seconds(state, self._clock())
        siege = state.siege
        return {
            "active": siege.active,
            "weapon_type": siege.weapon_type,
            "weapons_sent": siege.weapons_sent,
            "reward": siege.reward,
            "end_timestamp": siege.end_timestamp,
            "remaining_seconds": remaining,
            "remaining_display": format_time(remaining),
        }

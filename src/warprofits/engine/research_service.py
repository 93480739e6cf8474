"""Research service — scientists, research progress and age unlocks.

Research accrues at log2(scientists + 1) points per second, so every
extra scientist helps a little less. Only the head of the research
queue progresses; completing it unlocks the task's age and moves the
head to the next task.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Optional

from warprofits.models.game_state import GameState, ScientistPool
from warprofits.util.constants import ALL_RESEARCH_DONE
from warprofits.util.events import AgeUnlocked, ResearchCompleted, ScientistHired

if TYPE_CHECKING:
    from warprofits.util.events import EventBus

log = logging.getLogger(__name__)


def research_rate(scientist_count: int) -> float:
    """Points per second for a scientist count; zero scientists yield zero."""
    return math.log2(scientist_count + 1)


def scientist_cost(pool: ScientistPool) -> int:
    """Price of the next scientist: floor(base_cost * multiplier ** count)."""
    return math.floor(pool.base_cost * pool.cost_multiplier ** pool.count)


class ResearchService:
    """Service for the research queue and scientist pool.

    Args:
        event_bus: Event bus for hire / completion / unlock notifications.
    """

    def __init__(self, event_bus: EventBus) -> None:
        self._events = event_bus

    # -- Queries ---------------------------------------------------------

    def rate(self, state: GameState) -> float:
        return research_rate(state.scientists.count)

    def scientist_cost(self, state: GameState) -> int:
        return scientist_cost(state.scientists)

    def task_name(self, state: GameState) -> str:
        task = state.current_task()
        return task.name if task is not None else ALL_RESEARCH_DONE

    def progress_percent(self, state: GameState) -> float:
        """Progress of the active task in percent, 100 when all are done."""
        task = state.current_task()
        if task is None:
            return 100.0
        if task.required <= 0:
            return 100.0
        return min(100.0, task.progress / task.required * 100.0)

    # -- Tick ------------------------------------------------------------

    def step(self, state: GameState, dt: float) -> None:
        """Advance the active research task by dt seconds."""
        task = state.current_task()
        if task is None or task.unlocked or dt <= 0:
            return

        rate = self.rate(state)
        if rate <= 0:
            return
        task.progress += rate * dt
        if task.progress >= task.required:
            task.progress = task.required
            task.unlocked = True
            index = state.research_index
            state.research_index += 1
            log.info("Research %r completed", task.name)
            self._events.emit(ResearchCompleted(task_index=index, task_name=task.name))
            self.unlock_age(state, task.age_key)

    def unlock_age(self, state: GameState, age_key: str) -> bool:
        """Unlock an age. Returns True if it was locked before.

        Unlocking is irreversible; unlocking an unlocked age is a no-op.
        """
        age = state.ages.get(age_key)
        if age is None:
            log.warning("Cannot unlock unknown age %s", age_key)
            return False
        if age.unlocked:
            return False
        age.unlocked = True
        log.info("%s unlocked", age.name)
        self._events.emit(AgeUnlocked(age_key=age.key, age_name=age.name))
        return True

    # -- Actions ---------------------------------------------------------

    def hire_scientist(self, state: GameState) -> Optional[str]:
        """Hire one scientist. Returns error message or None."""
        cost = self.scientist_cost(state)
        if state.money < cost:
            log.debug("Scientist hire rejected: need %d, have %.1f", cost, state.money)
            return f"Not enough money (need {cost}, have {int(state.money)})"
        state.money -= cost
        state.scientists.count += 1
        log.info("Hired scientist #%d for %d", state.scientists.count, cost)
        self._events.emit(ScientistHired(count=state.scientists.count, cost=cost))
        return None

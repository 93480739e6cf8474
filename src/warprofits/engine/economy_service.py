"""Economy service — factory pricing, production and purchases.

Responsibilities:
- Exponential factory cost scaling
- Milestone production bonuses (output doubles every 25 owned)
- Purchase transactions gated on the balance
- Passive accrual into money or the weapon inventory

All methods operate on GameState model objects. No network I/O.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Optional

from warprofits.models.game_state import Factory, GameState
from warprofits.util.constants import MILESTONE_SIZE, SECONDS_PER_MINUTE
from warprofits.util.events import FactoryPurchased

if TYPE_CHECKING:
    from warprofits.loaders.game_config_loader import GameConfig
    from warprofits.util.events import EventBus

log = logging.getLogger(__name__)


def factory_cost(factory: Factory) -> int:
    """Price of the next unit: floor(base_cost * multiplier ** owned)."""
    return math.floor(factory.base_cost * factory.cost_multiplier ** factory.owned)


def effective_rate(factory: Factory, milestone_size: int = MILESTONE_SIZE) -> float:
    """Per-minute output of one unit, doubled for every full milestone owned."""
    milestones = factory.owned // milestone_size
    return factory.base_rate * 2 ** milestones


def units_to_next_milestone(factory: Factory, milestone_size: int = MILESTONE_SIZE) -> int:
    """Purchases left until the next doubling (a full step right after one)."""
    remainder = factory.owned % milestone_size
    return milestone_size - remainder


class EconomyService:
    """Service for factory purchases and production.

    Args:
        event_bus: Event bus for purchase notifications.
        game_config: Gameplay constants (milestone size, economy mode).
    """

    def __init__(self, event_bus: EventBus, game_config: GameConfig | None = None) -> None:
        self._events = event_bus
        if game_config is not None:
            self._milestone_size = game_config.milestone_size
            self._weapon_economy = game_config.weapon_economy
        else:
            self._milestone_size = MILESTONE_SIZE
            self._weapon_economy = False

    @property
    def weapon_economy(self) -> bool:
        return self._weapon_economy

    # -- Formulas --------------------------------------------------------

    def cost(self, factory: Factory) -> int:
        return factory_cost(factory)

    def effective_rate(self, factory: Factory) -> float:
        return effective_rate(factory, self._milestone_size)

    def units_to_next_milestone(self, factory: Factory) -> int:
        return units_to_next_milestone(factory, self._milestone_size)

    def production_per_second(self, factory: Factory) -> float:
        """Output of all owned units of a factory line per second."""
        return factory.owned * self.effective_rate(factory) / SECONDS_PER_MINUTE

    def income_per_second(self, state: GameState) -> float:
        """Total output per second over every unlocked age."""
        return sum(self.production_per_second(f) for f in state.unlocked_factories())

    # -- Tick ------------------------------------------------------------

    def step(self, state: GameState, dt: float) -> None:
        """Accrue dt seconds of production from every unlocked factory."""
        if dt <= 0:
            return
        if self._weapon_economy:
            for factory in state.unlocked_factories():
                produced = self.production_per_second(factory) * dt
                if produced > 0:
                    state.weapon_inventory[factory.key] = (
                        state.weapon_inventory.get(factory.key, 0.0) + produced
                    )
        else:
            state.money += self.income_per_second(state) * dt

    # -- Actions ---------------------------------------------------------

    def purchase(self, state: GameState, age_key: str, factory_key: str) -> Optional[str]:
        """Buy one unit of a factory. Returns error message or None.

        Debits the balance and increments ``owned`` only when the balance
        covers the cost; otherwise nothing changes.
        """
        age = state.ages.get(age_key)
        if age is None:
            return f"Unknown age: {age_key}"
        if not age.unlocked:
            return f"{age.name} is locked"
        factory = age.factories.get(factory_key)
        if factory is None:
            return f"Unknown factory: {factory_key}"

        cost = self.cost(factory)
        if state.money < cost:
            log.debug("Purchase of %s rejected: need %d, have %.1f", factory_key, cost, state.money)
            return f"Not enough money (need {cost}, have {int(state.money)})"

        state.money -= cost
        factory.owned += 1
        log.info("Bought %s for %d (owned=%d)", factory.name, cost, factory.owned)
        self._events.emit(FactoryPurchased(
            age_key=age_key, factory_key=factory_key, owned=factory.owned, cost=cost,
        ))
        return None
